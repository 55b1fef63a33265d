"""Audit Writer - Build append-only workflow events"""
from typing import Optional

from ..domain.models import Actor, WorkflowEvent, WorkflowPayload
from ..utils.idgen import IdGenerator, generate_event_id
from ..utils.time import Clock, utc_now


class AuditWriter:
    """
    Build workflow events (append-only)

    Every successful transition produces exactly one event. The writer only
    constructs it; persisting is the caller's job. Id generation and the
    clock are injectable so events can be made deterministic.
    """

    def __init__(
        self,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None
    ):
        self.id_generator = id_generator or generate_event_id
        self.clock = clock or utc_now

    def write_transition(
        self,
        payload: WorkflowPayload,
        prev_state_id: str,
        action_id: str,
        new_state_id: str,
        actor: Actor,
        remarks: Optional[str] = None,
        correlation_id: Optional[str] = None
    ) -> WorkflowEvent:
        """Build the event for one transition, snapshotting the payload as it is now"""
        return WorkflowEvent(
            id=self.id_generator(),
            payload_id=payload.id,
            timestamp=self.clock(),
            prev_state_id=prev_state_id,
            action_id=action_id,
            new_state_id=new_state_id,
            performed_by=actor.id,
            remarks=remarks or None,
            payload=payload.model_dump(mode="json"),
            correlation_id=correlation_id
        )
