"""In-memory implementations of the payload and event repositories"""
from typing import Dict, List, Optional

from ..domain.models import WorkflowDocument, WorkflowEvent
from ..domain.errors import AlreadyExistsError, ConcurrencyError, PayloadNotFoundError
from .base import EventRepository, PayloadRepository


class InMemoryPayloadRepository(PayloadRepository):
    """Store payloads in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts. Payloads are copied on the way in
    and out so callers never share state with the store.
    """

    def __init__(self) -> None:
        self._payloads: Dict[str, WorkflowDocument] = {}

    def create(self, payload: WorkflowDocument) -> WorkflowDocument:
        if payload.id in self._payloads:
            raise AlreadyExistsError(f"Payload {payload.id} already exists", details={"payload_id": payload.id})
        self._payloads[payload.id] = payload.model_copy(deep=True)
        return payload

    def save(
        self,
        payload: WorkflowDocument,
        expected_state_id: Optional[str] = None
    ) -> WorkflowDocument:
        if expected_state_id is not None:
            stored = self._payloads.get(payload.id)
            if stored is None:
                raise PayloadNotFoundError(f"Payload {payload.id} not found", details={"payload_id": payload.id})
            if stored.state_id != expected_state_id:
                raise ConcurrencyError(
                    f"Payload {payload.id} was modified. Please refresh and try again.",
                    details={"expected_state_id": expected_state_id, "state_id": stored.state_id}
                )
        self._payloads[payload.id] = payload.model_copy(deep=True)
        return payload

    def load(self, payload_id: str) -> WorkflowDocument:
        stored = self._payloads.get(payload_id)
        if stored is None:
            raise PayloadNotFoundError(f"Payload {payload_id} not found", details={"payload_id": payload_id})
        return stored.model_copy(deep=True)

    def list_by_workflow(self, workflow_id: str, state_id: Optional[str] = None) -> List[WorkflowDocument]:
        return [
            p.model_copy(deep=True)
            for p in self._payloads.values()
            if p.workflow_id == workflow_id and (state_id is None or p.state_id == state_id)
        ]


class InMemoryEventRepository(EventRepository):
    """Append-only event log kept in a list

    Events are copied in and out so their payload snapshots cannot be
    edited through a reference held by a caller.
    """

    def __init__(self) -> None:
        self._events: List[WorkflowEvent] = []

    def append(self, event: WorkflowEvent) -> WorkflowEvent:
        self._events.append(event.model_copy(deep=True))
        return event

    def list_for_payload(self, payload_id: str) -> List[WorkflowEvent]:
        return [e.model_copy(deep=True) for e in self._events if e.payload_id == payload_id]

    def __len__(self) -> int:
        return len(self._events)
