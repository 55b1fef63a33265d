"""Workflow Service - Load, transition and persist workflow documents"""
from typing import Any, Dict, List, Optional

from ..config.settings import Settings, settings as default_settings
from ..domain.enums import PersistenceBackend
from ..domain.models import Action, Actor, WorkflowDocument, WorkflowEvent
from ..domain.errors import PayloadNotFoundError, ValidationError
from ..engine.engine import WorkflowInstance
from ..repositories.base import EventRepository, PayloadRepository
from ..repositories.inmemory import InMemoryEventRepository, InMemoryPayloadRepository
from ..repositories.payload_repo import MongoPayloadRepository
from ..repositories.audit_repo import MongoEventRepository
from ..utils.idgen import IdGenerator, generate_id, generate_payload_id
from ..utils.time import Clock
from ..utils.logger import get_logger
from .definition_loader import DefinitionRegistry

logger = get_logger(__name__)

RESERVED_PAYLOAD_FIELDS = frozenset({
    "id", "state_id", "workflow_id", "created_by", "title", "payload_id", "initiator"
})


class WorkflowService:
    """
    Caller side of the engine

    Owns the stores: loads the payload, builds a WorkflowInstance for the
    acting user, then persists the mutated payload and appends the event.
    The payload write is conditioned on the state read before the
    transition, so two actors racing on one payload cannot both succeed.
    """

    def __init__(
        self,
        registry: DefinitionRegistry,
        payload_repo: PayloadRepository,
        event_repo: EventRepository,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None
    ):
        self.registry = registry
        self.payload_repo = payload_repo
        self.event_repo = event_repo
        self.id_generator = id_generator
        self.clock = clock

    # =========================================================================
    # Payloads
    # =========================================================================

    def create_payload(
        self,
        workflow_id: str,
        initiator: Actor,
        payload_id: Optional[str] = None,
        title: Optional[str] = None,
        fields: Optional[Dict[str, Any]] = None
    ) -> WorkflowDocument:
        """Create a document in the definition's initial state; fields are its business data"""
        fields = fields or {}
        reserved = RESERVED_PAYLOAD_FIELDS.intersection(fields)
        if reserved:
            raise ValidationError(
                f"Fields {sorted(reserved)} are managed by the workflow",
                details={"fields": sorted(reserved)}
            )
        definition = self.registry.get(workflow_id)
        payload = WorkflowDocument(
            id=payload_id or generate_payload_id(),
            state_id=definition.initial_state_id,
            workflow_id=workflow_id,
            created_by=initiator,
            title=title,
            **fields
        )
        self.payload_repo.create(payload)
        logger.info(
            f"Created payload {payload.id} in state {payload.state_id}",
            extra={"workflow_id": workflow_id, "payload_id": payload.id, "actor_id": initiator.id}
        )
        return payload

    def get_payload(self, payload_id: str, workflow_id: Optional[str] = None) -> WorkflowDocument:
        """Load a document, optionally requiring it to belong to a workflow"""
        payload = self.payload_repo.load(payload_id)
        if workflow_id is not None and payload.workflow_id != workflow_id:
            raise PayloadNotFoundError(
                f"Payload {payload_id} not found in workflow {workflow_id}",
                details={"payload_id": payload_id, "workflow_id": workflow_id}
            )
        return payload

    def list_payloads(self, workflow_id: str, state_id: Optional[str] = None) -> List[WorkflowDocument]:
        self.registry.get(workflow_id)
        return self.payload_repo.list_by_workflow(workflow_id, state_id=state_id)

    # =========================================================================
    # Engine
    # =========================================================================

    def build_instance(
        self,
        payload: WorkflowDocument,
        actor: Actor,
        correlation_id: Optional[str] = None
    ) -> WorkflowInstance:
        """Bind a stored document and the acting user to its definition"""
        return WorkflowInstance(
            definition=self.registry.get(payload.workflow_id),
            initiator=payload.created_by,
            actor=actor,
            current_state_id=payload.state_id,
            payload=payload,
            id_generator=self.id_generator,
            clock=self.clock,
            correlation_id=correlation_id
        )

    def get_possible_actions(
        self,
        payload_id: str,
        actor: Actor,
        workflow_id: Optional[str] = None
    ) -> List[Action]:
        payload = self.get_payload(payload_id, workflow_id=workflow_id)
        return self.build_instance(payload, actor).get_possible_actions()

    def perform_action(
        self,
        payload_id: str,
        actor: Actor,
        action_id: str,
        remarks: Optional[str] = None,
        workflow_id: Optional[str] = None,
        correlation_id: Optional[str] = None
    ) -> WorkflowEvent:
        """
        Perform an action on a stored document

        Algorithm:
        1. Load the document and remember its state
        2. Let the engine authorize and apply the action
        3. Save the document only if its stored state is unchanged
        4. Append the event once the save succeeded
        """
        payload = self.get_payload(payload_id, workflow_id=workflow_id)
        prev_state_id = payload.state_id

        instance = self.build_instance(payload, actor, correlation_id=correlation_id)
        event = instance.perform_action(action_id, remarks)

        self.payload_repo.save(payload, expected_state_id=prev_state_id)
        self.event_repo.append(event)

        logger.info(
            f"Performed {action_id}: {event.prev_state_id} -> {event.new_state_id}",
            extra={
                "workflow_id": payload.workflow_id,
                "payload_id": payload.id,
                "action_id": action_id,
                "actor_id": actor.id,
                "event_id": event.id,
                "state_id": event.new_state_id
            }
        )
        return event

    def get_history(self, payload_id: str, workflow_id: Optional[str] = None) -> List[WorkflowEvent]:
        """Events of a document, oldest first"""
        self.get_payload(payload_id, workflow_id=workflow_id)
        return self.event_repo.list_for_payload(payload_id)


def create_workflow_service(app_settings: Optional[Settings] = None) -> WorkflowService:
    """Build a service from settings: definitions directory plus the configured store"""
    app_settings = app_settings or default_settings

    registry = DefinitionRegistry()
    registry.load_directory(app_settings.definitions_path)

    if app_settings.persistence_backend == PersistenceBackend.MONGO:
        payload_repo: PayloadRepository = MongoPayloadRepository()
        event_repo: EventRepository = MongoEventRepository()
    else:
        payload_repo = InMemoryPayloadRepository()
        event_repo = InMemoryEventRepository()

    prefix = app_settings.event_id_prefix
    return WorkflowService(
        registry=registry,
        payload_repo=payload_repo,
        event_repo=event_repo,
        id_generator=lambda: generate_id(prefix)
    )
