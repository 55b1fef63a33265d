"""Repository abstractions for payload and event persistence"""
from typing import List, Optional, Protocol

from ..domain.models import WorkflowDocument, WorkflowEvent


class PayloadRepository(Protocol):
    """Protocol for payload persistence backends"""

    def create(self, payload: WorkflowDocument) -> WorkflowDocument:
        """Persist a new payload (AlreadyExistsError if the id is taken)"""

    def save(
        self,
        payload: WorkflowDocument,
        expected_state_id: Optional[str] = None
    ) -> WorkflowDocument:
        """
        Persist a payload

        With expected_state_id the write only happens if the stored payload
        is still in that state; otherwise ConcurrencyError.
        """

    def load(self, payload_id: str) -> WorkflowDocument:
        """Retrieve a payload (PayloadNotFoundError if absent)"""

    def list_by_workflow(self, workflow_id: str, state_id: Optional[str] = None) -> List[WorkflowDocument]:
        """Payloads routed through a definition, optionally in one state"""


class EventRepository(Protocol):
    """Protocol for the append-only event log"""

    def append(self, event: WorkflowEvent) -> WorkflowEvent:
        """Append an event"""

    def list_for_payload(self, payload_id: str) -> List[WorkflowEvent]:
        """Events of a payload, oldest first"""
