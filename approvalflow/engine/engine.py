"""
Workflow Engine - Runtime binding of a definition, a payload and an actor

WorkflowInstance is the state machine: it answers which actions the current
actor may perform from the payload's state and applies an authorized one,
returning the WorkflowEvent for the caller to persist.

The instance performs no I/O and no logging; errors are raised to the
caller unchanged.
"""
from typing import FrozenSet, List, Optional

from ..domain.models import Action, Actor, State, WorkflowDefinition, WorkflowEvent, WorkflowPayload
from ..domain.errors import UnauthorizedError
from ..utils.idgen import IdGenerator
from ..utils.time import Clock
from .audit_writer import AuditWriter
from .permission_guard import PermissionGuard
from .role_resolver import resolve_effective_roles
from .transition_resolver import TransitionResolver


class WorkflowInstance:
    """
    One workflow instance, constructed per request and discarded after use

    Responsibilities:
    - Resolve the current state from the definition
    - List the actions the current actor may perform
    - Authorize, apply and record a transition
    """

    def __init__(
        self,
        definition: WorkflowDefinition,
        initiator: Actor,
        actor: Actor,
        current_state_id: Optional[str],
        payload: WorkflowPayload,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
        correlation_id: Optional[str] = None
    ):
        self._definition = definition
        self._initiator = initiator
        self._actor = actor
        self._payload = payload
        self._correlation_id = correlation_id
        self.permission_guard = PermissionGuard()
        self.transition_resolver = TransitionResolver(definition)
        self.audit_writer = AuditWriter(id_generator=id_generator, clock=clock)
        self._current_state = definition.get_state(current_state_id or definition.initial_state_id)

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def definition(self) -> WorkflowDefinition:
        return self._definition

    @property
    def payload(self) -> WorkflowPayload:
        return self._payload

    @property
    def created_by(self) -> Actor:
        return self._initiator

    @property
    def actor(self) -> Actor:
        return self._actor

    @actor.setter
    def actor(self, actor: Actor) -> None:
        self._actor = actor

    @property
    def current_state(self) -> State:
        return self._current_state

    @property
    def effective_roles(self) -> FrozenSet[str]:
        """Roles of the current actor for this payload, derived on every access"""
        return resolve_effective_roles(self._actor, self._initiator)

    @property
    def is_terminal(self) -> bool:
        return self._current_state.is_terminal

    @property
    def is_complete(self) -> bool:
        """True once the payload sits in the definition's final state"""
        return self._current_state.id == self._definition.final_state_id

    # =========================================================================
    # Query
    # =========================================================================

    def get_possible_actions(self) -> List[Action]:
        """Current-state actions the actor may perform, in definition order"""
        return self.permission_guard.get_available_actions(self.effective_roles, self._current_state)

    def can_perform(self, action_id: str) -> bool:
        return any(a.id == action_id for a in self.get_possible_actions())

    # =========================================================================
    # Command
    # =========================================================================

    def perform_action(self, action_id: str, remarks: Optional[str] = None) -> WorkflowEvent:
        """
        Perform an action from the current state

        Algorithm:
        1. Resolve the action on the current state (UnknownActionError)
        2. Re-derive the possible actions and require membership (UnauthorizedError)
        3. Resolve the target state (UnknownStateError)
        4. Build the event from the pre-transition payload
        5. Move the instance and the payload to the target state

        Nothing is mutated unless every check passes.
        """
        state = self._current_state
        action = self.transition_resolver.resolve_action(state, action_id)

        if not self.permission_guard.is_available(self.effective_roles, state, action.id):
            raise UnauthorizedError(
                f"User {self._actor.id} is not allowed to perform action {action_id}",
                details={
                    "actor_id": self._actor.id,
                    "state_id": state.id,
                    "action_id": action_id,
                    "required_role_ids": list(action.role_ids)
                }
            )

        target_state = self.transition_resolver.resolve_target(action)

        event = self.audit_writer.write_transition(
            payload=self._payload,
            prev_state_id=state.id,
            action_id=action.id,
            new_state_id=target_state.id,
            actor=self._actor,
            remarks=remarks,
            correlation_id=self._correlation_id
        )

        self._current_state = target_state
        self._payload.state_id = target_state.id

        return event
