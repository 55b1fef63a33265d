"""Transition Resolver - Resolve actions and their target states"""
from typing import List, Tuple

from ..domain.models import Action, State, WorkflowDefinition
from ..domain.errors import UnknownActionError


class TransitionResolver:
    """
    Resolve transitions within a workflow definition
    
    Given current state S and action id A:
    1. Find the action with id A among S's actions
    2. If none found -> raise UnknownActionError
    3. Resolve the action's target state (UnknownStateError if missing)
    """
    
    def __init__(self, definition: WorkflowDefinition):
        self.definition = definition
    
    def resolve_action(self, state: State, action_id: str) -> Action:
        """Find an action on a state by id"""
        action = state.find_action(action_id)
        if action is None:
            raise UnknownActionError(
                f"Action {action_id} not found",
                details={"state_id": state.id, "action_id": action_id}
            )
        return action
    
    def resolve_target(self, action: Action) -> State:
        """Target state of an action"""
        return self.definition.get_state(action.target_state_id)
    
    def get_outgoing_actions(self, state_id: str) -> List[Action]:
        """All actions leaving a state, regardless of roles"""
        return list(self.definition.get_state(state_id).actions)
    
    def get_incoming_actions(self, state_id: str) -> List[Tuple[str, Action]]:
        """(source state id, action) pairs, across states, that lead to a state"""
        self.definition.get_state(state_id)
        return [
            (state.id, action)
            for state in self.definition.states.values()
            for action in state.actions
            if action.target_state_id == state_id
        ]
