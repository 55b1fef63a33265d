"""Permission Guard - Role-based authorization of workflow actions"""
from typing import AbstractSet, List

from ..domain.models import Action, State


class PermissionGuard:
    """
    Permission enforcement for workflow actions
    
    Rules:
    - An action is allowed when the actor's effective roles intersect the
      action's roles
    - Allowed actions keep the order in which the state declares them
    """
    
    def can_perform(self, effective_roles: AbstractSet[str], action: Action) -> bool:
        """Check if the role set authorizes the action"""
        return not action.role_id_set.isdisjoint(effective_roles)
    
    def get_available_actions(
        self,
        effective_roles: AbstractSet[str],
        state: State
    ) -> List[Action]:
        """Actions of the state the role set may perform, in definition order"""
        return [a for a in state.actions if self.can_perform(effective_roles, a)]
    
    def is_available(
        self,
        effective_roles: AbstractSet[str],
        state: State,
        action_id: str
    ) -> bool:
        """
        Check that action_id is among the actions the role set may perform from state
        
        Membership is decided on ids, never on object identity.
        """
        return any(a.id == action_id for a in self.get_available_actions(effective_roles, state))
