"""Role Resolver - Effective roles of an actor within one workflow instance"""
from typing import FrozenSet

from ..domain.models import Actor, INITIATOR_ROLE_ID


def resolve_effective_roles(actor: Actor, initiator: Actor) -> FrozenSet[str]:
    """
    Compute the roles an actor holds for one payload
    
    The actor's assigned roles, plus the contextual "initiator" role when
    the actor is the one who created the payload. Nothing is cached: call
    it at every authorization check.
    """
    roles = set(actor.role_ids)
    if actor.id == initiator.id:
        roles.add(INITIATOR_ROLE_ID)
    return frozenset(roles)
