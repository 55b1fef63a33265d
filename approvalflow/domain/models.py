"""Domain Models - Pydantic schemas for workflow definitions, actors, payloads and events"""
from collections import deque
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from .errors import (
    InvalidDefinitionError, UnknownStateError, UnknownRoleError, UnknownStageError
)


# Contextual role granted to the actor who created the payload
INITIATOR_ROLE_ID = "initiator"


# ============================================================================
# Workflow Definition
# ============================================================================

class Role(BaseModel):
    """Capability an actor may hold"""
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1, description="Role ID")
    title: str = Field(..., description="Display title")


class Stage(BaseModel):
    """Coarse lifecycle phase used to group states"""
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1, description="Stage ID")
    title: str = Field(..., description="Display title")


class Action(BaseModel):
    """Role-gated edge from its owning state to a target state"""
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1, description="Action ID, unique within the owning state")
    title: str = Field(..., description="Display title")
    target_state_id: str = Field(..., description="State reached when the action is performed")
    role_ids: Tuple[str, ...] = Field(..., description="Roles authorized to perform the action")

    @property
    def role_id_set(self) -> FrozenSet[str]:
        return frozenset(self.role_ids)


class State(BaseModel):
    """Node in the workflow graph"""
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1, description="State ID")
    title: str = Field(..., description="Display title")
    stage_id: str = Field(..., description="Stage this state belongs to")
    actions: Tuple[Action, ...] = Field(default_factory=tuple, description="Ordered actions available from this state")

    @field_validator("actions", mode="before")
    @classmethod
    def _none_means_no_actions(cls, value: Any) -> Any:
        return () if value is None else value

    @property
    def is_terminal(self) -> bool:
        """True when no action leaves this state"""
        return not self.actions

    def find_action(self, action_id: str) -> Optional[Action]:
        """First action with the given id, or None"""
        return next((a for a in self.actions if a.id == action_id), None)


class WorkflowDefinition(BaseModel):
    """
    Complete, validated workflow definition

    Validated once at construction; every problem found is reported in a
    single InvalidDefinitionError (details["errors"]).
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: Optional[str] = Field(default=None, description="Registry ID of the definition")
    title: Optional[str] = Field(default=None, description="Display title")
    roles: Dict[str, Role] = Field(default_factory=dict)
    stages: Dict[str, Stage] = Field(default_factory=dict)
    states: Dict[str, State] = Field(default_factory=dict)
    initial_state_id: str = Field(..., description="State new payloads start in")
    final_state_id: str = Field(..., description="The success state")

    @model_validator(mode="after")
    def _validate_graph(self) -> "WorkflowDefinition":
        errors = self._collect_errors()
        if errors:
            raise InvalidDefinitionError(
                f"Workflow definition is invalid: {len(errors)} error(s)",
                details={"workflow_id": self.id, "errors": errors}
            )
        return self

    def _collect_errors(self) -> List[Dict[str, Any]]:
        errors: List[Dict[str, Any]] = []

        for collection, entries in (("roles", self.roles), ("stages", self.stages), ("states", self.states)):
            for key, entry in entries.items():
                if key != entry.id:
                    errors.append({
                        "type": "ID_MISMATCH",
                        "message": f"Key '{key}' does not match id '{entry.id}'",
                        "path": f"{collection}.{key}"
                    })

        for state_id, state in self.states.items():
            path = f"states.{state_id}"
            if state.stage_id not in self.stages:
                errors.append({
                    "type": "UNKNOWN_STAGE",
                    "message": f"State '{state_id}' references unknown stage '{state.stage_id}'",
                    "path": f"{path}.stage_id"
                })

            seen_action_ids: Set[str] = set()
            for index, action in enumerate(state.actions):
                action_path = f"{path}.actions[{index}]"
                if action.id in seen_action_ids:
                    errors.append({
                        "type": "DUPLICATE_ACTION",
                        "message": f"Action '{action.id}' appears more than once in state '{state_id}'",
                        "path": f"{action_path}.id"
                    })
                seen_action_ids.add(action.id)

                if action.target_state_id not in self.states:
                    errors.append({
                        "type": "UNKNOWN_TARGET_STATE",
                        "message": f"Action '{action.id}' targets unknown state '{action.target_state_id}'",
                        "path": f"{action_path}.target_state_id"
                    })

                if not action.role_ids:
                    errors.append({
                        "type": "EMPTY_ROLES",
                        "message": f"Action '{action.id}' in state '{state_id}' has no roles",
                        "path": f"{action_path}.role_ids"
                    })
                elif len(action.role_id_set) != len(action.role_ids):
                    errors.append({
                        "type": "DUPLICATE_ROLE",
                        "message": f"Action '{action.id}' in state '{state_id}' lists a role twice",
                        "path": f"{action_path}.role_ids"
                    })

                for role_id in action.role_ids:
                    if role_id not in self.roles:
                        errors.append({
                            "type": "UNKNOWN_ROLE",
                            "message": f"Action '{action.id}' requires unknown role '{role_id}'",
                            "path": f"{action_path}.role_ids"
                        })

        for field_name in ("initial_state_id", "final_state_id"):
            state_id = getattr(self, field_name)
            if state_id not in self.states:
                errors.append({
                    "type": "UNKNOWN_STATE",
                    "message": f"{field_name} references unknown state '{state_id}'",
                    "path": field_name
                })

        if not errors and self.final_state_id not in self.reachable_state_ids(self.initial_state_id):
            errors.append({
                "type": "UNREACHABLE_FINAL_STATE",
                "message": f"Final state '{self.final_state_id}' is not reachable from '{self.initial_state_id}'",
                "path": "final_state_id"
            })

        return errors

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_state(self, state_id: str) -> State:
        state = self.states.get(state_id)
        if state is None:
            raise UnknownStateError(
                f"State {state_id} not found",
                details={"state_id": state_id, "workflow_id": self.id}
            )
        return state

    def get_role(self, role_id: str) -> Role:
        role = self.roles.get(role_id)
        if role is None:
            raise UnknownRoleError(f"Role {role_id} not found", details={"role_id": role_id})
        return role

    def get_stage(self, stage_id: str) -> Stage:
        stage = self.stages.get(stage_id)
        if stage is None:
            raise UnknownStageError(f"Stage {stage_id} not found", details={"stage_id": stage_id})
        return stage

    @property
    def initial_state(self) -> State:
        return self.get_state(self.initial_state_id)

    @property
    def final_state(self) -> State:
        return self.get_state(self.final_state_id)

    def is_terminal(self, state_id: str) -> bool:
        return self.get_state(state_id).is_terminal

    def states_in_stage(self, stage_id: str) -> List[State]:
        """States grouped under a stage, in definition order"""
        self.get_stage(stage_id)
        return [s for s in self.states.values() if s.stage_id == stage_id]

    def reachable_state_ids(self, from_state_id: str) -> Set[str]:
        """All state ids reachable from a state (the state itself included)"""
        seen = {from_state_id}
        queue = deque([from_state_id])
        while queue:
            state = self.states.get(queue.popleft())
            if state is None:
                continue
            for action in state.actions:
                if action.target_state_id not in seen:
                    seen.add(action.target_state_id)
                    queue.append(action.target_state_id)
        return seen


# ============================================================================
# Actor & Payload
# ============================================================================

class Actor(BaseModel):
    """Fully resolved user acting on a workflow"""
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1, description="User ID")
    name: str = Field(..., description="Display name")
    role_ids: List[str] = Field(default_factory=list, description="Statically assigned roles")

    @field_validator("role_ids")
    @classmethod
    def _initiator_is_contextual(cls, value: List[str]) -> List[str]:
        if INITIATOR_ROLE_ID in value:
            raise ValueError(f"'{INITIATOR_ROLE_ID}' is granted per payload and cannot be assigned")
        return value


UserDTO = Actor


class WorkflowPayload(BaseModel):
    """
    Business document routed through a workflow

    The engine reads and writes ``state_id`` only; business fields are
    carried as extra attributes or declared by subclasses.
    """
    model_config = ConfigDict(extra="allow", validate_assignment=True)

    id: str = Field(..., min_length=1, description="Payload ID")
    state_id: str = Field(..., description="Current workflow state")


# ============================================================================
# Workflow Event
# ============================================================================

class WorkflowEvent(BaseModel):
    """Immutable record of one successful transition (append-only)"""
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    payload_id: str
    timestamp: datetime
    prev_state_id: str
    action_id: str
    new_state_id: str
    performed_by: str
    remarks: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict, description="Payload snapshot taken before the transition")
    correlation_id: Optional[str] = None


# ============================================================================
# Stored Document
# ============================================================================

class WorkflowDocument(WorkflowPayload):
    """Payload as stored by the workflow service: bound to a definition and its initiator"""

    workflow_id: str = Field(..., description="Definition the document is routed through")
    created_by: Actor = Field(..., description="Initiator of the document")
    title: Optional[str] = None
