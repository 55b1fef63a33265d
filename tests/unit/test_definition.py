"""
Unit tests for WorkflowDefinition: graph validation, lookups and serialization.
"""
import pytest
from pydantic import ValidationError as PydanticValidationError

from approvalflow.domain.errors import (
    InvalidDefinitionError, UnknownStateError, UnknownRoleError, UnknownStageError
)
from approvalflow.domain.enums import WorkflowErrorKind
from approvalflow.domain.models import WorkflowDefinition
from approvalflow.services.definition_loader import dump_definition


def _error_types(exc_info) -> list:
    return [e["type"] for e in exc_info.value.details["errors"]]


class TestGraphValidity:
    """Every reference in the graph must resolve."""

    def test_reference_definition_is_valid(self, sow_definition):
        """The SOW chain loads without errors."""
        assert sow_definition.initial_state_id == "draft"
        assert sow_definition.final_state_id == "approved"
        assert len(sow_definition.states) == 7

    def test_every_action_resolves(self, sow_definition):
        """All targets and roles exist in the same definition."""
        for state in sow_definition.states.values():
            for action in state.actions:
                assert action.target_state_id in sow_definition.states
                for role_id in action.role_ids:
                    assert role_id in sow_definition.roles

    def test_unknown_target_state(self, mutate_document):
        doc = mutate_document(
            lambda d: d["states"]["draft"]["actions"][0].update(target_state_id="nowhere")
        )
        with pytest.raises(InvalidDefinitionError) as exc_info:
            WorkflowDefinition.model_validate(doc)
        assert "UNKNOWN_TARGET_STATE" in _error_types(exc_info)
        assert exc_info.value.kind == WorkflowErrorKind.INVALID_DEFINITION

    def test_unknown_role(self, mutate_document):
        doc = mutate_document(
            lambda d: d["states"]["pending_approval"]["actions"][1].update(role_ids=["approver", "auditor"])
        )
        with pytest.raises(InvalidDefinitionError) as exc_info:
            WorkflowDefinition.model_validate(doc)
        assert _error_types(exc_info) == ["UNKNOWN_ROLE"]
        assert exc_info.value.details["errors"][0]["path"] == "states.pending_approval.actions[1].role_ids"

    def test_unknown_stage(self, mutate_document):
        doc = mutate_document(lambda d: d["states"]["approved"].update(stage_id="archived"))
        with pytest.raises(InvalidDefinitionError) as exc_info:
            WorkflowDefinition.model_validate(doc)
        assert "UNKNOWN_STAGE" in _error_types(exc_info)

    def test_empty_roles_rejected(self, mutate_document):
        doc = mutate_document(lambda d: d["states"]["rejected"]["actions"][0].update(role_ids=[]))
        with pytest.raises(InvalidDefinitionError) as exc_info:
            WorkflowDefinition.model_validate(doc)
        assert "EMPTY_ROLES" in _error_types(exc_info)

    def test_duplicate_role_in_action(self, mutate_document):
        doc = mutate_document(
            lambda d: d["states"]["rejected"]["actions"][0].update(role_ids=["initiator", "initiator"])
        )
        with pytest.raises(InvalidDefinitionError) as exc_info:
            WorkflowDefinition.model_validate(doc)
        assert "DUPLICATE_ROLE" in _error_types(exc_info)

    def test_duplicate_action_id_within_state(self, mutate_document):
        def edit(d):
            actions = d["states"]["pending_initial_review"]["actions"]
            actions.append(dict(actions[0]))
        with pytest.raises(InvalidDefinitionError) as exc_info:
            WorkflowDefinition.model_validate(mutate_document(edit))
        assert "DUPLICATE_ACTION" in _error_types(exc_info)

    def test_same_action_id_in_different_states_is_fine(self, sow_definition):
        """Action ids are unique per state, not globally."""
        approve_states = [
            s.id for s in sow_definition.states.values() if s.find_action("approve") is not None
        ]
        assert len(approve_states) == 4

    def test_key_must_match_id(self, mutate_document):
        doc = mutate_document(lambda d: d["roles"]["reviewer"].update(id="checker"))
        with pytest.raises(InvalidDefinitionError) as exc_info:
            WorkflowDefinition.model_validate(doc)
        assert "ID_MISMATCH" in _error_types(exc_info)

    def test_unknown_initial_and_final_state(self, mutate_document):
        def edit(d):
            d["initial_state_id"] = "start"
            d["final_state_id"] = "done"
        with pytest.raises(InvalidDefinitionError) as exc_info:
            WorkflowDefinition.model_validate(mutate_document(edit))
        paths = [e["path"] for e in exc_info.value.details["errors"]]
        assert paths == ["initial_state_id", "final_state_id"]

    def test_final_state_must_be_reachable(self, mutate_document):
        """Cutting the last approve edge leaves 'approved' unreachable."""
        def edit(d):
            d["states"]["pending_approval"]["actions"] = d["states"]["pending_approval"]["actions"][1:]
        with pytest.raises(InvalidDefinitionError) as exc_info:
            WorkflowDefinition.model_validate(mutate_document(edit))
        assert _error_types(exc_info) == ["UNREACHABLE_FINAL_STATE"]

    def test_all_problems_reported_together(self, mutate_document):
        def edit(d):
            d["states"]["draft"]["stage_id"] = "nope"
            d["states"]["draft"]["actions"][0]["role_ids"] = ["ghost"]
        with pytest.raises(InvalidDefinitionError) as exc_info:
            WorkflowDefinition.model_validate(mutate_document(edit))
        assert sorted(_error_types(exc_info)) == ["UNKNOWN_ROLE", "UNKNOWN_STAGE"]

    def test_missing_actions_means_terminal(self, sow_definition):
        assert sow_definition.states["approved"].actions == ()
        assert sow_definition.is_terminal("approved")
        assert not sow_definition.is_terminal("rejected")


class TestLookups:
    """get_state / get_role / get_stage and graph helpers."""

    def test_get_state(self, sow_definition):
        state = sow_definition.get_state("pending_approval")
        assert state.title == "Pending Approval"
        assert state.stage_id == "in_progress"

    def test_get_state_unknown(self, sow_definition):
        with pytest.raises(UnknownStateError) as exc_info:
            sow_definition.get_state("archived")
        assert exc_info.value.http_status == 404
        assert exc_info.value.kind == WorkflowErrorKind.UNKNOWN_STATE

    def test_get_role_and_stage(self, sow_definition):
        assert sow_definition.get_role("initiator").title == "Initiator"
        assert sow_definition.get_stage("in_progress").title == "In Progress"
        with pytest.raises(UnknownRoleError):
            sow_definition.get_role("auditor")
        with pytest.raises(UnknownStageError):
            sow_definition.get_stage("archived")

    def test_states_in_stage_keeps_definition_order(self, sow_definition):
        ids = [s.id for s in sow_definition.states_in_stage("in_progress")]
        assert ids == [
            "pending_initial_review",
            "pending_distributor_review",
            "pending_representative_review",
            "pending_approval",
        ]

    def test_reachable_from_rejected_includes_cycle(self, sow_definition):
        """rejected -> draft -> ... -> rejected forms the only cycle."""
        reachable = sow_definition.reachable_state_ids("rejected")
        assert reachable == set(sow_definition.states)
        assert sow_definition.reachable_state_ids("approved") == {"approved"}

    def test_initial_and_final_state(self, sow_definition):
        assert sow_definition.initial_state.id == "draft"
        assert sow_definition.final_state.is_terminal


class TestSerialization:
    """Definitions round-trip as JSON documents."""

    def test_round_trip_preserves_fields_and_action_order(self, sow_definition):
        doc = dump_definition(sow_definition)
        restored = WorkflowDefinition.model_validate(doc)
        assert restored == sow_definition
        assert [a["id"] for a in doc["states"]["pending_initial_review"]["actions"]] == ["approve", "reject"]
        assert doc["states"]["approved"]["actions"] == []

    def test_definition_is_read_only(self, sow_definition):
        with pytest.raises(PydanticValidationError):
            sow_definition.initial_state_id = "approved"
