"""
Unit tests for WorkflowService
"""
import json
from unittest.mock import patch

import pytest

from approvalflow.config.settings import Settings
from approvalflow.domain.enums import PersistenceBackend
from approvalflow.domain.errors import (
    AlreadyExistsError, ConcurrencyError, PayloadNotFoundError, UnauthorizedError,
    UnknownActionError, ValidationError, WorkflowNotFoundError
)
from approvalflow.repositories import InMemoryEventRepository, InMemoryPayloadRepository
from approvalflow.services.workflow_service import create_workflow_service


@pytest.fixture
def created(workflow_service, users):
    return workflow_service.create_payload(
        "sow_approval", users["sow_user"], payload_id="sample_sow", title="Sample SOW", fields={"amount": 1200}
    )


class TestCreatePayload:
    def test_starts_in_initial_state(self, created, users):
        assert created.state_id == "draft"
        assert created.workflow_id == "sow_approval"
        assert created.created_by == users["sow_user"]
        assert created.amount == 1200

    def test_generated_id(self, workflow_service, users):
        payload = workflow_service.create_payload("sow_approval", users["sow_user"])
        assert payload.id.startswith("PAY-")

    def test_reserved_fields_rejected(self, workflow_service, users):
        with pytest.raises(ValidationError) as exc_info:
            workflow_service.create_payload("sow_approval", users["sow_user"], fields={"state_id": "approved"})
        assert exc_info.value.details["fields"] == ["state_id"]

    @pytest.mark.parametrize("name", ["title", "workflow_id", "payload_id", "initiator", "created_by"])
    def test_field_names_shadowing_arguments_rejected(self, workflow_service, users, name):
        with pytest.raises(ValidationError) as exc_info:
            workflow_service.create_payload("sow_approval", users["sow_user"], fields={name: "x"})
        assert exc_info.value.details["fields"] == [name]
        assert workflow_service.list_payloads("sow_approval") == []

    def test_unknown_workflow(self, workflow_service, users):
        with pytest.raises(WorkflowNotFoundError):
            workflow_service.create_payload("purchase_order", users["sow_user"])

    def test_duplicate_id(self, workflow_service, created, users):
        with pytest.raises(AlreadyExistsError):
            workflow_service.create_payload("sow_approval", users["sow_user"], payload_id="sample_sow")


class TestQueries:
    def test_get_payload_checks_workflow(self, workflow_service, created):
        assert workflow_service.get_payload("sample_sow", workflow_id="sow_approval") == created
        with pytest.raises(PayloadNotFoundError):
            workflow_service.get_payload("sample_sow", workflow_id="purchase_order")

    def test_possible_actions_per_actor(self, workflow_service, created, users):
        assert [a.id for a in workflow_service.get_possible_actions("sample_sow", users["sow_user"])] == ["submit"]
        assert workflow_service.get_possible_actions("sample_sow", users["approver_user"]) == []

    def test_list_payloads_by_state(self, workflow_service, created, users):
        workflow_service.create_payload("sow_approval", users["sow_user"], payload_id="second_sow")
        workflow_service.perform_action("second_sow", users["sow_user"], "submit")

        drafts = workflow_service.list_payloads("sow_approval", state_id="draft")
        assert [p.id for p in drafts] == ["sample_sow"]
        assert len(workflow_service.list_payloads("sow_approval")) == 2


class TestPerformAction:
    def test_persists_state_and_event(self, workflow_service, created, users):
        event = workflow_service.perform_action(
            "sample_sow", users["sow_user"], "submit", remarks="please review", correlation_id="COR-7"
        )
        assert event.id == "EVT-1"
        assert event.correlation_id == "COR-7"
        assert workflow_service.get_payload("sample_sow").state_id == "pending_initial_review"
        assert workflow_service.get_history("sample_sow") == [event]

    def test_history_survives_edits_to_returned_event(self, workflow_service, created, users):
        event = workflow_service.perform_action("sample_sow", users["sow_user"], "submit")
        event.payload["state_id"] = "approved"
        assert workflow_service.get_history("sample_sow")[0].payload["state_id"] == "draft"

    def test_failed_action_persists_nothing(self, workflow_service, created, users):
        with pytest.raises(UnauthorizedError):
            workflow_service.perform_action("sample_sow", users["reviewer_user"], "submit")
        with pytest.raises(UnknownActionError):
            workflow_service.perform_action("sample_sow", users["sow_user"], "approve")

        assert workflow_service.get_payload("sample_sow").state_id == "draft"
        assert workflow_service.get_history("sample_sow") == []

    def test_full_chain_history(self, workflow_service, created, users):
        steps = [
            ("sow_user", "submit"),
            ("reviewer_user", "approve"),
            ("distributor_user", "approve"),
            ("representative_user", "approve"),
            ("approver_user", "reject"),
            ("sow_user", "edit"),
        ]
        for actor_key, action_id in steps:
            workflow_service.perform_action("sample_sow", users[actor_key], action_id)

        history = workflow_service.get_history("sample_sow", workflow_id="sow_approval")
        assert [e.action_id for e in history] == [a for _, a in steps]
        assert [e.performed_by for e in history] == [u for u, _ in steps]
        assert history[0].timestamp < history[-1].timestamp
        assert workflow_service.get_payload("sample_sow").state_id == "draft"

    def test_concurrent_transition_conflicts(self, workflow_service, created, users):
        """Two reviewers act on the same loaded state; the second save loses"""
        workflow_service.perform_action("sample_sow", users["sow_user"], "submit")

        stale = workflow_service.get_payload("sample_sow")
        workflow_service.perform_action("sample_sow", users["reviewer_user"], "approve")

        instance = workflow_service.build_instance(stale, users["reviewer_user"])
        instance.perform_action("reject")
        with pytest.raises(ConcurrencyError):
            workflow_service.payload_repo.save(stale, expected_state_id="pending_initial_review")

        assert workflow_service.get_payload("sample_sow").state_id == "pending_distributor_review"
        assert len(workflow_service.get_history("sample_sow")) == 2

    def test_race_inside_perform_action(self, workflow_service, created, users):
        """A write landing between load and save makes perform_action fail"""
        repo = workflow_service.payload_repo
        original_load = repo.load

        def load_then_interfere(payload_id):
            payload = original_load(payload_id)
            moved = payload.model_copy(update={"state_id": "pending_initial_review"})
            repo.save(moved)
            return payload

        with patch.object(repo, "load", side_effect=load_then_interfere):
            with pytest.raises(ConcurrencyError):
                workflow_service.perform_action("sample_sow", users["sow_user"], "submit")
        assert workflow_service.get_history("sample_sow") == []


class TestCreateWorkflowService:
    def test_memory_backend_loads_definitions(self, tmp_path, sow_document, users):
        (tmp_path / "sow_approval.json").write_text(json.dumps(sow_document), encoding="utf-8")
        service = create_workflow_service(Settings(
            persistence_backend=PersistenceBackend.MEMORY,
            definitions_path=str(tmp_path),
            event_id_prefix="AUD"
        ))
        assert isinstance(service.payload_repo, InMemoryPayloadRepository)
        assert isinstance(service.event_repo, InMemoryEventRepository)
        assert "sow_approval" in service.registry

        service.create_payload("sow_approval", users["sow_user"], payload_id="p1")
        event = service.perform_action("p1", users["sow_user"], "submit")
        assert event.id.startswith("AUD-")
