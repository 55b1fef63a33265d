"""
Pytest Configuration and Fixtures

This file contains shared fixtures and configuration for all tests.
"""
import copy
import json
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

DEFINITIONS_DIR = Path(__file__).resolve().parent.parent / "definitions"

# Settings are read once at import time
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("DEFINITIONS_PATH", str(DEFINITIONS_DIR))
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from approvalflow.domain.models import Actor, WorkflowDefinition, WorkflowPayload  # noqa: E402
from approvalflow.repositories.inmemory import InMemoryEventRepository, InMemoryPayloadRepository  # noqa: E402
from approvalflow.services.definition_loader import DefinitionRegistry, load_definition  # noqa: E402
from approvalflow.services.workflow_service import WorkflowService  # noqa: E402
from approvalflow.utils.idgen import sequential_id_generator  # noqa: E402


FIXED_TIME = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def sow_document() -> Dict[str, Any]:
    """Raw reference definition document (a fresh copy per test)"""
    with (DEFINITIONS_DIR / "sow_approval.json").open(encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def sow_definition() -> WorkflowDefinition:
    """The six-step SOW review chain with the rejected -> draft cycle"""
    return load_definition(DEFINITIONS_DIR / "sow_approval.json")


@pytest.fixture
def users() -> Dict[str, Actor]:
    return {
        "sow_user": Actor(id="sow_user", name="User", role_ids=["user"]),
        "reviewer_user": Actor(id="reviewer_user", name="Reviewer User", role_ids=["reviewer"]),
        "distributor_user": Actor(id="distributor_user", name="Distributor User", role_ids=["distributor"]),
        "representative_user": Actor(id="representative_user", name="Representative User", role_ids=["representative"]),
        "approver_user": Actor(id="approver_user", name="Approver User", role_ids=["approver"]),
    }


@pytest.fixture
def sow_payload() -> WorkflowPayload:
    return WorkflowPayload(id="sample_sow", state_id="draft", title="Sample SOW")


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_TIME


@pytest.fixture
def ticking_clock() -> Callable[[], datetime]:
    """Clock advancing one minute per call"""
    ticks = iter(range(10_000))
    return lambda: FIXED_TIME + timedelta(minutes=next(ticks))


@pytest.fixture
def id_generator():
    return sequential_id_generator("EVT")


@pytest.fixture
def mutate_document(sow_document) -> Callable[[Callable[[Dict[str, Any]], None]], Dict[str, Any]]:
    """Copy of the reference document with an edit applied"""
    def _mutate(edit: Callable[[Dict[str, Any]], None]) -> Dict[str, Any]:
        doc = copy.deepcopy(sow_document)
        edit(doc)
        return doc
    return _mutate


@pytest.fixture
def registry(sow_definition) -> DefinitionRegistry:
    registry = DefinitionRegistry()
    registry.register(sow_definition)
    return registry


@pytest.fixture
def workflow_service(registry, id_generator, ticking_clock) -> WorkflowService:
    return WorkflowService(
        registry=registry,
        payload_repo=InMemoryPayloadRepository(),
        event_repo=InMemoryEventRepository(),
        id_generator=id_generator,
        clock=ticking_clock
    )
