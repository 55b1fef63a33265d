"""Workflow API Routes - Definitions, documents and transitions"""
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from ..deps import get_workflow_service_dep, get_correlation_id_dep
from ...domain.models import Actor
from ...services.definition_loader import dump_definition
from ...services.workflow_service import WorkflowService

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class WorkflowSummary(BaseModel):
    """Registered definition"""
    id: str
    title: Optional[str] = None
    initial_state_id: str
    final_state_id: str


class CreatePayloadRequest(BaseModel):
    """Request to create a document in the initial state"""
    id: Optional[str] = Field(None, min_length=1, max_length=200)
    title: Optional[str] = Field(None, max_length=500)
    initiator: Actor
    fields: Dict[str, Any] = Field(default_factory=dict, description="Business fields carried by the document")


class ActorRequest(BaseModel):
    """Acting user"""
    actor: Actor


class PerformActionRequest(BaseModel):
    """Request to perform an action"""
    actor: Actor
    remarks: Optional[str] = Field(None, max_length=2000)


class PossibleActionsResponse(BaseModel):
    """Actions the actor may perform from the document's state"""
    payload_id: str
    state_id: str
    actions: List[Dict[str, Any]]


# ============================================================================
# Routes
# ============================================================================

@router.get("", response_model=List[WorkflowSummary])
async def list_workflows(
    service: WorkflowService = Depends(get_workflow_service_dep)
):
    """List registered workflow definitions"""
    return [
        WorkflowSummary(
            id=d.id,
            title=d.title,
            initial_state_id=d.initial_state_id,
            final_state_id=d.final_state_id
        )
        for d in service.registry.list_definitions()
    ]


@router.get("/{workflow_id}")
async def get_workflow(
    workflow_id: str,
    service: WorkflowService = Depends(get_workflow_service_dep)
):
    """Get a workflow definition document"""
    return dump_definition(service.registry.get(workflow_id))


@router.post("/{workflow_id}/payloads", status_code=status.HTTP_201_CREATED)
async def create_payload(
    workflow_id: str,
    request: CreatePayloadRequest,
    service: WorkflowService = Depends(get_workflow_service_dep)
):
    """
    Create a document

    The document starts in the definition's initial state; the creator
    becomes its initiator.
    """
    payload = service.create_payload(
        workflow_id=workflow_id,
        initiator=request.initiator,
        payload_id=request.id,
        title=request.title,
        fields=request.fields
    )
    return payload.model_dump(mode="json")


@router.get("/{workflow_id}/payloads")
async def list_payloads(
    workflow_id: str,
    state_id: Optional[str] = Query(None),
    service: WorkflowService = Depends(get_workflow_service_dep)
):
    """List documents of a workflow, optionally in one state"""
    return [p.model_dump(mode="json") for p in service.list_payloads(workflow_id, state_id=state_id)]


@router.get("/{workflow_id}/payloads/{payload_id}")
async def get_payload(
    workflow_id: str,
    payload_id: str,
    service: WorkflowService = Depends(get_workflow_service_dep)
):
    """Get a document"""
    return service.get_payload(payload_id, workflow_id=workflow_id).model_dump(mode="json")


@router.post("/{workflow_id}/payloads/{payload_id}/possible-actions", response_model=PossibleActionsResponse)
async def get_possible_actions(
    workflow_id: str,
    payload_id: str,
    request: ActorRequest,
    service: WorkflowService = Depends(get_workflow_service_dep)
):
    """Actions the actor may perform right now, in definition order"""
    payload = service.get_payload(payload_id, workflow_id=workflow_id)
    actions = service.build_instance(payload, request.actor).get_possible_actions()
    return PossibleActionsResponse(
        payload_id=payload.id,
        state_id=payload.state_id,
        actions=[a.model_dump(mode="json") for a in actions]
    )


@router.post("/{workflow_id}/payloads/{payload_id}/actions/{action_id}")
async def perform_action(
    workflow_id: str,
    payload_id: str,
    action_id: str,
    request: PerformActionRequest,
    service: WorkflowService = Depends(get_workflow_service_dep),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """
    Perform an action

    Returns the workflow event recorded for the transition.
    403 when the actor's roles do not allow the action, 404 for an action
    the current state does not offer, 409 when another actor moved the
    document first.
    """
    event = service.perform_action(
        payload_id=payload_id,
        actor=request.actor,
        action_id=action_id,
        remarks=request.remarks,
        workflow_id=workflow_id,
        correlation_id=correlation_id
    )
    return event.model_dump(mode="json")


@router.get("/{workflow_id}/payloads/{payload_id}/events")
async def get_events(
    workflow_id: str,
    payload_id: str,
    service: WorkflowService = Depends(get_workflow_service_dep)
):
    """Event history of a document, oldest first"""
    return [e.model_dump(mode="json") for e in service.get_history(payload_id, workflow_id=workflow_id)]
