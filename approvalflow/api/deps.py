"""API Dependencies - Common dependencies for routes"""
from typing import Optional
from fastapi import Header, Request

from ..services.workflow_service import WorkflowService
from ..utils.logger import set_correlation_id
from ..utils.idgen import generate_correlation_id


async def get_correlation_id_dep(
    request: Request,
    x_correlation_id: Optional[str] = Header(None, alias="X-Correlation-Id")
) -> str:
    """
    Correlation ID of the current request
    
    The middleware has normally assigned one already; otherwise the
    client's X-Correlation-Id is used, or a new one is generated.
    """
    correlation_id = getattr(request.state, "correlation_id", None)
    if correlation_id:
        return correlation_id
    correlation_id = x_correlation_id or generate_correlation_id()
    set_correlation_id(correlation_id)
    return correlation_id


async def get_workflow_service_dep(request: Request) -> WorkflowService:
    """The service the application was created with"""
    return request.app.state.workflow_service
