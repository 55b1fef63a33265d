"""
approvalflow - FastAPI Application

HTTP surface over the workflow service. Builds the service from settings
(definitions directory plus the configured store) unless one is passed in.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config.settings import settings
from .domain.enums import PersistenceBackend
from .api.routes import api_router
from .api.middleware import CorrelationIdMiddleware, register_error_handlers
from .repositories import mongo_client
from .services.workflow_service import WorkflowService, create_workflow_service
from .utils.logger import setup_logging, get_logger

setup_logging()
logger = get_logger(__name__)


def _uses_mongo() -> bool:
    return settings.persistence_backend == PersistenceBackend.MONGO


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ensure MongoDB indexes on startup and close the client on shutdown (mongo backend only)"""
    service: WorkflowService = app.state.workflow_service
    logger.info(
        f"Starting approvalflow {__version__} with {len(service.registry.list_definitions())} workflow(s) "
        f"on the {settings.persistence_backend.value} backend"
    )
    if _uses_mongo():
        mongo_client.create_indexes()
    
    yield
    
    if _uses_mongo():
        mongo_client.close_connection()
    logger.info("approvalflow stopped")


def create_app(workflow_service: Optional[WorkflowService] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.
    
    Args:
        workflow_service: Service to serve; built from settings when omitted
    """
    show_docs = settings.debug and not settings.is_production
    application = FastAPI(
        title="approvalflow",
        description="Role-gated approval workflow engine",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs" if show_docs else None,
        redoc_url="/api/redoc" if show_docs else None,
        openapi_url="/api/openapi.json" if show_docs else None,
    )
    application.state.workflow_service = workflow_service or create_workflow_service()
    
    # Wildcard origins cannot be combined with credentials
    allow_all = settings.cors_origins.strip() == "*"
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_origins_list,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-Id"],
    )
    application.add_middleware(CorrelationIdMiddleware)
    
    register_error_handlers(application)
    
    application.include_router(api_router, prefix="/api/v1")
    application.add_api_route("/health", health, methods=["GET"], tags=["Health"])
    
    return application


async def health(request: Request) -> Dict[str, Any]:
    """Registered workflow count and, for the mongo backend, database connectivity"""
    service: WorkflowService = request.app.state.workflow_service
    result: Dict[str, Any] = {
        "status": "healthy",
        "version": __version__,
        "environment": settings.environment,
        "persistence_backend": settings.persistence_backend.value,
        "workflows": len(service.registry.list_definitions()),
    }
    if _uses_mongo():
        result["mongo"] = mongo_client.health_check()
        if result["mongo"]["status"] != "healthy":
            result["status"] = "degraded"
    return result


app = create_app()
