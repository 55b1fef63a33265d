"""Service modules - Caller side of the workflow engine"""
from .definition_loader import (
    DefinitionRegistry, parse_definition, load_definition, dump_definition, save_definition
)
from .workflow_service import WorkflowService, create_workflow_service

__all__ = [
    "DefinitionRegistry",
    "parse_definition",
    "load_definition",
    "dump_definition",
    "save_definition",
    "WorkflowService",
    "create_workflow_service",
]
