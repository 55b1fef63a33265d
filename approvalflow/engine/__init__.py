"""Workflow Engine - Definition-driven, role-gated state machine"""
from .engine import WorkflowInstance
from .permission_guard import PermissionGuard
from .transition_resolver import TransitionResolver
from .audit_writer import AuditWriter
from .role_resolver import resolve_effective_roles

__all__ = [
    "WorkflowInstance",
    "PermissionGuard",
    "TransitionResolver",
    "AuditWriter",
    "resolve_effective_roles",
]
