"""Domain Errors - Centralized Exception Hierarchy"""
from typing import Any, Dict, Optional

from .enums import WorkflowErrorKind


class DomainError(Exception):
    """Base domain error - all errors extend this"""

    error_code: str = "DOMAIN_ERROR"
    http_status: int = 400
    kind: WorkflowErrorKind = WorkflowErrorKind.DOMAIN

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to API response dict"""
        return {
            "error": {
                "code": self.error_code,
                "kind": self.kind.value,
                "message": self.message,
                "details": self.details
            }
        }


# Authorization Errors
class AuthorizationError(DomainError):
    """Actor lacks permission for action"""
    error_code = "AUTHORIZATION_ERROR"
    http_status = 403


class UnauthorizedError(AuthorizationError):
    """Actor's effective roles do not intersect the action's roles"""
    error_code = "UNAUTHORIZED"
    kind = WorkflowErrorKind.UNAUTHORIZED


# Validation Errors
class ValidationError(DomainError):
    """Input validation failed"""
    error_code = "VALIDATION_ERROR"
    http_status = 400


class InvalidDefinitionError(ValidationError):
    """Workflow definition graph references something that does not exist"""
    error_code = "INVALID_DEFINITION"
    kind = WorkflowErrorKind.INVALID_DEFINITION


# Not Found Errors
class NotFoundError(DomainError):
    """Resource not found"""
    error_code = "NOT_FOUND"
    http_status = 404
    kind = WorkflowErrorKind.NOT_FOUND


class UnknownStateError(NotFoundError):
    """State id is not part of the definition"""
    error_code = "UNKNOWN_STATE"
    kind = WorkflowErrorKind.UNKNOWN_STATE


class UnknownActionError(NotFoundError):
    """Action id is not available on the current state"""
    error_code = "UNKNOWN_ACTION"
    kind = WorkflowErrorKind.UNKNOWN_ACTION


class UnknownRoleError(NotFoundError):
    """Role id is not declared by the definition"""
    error_code = "UNKNOWN_ROLE"


class UnknownStageError(NotFoundError):
    """Stage id is not declared by the definition"""
    error_code = "UNKNOWN_STAGE"


class WorkflowNotFoundError(NotFoundError):
    """Workflow definition not registered"""
    error_code = "WORKFLOW_NOT_FOUND"


class PayloadNotFoundError(NotFoundError):
    """Payload not found in the store"""
    error_code = "PAYLOAD_NOT_FOUND"


# Conflict Errors
class ConflictError(DomainError):
    """Resource conflict (e.g., concurrent modification)"""
    error_code = "CONFLICT"
    http_status = 409
    kind = WorkflowErrorKind.CONFLICT


class ConcurrencyError(ConflictError):
    """Optimistic concurrency conflict"""
    error_code = "CONCURRENCY_CONFLICT"


class AlreadyExistsError(ConflictError):
    """Resource already exists"""
    error_code = "ALREADY_EXISTS"
