"""Domain Enumerations"""
from enum import Enum


class WorkflowErrorKind(str, Enum):
    """Failure kinds callers branch on"""
    DOMAIN = "DOMAIN"
    UNKNOWN_STATE = "UNKNOWN_STATE"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_DEFINITION = "INVALID_DEFINITION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


class PersistenceBackend(str, Enum):
    """Where payloads and events are stored"""
    MEMORY = "memory"
    MONGO = "mongo"
