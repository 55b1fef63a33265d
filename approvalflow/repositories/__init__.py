"""Repository modules - Data access layer"""
from .base import PayloadRepository, EventRepository
from .inmemory import InMemoryPayloadRepository, InMemoryEventRepository
from .payload_repo import MongoPayloadRepository
from .audit_repo import MongoEventRepository

__all__ = [
    "PayloadRepository",
    "EventRepository",
    "InMemoryPayloadRepository",
    "InMemoryEventRepository",
    "MongoPayloadRepository",
    "MongoEventRepository",
]
