"""Event Repository - MongoDB data access for workflow events"""
from typing import List, Optional
from pymongo.collection import Collection
from pymongo import ASCENDING

from .base import EventRepository
from .mongo_client import get_collection, EVENTS_COLLECTION
from ..domain.models import WorkflowEvent
from ..utils.time import ensure_utc
from ..utils.logger import get_logger

logger = get_logger(__name__)


class MongoEventRepository(EventRepository):
    """Repository for workflow events (append-only)"""
    
    def __init__(self, collection: Optional[Collection] = None):
        self._events: Collection = collection if collection is not None else get_collection(EVENTS_COLLECTION)
    
    def append(self, event: WorkflowEvent) -> WorkflowEvent:
        """Append an event"""
        doc = event.model_dump(mode="json")
        doc["_id"] = event.id
        # Stored as a BSON date so the log sorts chronologically
        doc["timestamp"] = event.timestamp
        
        self._events.insert_one(doc)
        logger.info(
            f"Appended workflow event: {event.action_id}",
            extra={
                "event_id": event.id,
                "payload_id": event.payload_id,
                "action_id": event.action_id,
                "actor_id": event.performed_by
            }
        )
        return event
    
    def list_for_payload(self, payload_id: str) -> List[WorkflowEvent]:
        """Get events for a payload, oldest first"""
        cursor = self._events.find({"payload_id": payload_id}).sort("timestamp", ASCENDING)
        
        events = []
        for doc in cursor:
            doc.pop("_id", None)
            doc["timestamp"] = ensure_utc(doc["timestamp"])
            events.append(WorkflowEvent.model_validate(doc))
        
        return events
