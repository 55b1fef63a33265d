"""Payload Repository - MongoDB data access for workflow documents"""
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from .base import PayloadRepository
from .mongo_client import get_collection, PAYLOADS_COLLECTION
from ..domain.models import WorkflowDocument
from ..domain.errors import AlreadyExistsError, ConcurrencyError, PayloadNotFoundError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class MongoPayloadRepository(PayloadRepository):
    """Repository for workflow documents"""
    
    def __init__(self, collection: Optional[Collection] = None):
        self._payloads: Collection = collection if collection is not None else get_collection(PAYLOADS_COLLECTION)
    
    def create(self, payload: WorkflowDocument) -> WorkflowDocument:
        """Create a new payload"""
        doc = payload.model_dump(mode="json")
        doc["_id"] = payload.id
        
        try:
            self._payloads.insert_one(doc)
        except DuplicateKeyError:
            raise AlreadyExistsError(f"Payload {payload.id} already exists", details={"payload_id": payload.id})
        
        logger.info(
            f"Created payload: {payload.id}",
            extra={"payload_id": payload.id, "workflow_id": payload.workflow_id, "state_id": payload.state_id}
        )
        return payload
    
    def save(
        self,
        payload: WorkflowDocument,
        expected_state_id: Optional[str] = None
    ) -> WorkflowDocument:
        """Save payload, conditioned on its stored state when expected_state_id is given"""
        doc = payload.model_dump(mode="json")
        doc["_id"] = payload.id
        
        if expected_state_id is None:
            self._payloads.replace_one({"_id": payload.id}, doc, upsert=True)
        else:
            result = self._payloads.replace_one(
                {"_id": payload.id, "state_id": expected_state_id},
                doc
            )
            if result.matched_count == 0:
                exists = self._payloads.find_one({"_id": payload.id})
                if exists:
                    raise ConcurrencyError(
                        f"Payload {payload.id} was modified. Please refresh and try again.",
                        details={"expected_state_id": expected_state_id, "state_id": exists.get("state_id")}
                    )
                raise PayloadNotFoundError(f"Payload {payload.id} not found", details={"payload_id": payload.id})
        
        logger.info(
            f"Saved payload: {payload.id}",
            extra={"payload_id": payload.id, "state_id": payload.state_id}
        )
        return payload
    
    def load(self, payload_id: str) -> WorkflowDocument:
        """Get payload by ID"""
        doc = self._payloads.find_one({"_id": payload_id})
        if doc is None:
            raise PayloadNotFoundError(f"Payload {payload_id} not found", details={"payload_id": payload_id})
        doc.pop("_id", None)
        return WorkflowDocument.model_validate(doc)
    
    def list_by_workflow(self, workflow_id: str, state_id: Optional[str] = None) -> List[WorkflowDocument]:
        """List payloads of a workflow"""
        query: Dict[str, Any] = {"workflow_id": workflow_id}
        if state_id:
            query["state_id"] = state_id
        
        payloads = []
        for doc in self._payloads.find(query):
            doc.pop("_id", None)
            payloads.append(WorkflowDocument.model_validate(doc))
        return payloads
