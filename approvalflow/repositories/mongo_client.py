"""MongoDB Client - Shared connection for the payload and event stores"""
from typing import Any, Dict, Optional
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError

from ..config.settings import settings
from ..utils.logger import get_logger

logger = get_logger(__name__)

PAYLOADS_COLLECTION = "payloads"
EVENTS_COLLECTION = "workflow_events"

# Index specs per collection: (keys, options)
INDEXES = {
    PAYLOADS_COLLECTION: [
        ([("workflow_id", ASCENDING), ("state_id", ASCENDING)], {}),
        ([("created_by.id", ASCENDING)], {}),
    ],
    EVENTS_COLLECTION: [
        ([("payload_id", ASCENDING), ("timestamp", ASCENDING)], {}),
        ([("performed_by", ASCENDING)], {}),
        ([("correlation_id", ASCENDING)], {"sparse": True}),
    ],
}

_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    """Process-wide client, connected and pinged on first use"""
    global _client
    if _client is None:
        logger.info(f"Connecting to MongoDB database {settings.mongo_db}")
        client = MongoClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            socketTimeoutMS=30000,
        )
        try:
            client.admin.command("ping")
        except ConnectionFailure as e:
            logger.error(f"MongoDB connection failed: {e}")
            client.close()
            raise
        _client = client
    return _client


def get_database() -> Database:
    return get_client()[settings.mongo_db]


def get_collection(name: str) -> Collection:
    return get_database()[name]


def close_connection() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB connection closed")


def create_indexes() -> None:
    """Create the payload and event indexes (idempotent)"""
    db = get_database()
    for collection_name, specs in INDEXES.items():
        for keys, options in specs:
            db[collection_name].create_index(keys, **options)
    logger.info(f"MongoDB indexes ensured for {', '.join(INDEXES)}")


def health_check() -> Dict[str, Any]:
    """Ping the server; never raises"""
    try:
        get_client().admin.command("ping")
    except PyMongoError as e:
        logger.error(f"MongoDB health check failed: {e}")
        return {"status": "unhealthy", "database": settings.mongo_db, "error": str(e)}
    return {"status": "healthy", "database": settings.mongo_db}
