"""
MongoDB Connection Utility

MongoDB stores every document the clients read and write:
- User profiles (keyed by uid)
- Jobs and applications
- Conversations and their messages
- Community posts (with embedded comments)
- Uploads (base64 resumes and profile images)
- Revoked access token ids

WHY MongoDB for these?
- Schema-flexible: profiles and jobs carry optional, evolving fields
- Document-oriented: each record is self-contained
- No joins needed: applications snapshot what they need from profile and job
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from jobboard.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri)
    return _client


def set_mongo_client(client: MongoClient) -> None:
    """Swap the client (tests, alternative deployments). Resets the cached db."""
    global _client, _db
    _client = client
    _db = None


def get_mongo_db() -> Database:
    """Get the jobboard_docs database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.error("MongoDB connection failed: %s", e)
        return False


# Not a pytest test
test_mongo_connection.__test__ = False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "profiles": "users",
    "jobs": "jobs",
    "applications": "applications",
    "conversations": "conversations",
    "messages": "messages",
    "posts": "posts",
    "uploads": "uploads",
    "revoked_tokens": "revoked_tokens",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    db[COLLECTIONS["jobs"]].create_index([("employer_id", ASCENDING), ("posted_at", DESCENDING)])
    db[COLLECTIONS["jobs"]].create_index([("posted_at", DESCENDING)])

    db[COLLECTIONS["applications"]].create_index([("job_id", ASCENDING), ("applied_at", DESCENDING)])
    db[COLLECTIONS["applications"]].create_index([("user_id", ASCENDING), ("applied_at", DESCENDING)])
    db[COLLECTIONS["applications"]].create_index(
        [("user_id", ASCENDING), ("job_id", ASCENDING)], unique=True
    )

    # Conversation listing per participant, newest activity first
    db[COLLECTIONS["conversations"]].create_index(
        [("participants", ASCENDING), ("last_message_time", DESCENDING)]
    )
    db[COLLECTIONS["messages"]].create_index(
        [("conversation_id", ASCENDING), ("timestamp", ASCENDING)]
    )

    db[COLLECTIONS["posts"]].create_index([("timestamp", DESCENDING)])
    db[COLLECTIONS["posts"]].create_index("author_id")
    db[COLLECTIONS["uploads"]].create_index("user_id")
    db[COLLECTIONS["revoked_tokens"]].create_index("jti", unique=True)

    logger.info("MongoDB indexes created successfully")
