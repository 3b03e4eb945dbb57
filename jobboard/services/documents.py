"""
Helpers shared by the MongoDB-backed services.
"""

from datetime import datetime
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId


def serialize_doc(doc: dict) -> Optional[dict]:
    """Convert a MongoDB document to a JSON-friendly dict with a string `id`."""
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


def serialize_docs(docs) -> list:
    return [serialize_doc(doc) for doc in docs]


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse an id from a URL; malformed ids behave like missing documents."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def sort_newest_first(docs: list, field: str) -> list:
    """Sort by a datetime field, newest first; documents without it go last."""
    return sorted(docs, key=lambda d: d.get(field) or datetime.min, reverse=True)


def now() -> datetime:
    # MongoDB stores millisecond precision; truncate so reads equal writes
    current = datetime.utcnow()
    return current.replace(microsecond=current.microsecond // 1000 * 1000)
