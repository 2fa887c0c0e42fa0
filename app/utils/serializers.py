from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from bson import ObjectId


def serialize_value(value: Any) -> Any:
    """Recursively serialize non-JSON-serializable values"""
    if isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, timedelta):
        return str(value)
    elif isinstance(value, ObjectId):
        return str(value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(item) for item in value]
    return value


def serialize_document(doc: Optional[dict]) -> Optional[dict]:
    """Convert a MongoDB document to JSON-serializable format with `id` instead of `_id`"""
    if doc is None:
        return None

    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))

    return {k: serialize_value(v) for k, v in doc.items()}


def serialize_documents(docs: list) -> list:
    return [serialize_document(d) for d in docs]


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse a canonical id string, returning None when malformed"""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize datetimes to naive UTC, the form MongoDB hands back"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
