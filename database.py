"""
Database helpers for the storefront admin API

The MongoDB connection is configured from the environment (DATABASE_URL,
DATABASE_NAME; a .env file is honoured). `db` stays None when no URL is set so
the app can start and report the problem on /test.
"""
import math
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from bson import ObjectId
from dotenv import load_dotenv
from pydantic import BaseModel
from pymongo import MongoClient

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "storefront")

db = None
if DATABASE_URL:
    _client = MongoClient(DATABASE_URL)
    db = _client[DATABASE_NAME]


def object_id(value: Any) -> Optional[ObjectId]:
    """ObjectId for a path parameter, None when it is not one."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def serialize(value: Any) -> Any:
    """Make a document JSON friendly: ObjectIds become strings."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [serialize(v) for v in value]
    return value


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    if db is None:
        raise RuntimeError("Database not configured")
    doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
    now = datetime.now(timezone.utc)
    doc.setdefault("createdAt", now)
    doc.setdefault("updatedAt", now)
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def paginate(collection, query: Dict[str, Any], page: int, limit: int, sort: Tuple[str, int] = ("createdAt", -1), projection: Optional[Dict[str, int]] = None) -> Tuple[List[Dict[str, Any]], int, int, int]:
    """One page of documents plus (total_count, total_pages, page).

    total_pages is never below 1 so an empty collection still has a page 1.
    The requested page is clamped to [1, total_pages] and the clamped page is
    the one returned.
    """
    total_count = collection.count_documents(query)
    total_pages = max(1, math.ceil(total_count / limit))
    page = max(1, min(page, total_pages))
    cursor = collection.find(query, projection).sort(*sort).skip((page - 1) * limit).limit(limit)
    return [serialize(doc) for doc in cursor], total_count, total_pages, page
