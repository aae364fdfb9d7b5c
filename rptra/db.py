"""
Document database access for MongoDB and an in-memory test implementation.
"""

from __future__ import annotations

import copy
import logging
import re
from datetime import date, datetime
from typing import Any, Iterable, Optional, Protocol, Sequence

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError

logger = logging.getLogger(__name__)

# Collection names match the ones already in production, so existing data
# stays readable.
ADMINS = "Admins"
NEWS = "news"
EVENTS = "events"
GALLERIES = "galleries"
VIDEOS = "videos"
REQUESTS = "requests"
CONTACTS = "contacts"
VISITS = "visits"
OPERATIONALS = "operationals"
ABOUT = "about"
LOGIN_LOGS = "loginlogs"

UNIQUE_FIELDS: dict[str, tuple[str, ...]] = {ADMINS: ("email", "username")}

SortSpec = Sequence[tuple[str, int]]


def is_object_id(value: Any) -> bool:
    return isinstance(value, str) and ObjectId.is_valid(value)


def to_document_id(doc_id: Any) -> Any:
    """ObjectId for 24-hex strings; fixed string ids ("current", "main") pass through."""
    if is_object_id(doc_id):
        return ObjectId(doc_id)
    return doc_id


def serialize_document(value: Any) -> Any:
    """Convert ObjectIds and datetimes so a document can be returned as JSON."""
    if isinstance(value, dict):
        return {key: serialize_document(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_document(item) for item in value]
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class DbClient(Protocol):
    """Interface for document storage."""

    def insert(self, collection: str, document: dict) -> dict:
        ...

    def get(self, collection: str, doc_id: Any) -> Optional[dict]:
        ...

    def find_one(self, collection: str, query: dict) -> Optional[dict]:
        ...

    def find(
        self,
        collection: str,
        query: Optional[dict] = None,
        *,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
        projection: Optional[Iterable[str]] = None,
    ) -> list[dict]:
        ...

    def count(self, collection: str, query: Optional[dict] = None) -> int:
        ...

    def update(self, collection: str, doc_id: Any, changes: dict) -> Optional[dict]:
        ...

    def get_or_create(self, collection: str, doc_id: Any, defaults: dict) -> dict:
        ...

    def delete(self, collection: str, doc_id: Any) -> Optional[dict]:
        ...

    def close(self) -> None:
        ...


def _sort_key(value: Any) -> tuple:
    return (value is None, value if value is not None else 0)


def _matches_condition(value: Any, condition: Any) -> bool:
    if not isinstance(condition, dict) or not any(
        key.startswith("$") for key in condition
    ):
        return value == condition

    for op, operand in condition.items():
        if op == "$options":
            continue
        if op == "$exists":
            if (value is not None) != bool(operand):
                return False
        elif value is None:
            return False
        elif op == "$gte" and not value >= operand:
            return False
        elif op == "$gt" and not value > operand:
            return False
        elif op == "$lte" and not value <= operand:
            return False
        elif op == "$lt" and not value < operand:
            return False
        elif op == "$in" and value not in operand:
            return False
        elif op == "$ne" and value == operand:
            return False
        elif op == "$regex":
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if not isinstance(value, str) or not re.search(operand, value, flags):
                return False
    return True


def matches(document: dict, query: Optional[dict]) -> bool:
    """Evaluate the subset of the MongoDB query language the routes use."""
    for key, condition in (query or {}).items():
        if key == "$or":
            if not any(matches(document, sub) for sub in condition):
                return False
        elif not _matches_condition(document.get(key), condition):
            return False
    return True


class InMemoryDbClient:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: dict[str, dict[Any, dict]] = {}

    def _collection(self, name: str) -> dict[Any, dict]:
        return self.collections.setdefault(name, {})

    def _check_unique(self, collection: str, document: dict, doc_id: Any) -> None:
        for field_name in UNIQUE_FIELDS.get(collection, ()):
            value = document.get(field_name)
            if value is None:
                continue
            for existing_id, existing in self._collection(collection).items():
                if existing_id != doc_id and existing.get(field_name) == value:
                    raise DuplicateKeyError(
                        f"E11000 duplicate key error collection: {collection} "
                        f"index: {field_name}_1",
                        code=11000,
                    )

    def insert(self, collection: str, document: dict) -> dict:
        stored = copy.deepcopy(document)
        stored.setdefault("_id", ObjectId())
        if stored["_id"] in self._collection(collection):
            raise DuplicateKeyError("E11000 duplicate key error index: _id_", code=11000)
        self._check_unique(collection, stored, stored["_id"])
        self._collection(collection)[stored["_id"]] = stored
        return copy.deepcopy(stored)

    def get(self, collection: str, doc_id: Any) -> Optional[dict]:
        stored = self._collection(collection).get(to_document_id(doc_id))
        return copy.deepcopy(stored) if stored is not None else None

    def find_one(self, collection: str, query: dict) -> Optional[dict]:
        found = self.find(collection, query, limit=1)
        return found[0] if found else None

    def find(
        self,
        collection: str,
        query: Optional[dict] = None,
        *,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
        projection: Optional[Iterable[str]] = None,
    ) -> list[dict]:
        items = [
            doc for doc in self._collection(collection).values() if matches(doc, query)
        ]
        for field_name, direction in reversed(list(sort or [])):
            items.sort(
                key=lambda doc: _sort_key(doc.get(field_name)),
                reverse=direction == DESCENDING,
            )
        items = items[skip:]
        if limit:
            items = items[:limit]
        if projection is not None:
            keep = set(projection) | {"_id"}
            items = [{k: v for k, v in doc.items() if k in keep} for doc in items]
        return copy.deepcopy(items)

    def count(self, collection: str, query: Optional[dict] = None) -> int:
        return len(self.find(collection, query))

    def update(self, collection: str, doc_id: Any, changes: dict) -> Optional[dict]:
        key = to_document_id(doc_id)
        stored = self._collection(collection).get(key)
        if stored is None:
            return None
        merged = {**stored, **copy.deepcopy(changes)}
        self._check_unique(collection, merged, key)
        self._collection(collection)[key] = merged
        return copy.deepcopy(merged)

    def get_or_create(self, collection: str, doc_id: Any, defaults: dict) -> dict:
        existing = self.get(collection, doc_id)
        if existing is not None:
            return existing
        return self.insert(collection, {**defaults, "_id": to_document_id(doc_id)})

    def delete(self, collection: str, doc_id: Any) -> Optional[dict]:
        return self._collection(collection).pop(to_document_id(doc_id), None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()

    def close(self) -> None:
        pass


class MongoDbClient:
    """
    pymongo-backed implementation. The underlying MongoClient connects lazily
    on the first operation and pools connections for the process lifetime.
    """

    def __init__(
        self, uri: str, database: Optional[str] = None, timeout_ms: int = 5000
    ):
        if not uri:
            raise ValueError("MONGODB_URI is required for MongoDbClient")
        self.client = MongoClient(
            uri, serverSelectionTimeoutMS=timeout_ms, tz_aware=True
        )
        if database:
            self.database = self.client[database]
        else:
            self.database = self.client.get_default_database(default="rptra")
        logger.info("Using MongoDB database %s", self.database.name)

    def ensure_indexes(self) -> None:
        admins = self.database[ADMINS]
        admins.create_index("email", unique=True)
        admins.create_index("username", unique=True)
        logs = self.database[LOGIN_LOGS]
        logs.create_index([("adminId", ASCENDING), ("loginTime", DESCENDING)])
        logs.create_index([("username", ASCENDING), ("loginTime", DESCENDING)])
        self.database[VISITS].create_index([("date", DESCENDING)])

    def insert(self, collection: str, document: dict) -> dict:
        stored = dict(document)
        result = self.database[collection].insert_one(stored)
        stored["_id"] = result.inserted_id
        return stored

    def get(self, collection: str, doc_id: Any) -> Optional[dict]:
        return self.database[collection].find_one({"_id": to_document_id(doc_id)})

    def find_one(self, collection: str, query: dict) -> Optional[dict]:
        return self.database[collection].find_one(query)

    def find(
        self,
        collection: str,
        query: Optional[dict] = None,
        *,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
        projection: Optional[Iterable[str]] = None,
    ) -> list[dict]:
        cursor = self.database[collection].find(
            query or {}, list(projection) if projection is not None else None
        )
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def count(self, collection: str, query: Optional[dict] = None) -> int:
        return self.database[collection].count_documents(query or {})

    def update(self, collection: str, doc_id: Any, changes: dict) -> Optional[dict]:
        return self.database[collection].find_one_and_update(
            {"_id": to_document_id(doc_id)},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

    def get_or_create(self, collection: str, doc_id: Any, defaults: dict) -> dict:
        key = to_document_id(doc_id)
        try:
            return self.database[collection].find_one_and_update(
                {"_id": key},
                {"$setOnInsert": defaults},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            # Another request inserted it first.
            return self.database[collection].find_one({"_id": key})

    def delete(self, collection: str, doc_id: Any) -> Optional[dict]:
        return self.database[collection].find_one_and_delete(
            {"_id": to_document_id(doc_id)}
        )

    def close(self) -> None:
        self.client.close()
