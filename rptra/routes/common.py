"""
Helpers shared by the resource routers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException

from rptra.db import DbClient, is_object_id

INVALID_ID = "Invalid ID format"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def require_object_id(doc_id: Any) -> str:
    if not is_object_id(doc_id):
        raise HTTPException(status_code=400, detail=INVALID_ID)
    return doc_id


def get_or_404(db: DbClient, collection: str, doc_id: str, message: str) -> dict:
    document = db.get(collection, require_object_id(doc_id))
    if document is None:
        raise HTTPException(status_code=404, detail=message)
    return document


def stamped(fields: dict, *, created: bool = False) -> dict:
    """Add updatedAt (and createdAt for new documents) timestamps."""
    now = utcnow()
    if created:
        return {**fields, "createdAt": now, "updatedAt": now}
    return {**fields, "updatedAt": now}
