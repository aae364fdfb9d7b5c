"""
Community events (kegiatan). Images are lists of stored file ids.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pymongo import DESCENDING

from rptra.db import EVENTS, DbClient, serialize_document
from rptra.dependencies import get_db_client
from rptra.routes.common import get_or_404, require_object_id, stamped
from rptra.schemas import EventCreate, EventUpdate

router = APIRouter(prefix="/events", tags=["events"])

NOT_FOUND = "Event not found"


@router.get("")
def list_events(
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: DbClient = Depends(get_db_client),
):
    """Newest event date first; ``limit`` trims the list for the home page."""
    events = db.find(EVENTS, sort=[("date", DESCENDING)], limit=limit or 0)
    return serialize_document(events)


@router.post("", status_code=201)
def create_event(payload: EventCreate, db: DbClient = Depends(get_db_client)):
    event = db.insert(EVENTS, stamped(payload.document(), created=True))
    return serialize_document(event)


@router.get("/{event_id}")
def get_event(event_id: str, db: DbClient = Depends(get_db_client)):
    return serialize_document(get_or_404(db, EVENTS, event_id, NOT_FOUND))


@router.put("/{event_id}")
def update_event(
    event_id: str, payload: EventUpdate, db: DbClient = Depends(get_db_client)
):
    event = db.update(EVENTS, require_object_id(event_id), stamped(payload.changes()))
    if event is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return serialize_document(event)


@router.delete("/{event_id}")
def delete_event(event_id: str, db: DbClient = Depends(get_db_client)):
    if db.delete(EVENTS, require_object_id(event_id)) is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Event deleted"}
