"""
Room and facility booking requests (permohonan).

Bookings can be updated or deleted either by path id or, as older admin
screens do, with the id in the JSON body.
"""

from __future__ import annotations

import calendar
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pymongo import ASCENDING

from rptra.db import REQUESTS, DbClient, serialize_document
from rptra.dependencies import get_db_client
from rptra.routes.common import require_object_id, stamped
from rptra.schemas import IdPayload, RequestCreate, RequestUpdate

router = APIRouter(prefix="/request", tags=["request"])

NOT_FOUND = "Request not found"
ID_REQUIRED = "Request ID is required"


def month_filter(year: int, month: int) -> dict:
    """``tanggalPelaksanaan`` is a YYYY-MM-DD string, so the range compares as text."""
    if not 1 <= month <= 12:
        raise HTTPException(status_code=400, detail="Invalid month")
    last_day = calendar.monthrange(year, month)[1]
    return {
        "tanggalPelaksanaan": {
            "$gte": f"{year:04d}-{month:02d}-01",
            "$lte": f"{year:04d}-{month:02d}-{last_day:02d}",
        }
    }


@router.get("")
def list_requests(
    year: Optional[int] = Query(None, ge=1, le=9999),
    month: Optional[int] = Query(None),
    date: Optional[str] = Query(None),
    db: DbClient = Depends(get_db_client),
):
    query: dict = {}
    if year is not None and month is not None:
        query = month_filter(year, month)
    elif date:
        query = {"tanggalPelaksanaan": date}
    requests = db.find(REQUESTS, query, sort=[("tanggalPelaksanaan", ASCENDING)])
    return serialize_document(requests)


@router.post("", status_code=201)
def create_request(payload: RequestCreate, db: DbClient = Depends(get_db_client)):
    booking = db.insert(REQUESTS, stamped(payload.document(), created=True))
    return {"message": "Request saved successfully", "data": serialize_document(booking)}


def _update(db: DbClient, request_id: Optional[str], payload: RequestUpdate) -> dict:
    if not request_id:
        raise HTTPException(status_code=400, detail=ID_REQUIRED)
    booking = db.update(REQUESTS, require_object_id(request_id), stamped(payload.changes()))
    if booking is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Request updated successfully", "data": serialize_document(booking)}


def _delete(db: DbClient, request_id: str) -> dict:
    booking = db.delete(REQUESTS, require_object_id(request_id))
    if booking is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Request deleted successfully", "data": serialize_document(booking)}


@router.put("")
def update_request_by_body(
    payload: RequestUpdate, db: DbClient = Depends(get_db_client)
):
    return _update(db, payload.id, payload)


@router.delete("")
def delete_request_by_body(payload: IdPayload, db: DbClient = Depends(get_db_client)):
    return _delete(db, payload.id)


@router.put("/{request_id}")
def update_request(
    request_id: str, payload: RequestUpdate, db: DbClient = Depends(get_db_client)
):
    return _update(db, request_id, payload)


@router.delete("/{request_id}")
def delete_request(request_id: str, db: DbClient = Depends(get_db_client)):
    return _delete(db, request_id)
