"""
Daily visitor counts per age bracket, and the period comparison summary.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pymongo import DESCENDING

from rptra.analytics import summarize_visits
from rptra.db import VISITS, DbClient, serialize_document
from rptra.dependencies import get_db_client
from rptra.routes.common import get_or_404, require_object_id, stamped
from rptra.schemas import VisitPayload, VisitPeriod, VisitSummary

router = APIRouter(prefix="/analytics", tags=["analytics"])

NOT_FOUND = "Data tidak ditemukan"


@router.get("")
def list_visits(db: DbClient = Depends(get_db_client)):
    return serialize_document(db.find(VISITS, sort=[("date", DESCENDING)]))


@router.post("", status_code=201)
def create_visit(payload: VisitPayload, db: DbClient = Depends(get_db_client)):
    visit = db.insert(VISITS, stamped(payload.document(), created=True))
    return serialize_document(visit)


# Declared ahead of /{visit_id} so "summary" is not taken for an id.
@router.get("/summary", response_model=VisitSummary)
def visit_summary(
    period: VisitPeriod = Query(VisitPeriod.MONTH),
    db: DbClient = Depends(get_db_client),
):
    return summarize_visits(db.find(VISITS), period)


@router.get("/{visit_id}")
def get_visit(visit_id: str, db: DbClient = Depends(get_db_client)):
    return serialize_document(get_or_404(db, VISITS, visit_id, NOT_FOUND))


@router.put("/{visit_id}")
def update_visit(
    visit_id: str, payload: VisitPayload, db: DbClient = Depends(get_db_client)
):
    visit = db.update(VISITS, require_object_id(visit_id), stamped(payload.document()))
    if visit is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return serialize_document(visit)


@router.delete("/{visit_id}")
def delete_visit(visit_id: str, db: DbClient = Depends(get_db_client)):
    if db.delete(VISITS, require_object_id(visit_id)) is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Data berhasil dihapus"}
