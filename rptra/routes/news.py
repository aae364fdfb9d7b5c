"""
News articles (berita).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pymongo import DESCENDING

from rptra.db import NEWS, DbClient, serialize_document
from rptra.dependencies import get_db_client
from rptra.routes.common import get_or_404, require_object_id, stamped
from rptra.schemas import NewsCreate, NewsUpdate

router = APIRouter(prefix="/news", tags=["news"])

NOT_FOUND = "Berita tidak ditemukan"


@router.get("")
def list_news(db: DbClient = Depends(get_db_client)):
    return serialize_document(db.find(NEWS, sort=[("createdAt", DESCENDING)]))


@router.post("", status_code=201)
def create_news(payload: NewsCreate, db: DbClient = Depends(get_db_client)):
    news = db.insert(NEWS, stamped(payload.document(), created=True))
    return serialize_document(news)


@router.get("/{news_id}")
def get_news(news_id: str, db: DbClient = Depends(get_db_client)):
    return serialize_document(get_or_404(db, NEWS, news_id, NOT_FOUND))


@router.put("/{news_id}")
def update_news(
    news_id: str, payload: NewsUpdate, db: DbClient = Depends(get_db_client)
):
    news = db.update(NEWS, require_object_id(news_id), stamped(payload.changes()))
    if news is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return serialize_document(news)


@router.delete("/{news_id}")
def delete_news(news_id: str, db: DbClient = Depends(get_db_client)):
    if db.delete(NEWS, require_object_id(news_id)) is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Berita berhasil dihapus"}
