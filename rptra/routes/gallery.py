"""
Photo galleries. ``date`` is stored as a datetime; drafts stay unpublished.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pymongo import DESCENDING

from rptra.db import GALLERIES, DbClient, serialize_document
from rptra.dependencies import get_db_client
from rptra.routes.common import get_or_404, require_object_id, stamped
from rptra.schemas import GalleryCreate, GalleryUpdate

router = APIRouter(prefix="/gallery", tags=["gallery"])

NOT_FOUND = "Gallery not found"


@router.get("")
def list_galleries(db: DbClient = Depends(get_db_client)):
    return serialize_document(db.find(GALLERIES, sort=[("createdAt", DESCENDING)]))


@router.post("", status_code=201)
def create_gallery(payload: GalleryCreate, db: DbClient = Depends(get_db_client)):
    gallery = db.insert(GALLERIES, stamped(payload.document(), created=True))
    return serialize_document(gallery)


@router.get("/{gallery_id}")
def get_gallery(gallery_id: str, db: DbClient = Depends(get_db_client)):
    return serialize_document(get_or_404(db, GALLERIES, gallery_id, NOT_FOUND))


@router.put("/{gallery_id}")
def update_gallery(
    gallery_id: str, payload: GalleryUpdate, db: DbClient = Depends(get_db_client)
):
    gallery = db.update(
        GALLERIES, require_object_id(gallery_id), stamped(payload.changes())
    )
    if gallery is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return serialize_document(gallery)


@router.delete("/{gallery_id}")
def delete_gallery(gallery_id: str, db: DbClient = Depends(get_db_client)):
    if db.delete(GALLERIES, require_object_id(gallery_id)) is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Gallery deleted"}
