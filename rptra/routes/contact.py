"""
Contact-form messages sent from the public site.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pymongo import DESCENDING

from rptra.db import CONTACTS, DbClient, serialize_document
from rptra.dependencies import get_db_client
from rptra.routes.common import require_object_id, stamped
from rptra.schemas import ContactCreate

router = APIRouter(prefix="/contact", tags=["contact"])


@router.get("")
def list_messages(db: DbClient = Depends(get_db_client)):
    return serialize_document(db.find(CONTACTS, sort=[("createdAt", DESCENDING)]))


@router.post("", status_code=201)
def create_message(payload: ContactCreate, db: DbClient = Depends(get_db_client)):
    message = db.insert(CONTACTS, stamped(payload.document(), created=True))
    return serialize_document(message)


@router.delete("/{message_id}")
def delete_message(message_id: str, db: DbClient = Depends(get_db_client)):
    if db.delete(CONTACTS, require_object_id(message_id)) is None:
        raise HTTPException(status_code=404, detail="Pesan tidak ditemukan")
    return {
        "success": True,
        "message": "Pesan berhasil dihapus",
        "deletedId": message_id,
    }
