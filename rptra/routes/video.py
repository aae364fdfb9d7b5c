"""
Embedded YouTube videos.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pymongo import DESCENDING

from rptra.db import VIDEOS, DbClient, serialize_document
from rptra.dependencies import get_db_client
from rptra.routes.common import get_or_404, require_object_id, stamped
from rptra.schemas import VideoPayload

router = APIRouter(prefix="/video", tags=["video"])

NOT_FOUND = "Video tidak ditemukan"


@router.get("")
def list_videos(db: DbClient = Depends(get_db_client)):
    return serialize_document(db.find(VIDEOS, sort=[("createdAt", DESCENDING)]))


@router.post("", status_code=201)
def create_video(payload: VideoPayload, db: DbClient = Depends(get_db_client)):
    video = db.insert(VIDEOS, stamped(payload.document(), created=True))
    return serialize_document(video)


@router.get("/{video_id}")
def get_video(video_id: str, db: DbClient = Depends(get_db_client)):
    return serialize_document(get_or_404(db, VIDEOS, video_id, NOT_FOUND))


@router.put("/{video_id}")
def update_video(
    video_id: str, payload: VideoPayload, db: DbClient = Depends(get_db_client)
):
    # Videos are always replaced as a whole.
    video = db.update(VIDEOS, require_object_id(video_id), stamped(payload.document()))
    if video is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return serialize_document(video)


@router.delete("/{video_id}")
def delete_video(video_id: str, db: DbClient = Depends(get_db_client)):
    if db.delete(VIDEOS, require_object_id(video_id)) is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Video berhasil dihapus"}
