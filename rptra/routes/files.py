"""
Upload, stream, list and delete stored files (images referenced by content).
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import Response, StreamingResponse

from rptra.config import get_settings
from rptra.dependencies import get_blob_store
from rptra.storage import BlobStore, InvalidFileId, StoredFile

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])

INVALID_FILE_ID = "Invalid file ID format"
FILE_NOT_FOUND = "File not found"
CACHE_FOREVER = "public, max-age=31536000, immutable"


def file_url(file_id: str) -> str:
    return f"{get_settings().api_prefix}/files/{file_id}"


def describe(stored: StoredFile) -> dict:
    return {**stored.describe(), "url": file_url(stored.file_id)}


def safe_filename(name: str) -> str:
    return name.replace('"', "").replace("\\", "")


def content_disposition(name: str) -> str:
    """
    Inline disposition for ``name``. Names outside printable ASCII get an
    RFC 6266 ``filename*`` parameter next to an ASCII fallback, since header
    values must be latin-1 encodable.
    """
    name = safe_filename(name)
    ascii_name = "".join(char for char in name if " " <= char <= "~")
    if ascii_name == name:
        return f'inline; filename="{name}"'
    fallback = ascii_name.strip() or "file"
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(name, safe='')}"


def upload_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, 2)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


@router.post("/upload", status_code=201)
def upload_file(
    file: Optional[UploadFile] = File(None),
    store: BlobStore = Depends(get_blob_store),
):
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="File tidak ditemukan")
    limit = get_settings().max_upload_bytes
    if upload_size(file) > limit:
        raise HTTPException(
            status_code=413, detail=f"Ukuran file melebihi batas {limit} byte"
        )
    file_id = store.upload(file.file, file.filename, file.content_type)
    return {
        "success": True,
        "fileId": file_id,
        "url": file_url(file_id),
        "message": "File berhasil diupload",
    }


@router.get("/files")
def list_files(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    store: BlobStore = Depends(get_blob_store),
):
    result = store.list_files(page=page, limit=limit)
    return {
        "files": [describe(stored) for stored in result.files],
        "pagination": {
            "total": result.total,
            "pages": result.total_pages,
            "page": result.page,
            "limit": limit,
        },
    }


@router.get("/files/{file_id}")
def download_file(
    file_id: str, request: Request, store: BlobStore = Depends(get_blob_store)
):
    try:
        stored = store.retrieve(file_id)
    except InvalidFileId:
        raise HTTPException(status_code=400, detail=INVALID_FILE_ID)
    if stored is None:
        raise HTTPException(status_code=404, detail=FILE_NOT_FOUND)

    if request.headers.get("if-none-match") == stored.file_id:
        stored.close()
        return Response(status_code=304, headers={"ETag": stored.file_id})

    headers = {
        "Content-Length": str(stored.length),
        "Content-Disposition": content_disposition(stored.filename),
        "Cache-Control": CACHE_FOREVER,
        "ETag": stored.file_id,
    }
    return StreamingResponse(
        stored.iter_chunks(), media_type=stored.content_type, headers=headers
    )


@router.delete("/files/{file_id}")
def delete_file(file_id: str, store: BlobStore = Depends(get_blob_store)):
    try:
        removed = store.remove(file_id)
    except InvalidFileId:
        raise HTTPException(status_code=400, detail=INVALID_FILE_ID)
    if not removed:
        raise HTTPException(status_code=404, detail=FILE_NOT_FOUND)
    logger.info("Deleted file %s", file_id)
    return {"success": True, "message": "File berhasil dihapus"}
