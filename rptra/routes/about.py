"""
The "about" page content, kept as a single document.

Saving new content removes the stored images it no longer references.
"""

from __future__ import annotations

import copy
import logging

from fastapi import APIRouter, Depends, Response

from rptra.auth import get_token_claims
from rptra.db import ABOUT, DbClient, serialize_document
from rptra.dependencies import get_blob_store, get_db_client
from rptra.routes.common import utcnow
from rptra.schemas import AboutPayload
from rptra.storage import BlobStore, InvalidFileId

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/about", tags=["about"])

ABOUT_ID = "main"

DEFAULT_ABOUT = {
    "title": "About RPTRA Kebon Melati",
    "subtitle": (
        "Ruang Publik Terpadu Ramah Anak yang berkomitmen menciptakan lingkungan "
        "aman dan mendukung perkembangan anak di Jakarta Pusat"
    ),
    "mission": {
        "title": "Misi Kami",
        "description": "Menyediakan ruang aman dan ramah anak bagi warga sekitar.",
        "image": "",
    },
    "vision": {
        "title": "Visi",
        "description": "Menjadi ruang publik terdepan yang mendukung tumbuh kembang anak.",
        "image": "",
    },
    "values": {
        "title": "Nilai-Nilai",
        "description": "Keamanan, Pendidikan, Kebersamaan, Kesehatan",
    },
    "programs": {
        "title": "Program Kami",
        "description": "Beragam program yang mendukung perkembangan anak dan keluarga.",
        "items": [
            {"name": "Program Pendidikan Anak", "description": "Kegiatan belajar dan bermain."},
            {"name": "Program Kesehatan Masyarakat", "description": "Edukasi kesehatan warga."},
        ],
    },
    "facilities": {
        "title": "Fasilitas",
        "description": "Fasilitas lengkap untuk anak dan keluarga.",
        "items": [
            {"name": "Ruang Bermain Anak", "description": "Area bermain yang aman."},
            {"name": "Perpustakaan Mini", "description": "Koleksi buku anak."},
        ],
        "images": [],
    },
    "collaborations": {
        "title": "Kemitraan",
        "description": "Bekerjasama dengan berbagai pihak.",
        "partners": [
            {"name": "Dinas Sosial DKI Jakarta", "role": "Pembina dan Pengawas"},
            {"name": "Puskesmas Setempat", "role": "Partner Kesehatan"},
        ],
    },
    "operational": {
        "title": "Jam Operasional",
        "hours": {
            "senin": "06:00 - 13:00",
            "selasa": "06:00 - 12:00",
            "rabu": "06:00 - 12:00",
            "kamis": "06:00 - 12:00",
            "jumat": "06:00 - 13:00",
            "sabtu": "08:00 - 14:00",
            "minggu": "08:00 - 14:00",
        },
    },
    "establishedYear": "2017",
    "establishedText": "Berdiri Sejak",
}


def default_about() -> dict:
    return {**copy.deepcopy(DEFAULT_ABOUT), "lastUpdated": utcnow()}


def referenced_images(about: dict) -> set[str]:
    images = set(about.get("facilities", {}).get("images") or [])
    for section in ("mission", "vision"):
        image = (about.get(section) or {}).get("image")
        if image:
            images.add(image)
    return {str(image) for image in images}


def remove_unused_images(store: BlobStore, old: dict, new: dict) -> list[str]:
    """Delete images ``old`` references and ``new`` does not; return the ids that failed."""
    failed = []
    for file_id in sorted(referenced_images(old) - referenced_images(new)):
        try:
            removed = store.remove(file_id)
        except InvalidFileId:
            removed = False
        if not removed:
            logger.warning("Could not delete unused about image %s", file_id)
            failed.append(file_id)
    return failed


@router.get("")
def get_about(response: Response, db: DbClient = Depends(get_db_client)):
    about = db.get_or_create(ABOUT, ABOUT_ID, default_about())
    response.headers["Cache-Control"] = "public, max-age=3600"
    return {"success": True, "about": serialize_document(about)}


@router.post("", status_code=201)
def save_about(
    payload: AboutPayload,
    claims: dict = Depends(get_token_claims),
    db: DbClient = Depends(get_db_client),
    store: BlobStore = Depends(get_blob_store),
):
    current = db.get_or_create(ABOUT, ABOUT_ID, default_about())
    content = payload.document()
    failed = remove_unused_images(store, current, content)
    about = db.update(ABOUT, ABOUT_ID, {**content, "lastUpdated": utcnow()})
    logger.info("About page updated by %s", claims.get("email"))
    result = serialize_document(about)
    if failed:
        result["imageDeletionFailures"] = failed
    return result
