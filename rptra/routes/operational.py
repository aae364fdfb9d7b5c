"""
Whether the center is currently open. Stored as a single document.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from rptra.auth import get_token_claims
from rptra.db import OPERATIONALS, DbClient, serialize_document
from rptra.dependencies import get_db_client
from rptra.routes.common import utcnow
from rptra.schemas import OperationalUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/operasional", tags=["operasional"])

CURRENT_ID = "current"
DEFAULT_UPDATED_BY = "Sistem"
DEFAULT_UPDATED_BY_EMAIL = "system@local"


def default_status() -> dict:
    return {
        "status": True,
        "updatedAt": utcnow(),
        "updatedBy": DEFAULT_UPDATED_BY,
        "updatedByEmail": DEFAULT_UPDATED_BY_EMAIL,
    }


def current_status(db: DbClient) -> dict:
    return db.get_or_create(OPERATIONALS, CURRENT_ID, default_status())


@router.get("")
def get_status(db: DbClient = Depends(get_db_client)):
    return serialize_document(current_status(db))


@router.post("")
def set_status(
    payload: OperationalUpdate,
    claims: dict = Depends(get_token_claims),
    db: DbClient = Depends(get_db_client),
):
    current_status(db)
    status = db.update(
        OPERATIONALS,
        CURRENT_ID,
        {
            "status": payload.status,
            "updatedAt": utcnow(),
            "updatedBy": payload.updatedBy or DEFAULT_UPDATED_BY,
            "updatedByEmail": payload.updatedByEmail or DEFAULT_UPDATED_BY_EMAIL,
        },
    )
    logger.info(
        "Operational status set to %s by %s", payload.status, claims.get("email")
    )
    return serialize_document(status)
