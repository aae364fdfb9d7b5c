"""
Admin account management. Every route requires a superadmin session.
"""

from __future__ import annotations

import logging
import math
import re

from fastapi import APIRouter, Depends, HTTPException, Query
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from rptra.auth import admin_public, hash_password, require_superadmin
from rptra.db import ADMINS, DbClient
from rptra.dependencies import get_db_client
from rptra.routes.common import require_object_id, utcnow
from rptra.schemas import AdminCreate, AdminUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users", tags=["users"], dependencies=[Depends(require_superadmin)]
)

NOT_FOUND = "User not found"
DUPLICATE = "User already exists with this email or username"
PUBLIC_FIELDS = ("username", "email", "role", "lastLogin", "createdAt")


def search_query(search: str) -> dict:
    if not search:
        return {}
    pattern = {"$regex": re.escape(search), "$options": "i"}
    return {"$or": [{"username": pattern}, {"email": pattern}, {"role": pattern}]}


@router.get("")
def list_users(
    page: int = Query(1),
    limit: int = Query(10),
    search: str = Query(""),
    db: DbClient = Depends(get_db_client),
):
    # Out-of-range paging values are clamped rather than rejected.
    page = max(1, page)
    limit = min(100, max(1, limit))
    query = search_query(search.strip())
    users = db.find(
        ADMINS,
        query,
        sort=[("createdAt", DESCENDING)],
        skip=(page - 1) * limit,
        limit=limit,
        projection=PUBLIC_FIELDS,
    )
    total = db.count(ADMINS, query)
    return {
        "users": [admin_public(user).model_dump() for user in users],
        "pagination": {
            "total": total,
            "pages": math.ceil(total / limit),
            "page": page,
            "limit": limit,
        },
    }


@router.post("", status_code=201)
def create_user(payload: AdminCreate, db: DbClient = Depends(get_db_client)):
    if db.find_one(ADMINS, {"email": payload.email}) is not None:
        raise HTTPException(status_code=400, detail="User already exists with this email")
    try:
        admin = db.insert(
            ADMINS,
            {
                "username": payload.username,
                "email": payload.email,
                "password": hash_password(payload.password),
                "role": payload.role,
                "lastLogin": None,
                "createdAt": utcnow(),
            },
        )
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail=DUPLICATE)
    logger.info("Created %s account %s", payload.role, payload.email)
    return {"message": "User created successfully", "user": admin_public(admin).model_dump()}


@router.put("/{user_id}")
def update_user(
    user_id: str, payload: AdminUpdate, db: DbClient = Depends(get_db_client)
):
    changes = {"username": payload.username, "email": payload.email, "role": payload.role}
    if payload.password:
        changes["password"] = hash_password(payload.password)
    try:
        admin = db.update(ADMINS, require_object_id(user_id), changes)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail=DUPLICATE)
    if admin is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "User updated successfully", "user": admin_public(admin).model_dump()}


@router.delete("/{user_id}")
def delete_user(user_id: str, db: DbClient = Depends(get_db_client)):
    if db.delete(ADMINS, require_object_id(user_id)) is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    logger.info("Deleted admin account %s", user_id)
    return {"message": "User deleted successfully"}
