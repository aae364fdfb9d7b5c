"""
Admin login, session verification and logout.
"""

from __future__ import annotations

import logging
from typing import Optional

import jwt
from fastapi import APIRouter, Depends, HTTPException, Request, Response

from rptra.auth import (
    admin_public,
    clear_auth_cookie,
    create_token,
    decode_token,
    extract_token,
    set_auth_cookie,
    verify_password,
)
from rptra.db import ADMINS, LOGIN_LOGS, DbClient
from rptra.dependencies import get_db_client
from rptra.routes.common import utcnow
from rptra.schemas import LoginPayload, LoginResponse, VerifyResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

BAD_CREDENTIALS = "Email atau password salah"


def record_login(
    db: DbClient,
    request: Request,
    username: str,
    admin: Optional[dict] = None,
    failure_reason: Optional[str] = None,
) -> None:
    db.insert(
        LOGIN_LOGS,
        {
            "adminId": admin["_id"] if admin else None,
            "username": username,
            "ipAddress": request.client.host if request.client else "unknown",
            "userAgent": request.headers.get("user-agent", "unknown"),
            "success": failure_reason is None,
            "failureReason": failure_reason,
            "loginTime": utcnow(),
        },
    )


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginPayload,
    request: Request,
    response: Response,
    db: DbClient = Depends(get_db_client),
):
    admin = db.find_one(ADMINS, {"email": payload.email})
    if admin is None:
        logger.info("Login failed for unknown email %s", payload.email)
        record_login(db, request, payload.email, failure_reason="unknown email")
        raise HTTPException(status_code=401, detail=BAD_CREDENTIALS)
    if not verify_password(payload.password, admin.get("password")):
        logger.info("Login failed for %s: wrong password", payload.email)
        record_login(
            db, request, admin.get("username", payload.email), admin, "wrong password"
        )
        raise HTTPException(status_code=401, detail=BAD_CREDENTIALS)

    admin = db.update(ADMINS, admin["_id"], {"lastLogin": utcnow()}) or admin
    record_login(db, request, admin.get("username", payload.email), admin)
    token = create_token(admin)
    set_auth_cookie(response, token)
    logger.info("Admin %s logged in", admin["email"])
    return LoginResponse(user=admin_public(admin), token=token)


@router.get("/verify", response_model=VerifyResponse, response_model_exclude_none=True)
def verify(request: Request, db: DbClient = Depends(get_db_client)):
    token = extract_token(request)
    if not token:
        return VerifyResponse(valid=False)
    try:
        claims = decode_token(token)
    except jwt.InvalidTokenError:
        return VerifyResponse(valid=False)
    # Accounts deleted after the token was issued are no longer valid.
    admin = db.get(ADMINS, claims.get("userId"))
    if admin is None:
        return VerifyResponse(valid=False)
    return VerifyResponse(valid=True, user=admin_public(admin))


@router.post("/logout")
def logout(response: Response):
    clear_auth_cookie(response)
    return {"success": True}
