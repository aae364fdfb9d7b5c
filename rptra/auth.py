"""
Admin authentication: password hashing, session tokens and route guards.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException, Request, Response

from rptra.config import get_settings
from rptra.schemas import AdminOut, AdminRole

logger = logging.getLogger(__name__)


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds or get_settings().bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash, or a password over bcrypt's input limit.
        return False


def create_token(admin: dict, now: Optional[datetime] = None) -> str:
    settings = get_settings()
    issued = now or datetime.now(timezone.utc)
    claims = {
        "userId": str(admin["_id"]),
        "email": admin["email"],
        "role": admin.get("role", AdminRole.ADMIN.value),
        "username": admin.get("username") or admin["email"],
        "iat": issued,
        "exp": issued + timedelta(hours=settings.jwt_expires_hours),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Return the token claims. Raises ``jwt.InvalidTokenError`` when invalid or expired."""
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def extract_token(request: Request) -> Optional[str]:
    """Session token from the auth cookie, falling back to a Bearer header."""
    token = request.cookies.get(get_settings().cookie_name)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def get_token_claims(request: Request) -> dict:
    token = extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized: Token not provided")
    try:
        return decode_token(token)
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected session token: %s", exc)
        raise HTTPException(status_code=401, detail="Unauthorized: Invalid token")


def require_superadmin(claims: dict = Depends(get_token_claims)) -> dict:
    if claims.get("role") != AdminRole.SUPERADMIN.value:
        raise HTTPException(
            status_code=403, detail="Unauthorized: Superadmin access required"
        )
    return claims


def set_auth_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.jwt_expires_hours * 60 * 60,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(key=get_settings().cookie_name, path="/")


def admin_public(admin: dict) -> AdminOut:
    """Account fields safe to send to clients; the password hash never leaves."""

    def iso(value) -> Optional[str]:
        return value.isoformat() if isinstance(value, datetime) else value

    return AdminOut(
        id=str(admin["_id"]),
        username=admin.get("username", ""),
        email=admin.get("email", ""),
        role=admin.get("role", AdminRole.ADMIN.value),
        lastLogin=iso(admin.get("lastLogin")),
        createdAt=iso(admin.get("createdAt")),
    )
