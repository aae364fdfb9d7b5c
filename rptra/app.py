"""
FastAPI application entry point for the RPTRA backend.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rptra.config import get_settings
from rptra.dependencies import close_clients
from rptra.routes import router

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Terjadi kesalahan server"
LOCATION_ROOTS = ("body", "query", "path", "header", "cookie")


def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in LOCATION_ROOTS]
    return ".".join(parts) or "body"


def validation_details(errors: list[dict]) -> list[dict]:
    details = []
    for error in errors:
        field = _field_name(tuple(error.get("loc", ())))
        if error.get("type") == "missing":
            message = f"Field {field} is required"
        else:
            message = error.get("msg", "Invalid value")
        details.append({"field": field, "message": message})
    return details


async def handle_validation_error(request: Request, exc: RequestValidationError):
    details = validation_details(exc.errors())
    return JSONResponse(
        status_code=400,
        content={
            "error": ", ".join(detail["message"] for detail in details),
            "details": details,
        },
    )


async def handle_http_error(request: Request, exc: StarletteHTTPException):
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(
        status_code=exc.status_code, content=content, headers=exc.headers
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("%s %s failed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": SERVER_ERROR_MESSAGE})


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_clients()


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="RPTRA Backend (FastAPI)", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
