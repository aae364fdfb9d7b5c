"""
API routers, one per resource, collected under a single router.
"""

from fastapi import APIRouter

from rptra.routes import (
    about,
    analytics,
    auth,
    contact,
    events,
    files,
    gallery,
    news,
    operational,
    requests,
    users,
    video,
)

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


for module in (
    auth,
    news,
    events,
    gallery,
    video,
    contact,
    analytics,
    requests,
    users,
    operational,
    about,
    files,
):
    router.include_router(module.router)
