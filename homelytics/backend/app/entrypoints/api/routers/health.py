# app/entrypoints/api/routers/health.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from ..deps import require_api_key
from ....config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/debug/config", dependencies=[Depends(require_api_key)])
def debug_config() -> dict[str, Any]:
    """
    Reads the *running server's* settings. Secrets are redacted.
    """
    def _redact(v: str | None) -> str | None:
        if not v:
            return v
        if len(v) <= 8:
            return "***"
        return v[:4] + "***" + v[-4:]

    return {
        "ENV": settings.ENV,
        "HOMELYTICS_DB_URL": settings.HOMELYTICS_DB_URL,
        "FEED_NAME": settings.FEED_NAME,
        "FEED_BASE_URL": settings.FEED_BASE_URL,
        "FEED_TOKEN_URL": settings.FEED_TOKEN_URL,
        "FEED_CLIENT_ID": _redact(settings.FEED_CLIENT_ID),
        "FEED_CLIENT_SECRET_SET": bool(settings.FEED_CLIENT_SECRET),
        "SYNC_JOB_NAME": settings.SYNC_JOB_NAME,
        "SYNC_PAGE_SIZE": settings.SYNC_PAGE_SIZE,
        "API_KEY_SET": bool(settings.API_KEY),
    }
