"""Liveness routes.  Exempt from the global and burst rate limits."""

from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/ping")
def ping() -> dict:
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


@router.get("/health")
def health() -> dict:
    return {"status": "healthy"}
