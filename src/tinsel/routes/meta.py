"""Meta endpoints — health and version."""

from __future__ import annotations

from fastapi import APIRouter

from tinsel import __version__

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health")
def health():
    return {"status": "ok", "service": "tinsel"}


@router.get("/version")
def version():
    return {"service": __version__}
