"""Meta endpoints: health and version."""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health")
def health():
    return {"status": "ok", "service": "pinnote"}


@router.get("/version")
def version():
    return {"service": "pinnote", "version": "0.1.0"}
