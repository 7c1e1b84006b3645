"""Health check and monitoring endpoints."""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(prefix="/api/v1")


@router.get("/health")
async def health() -> dict:
    """Basic health check."""
    from uploader.main import get_runner, get_stats, get_store

    snapshot = get_stats().snapshot()
    return {
        "status": "ok",
        "version": "0.1.0",
        "uptime_seconds": snapshot["uptime_seconds"],
        "pending_reports": await get_store().count_pending(),
        "upload_in_progress": get_runner().busy,
        "last_outcome": snapshot["last_outcome"],
    }


@router.get("/stats")
async def stats() -> dict:
    """Detailed upload statistics.

    The ``passes`` section counts passes per outcome: ``succeeded``,
    ``no_work_needed``, ``retryable_failure`` and ``terminal_failure``.
    """
    from uploader.main import get_stats

    return get_stats().snapshot()
