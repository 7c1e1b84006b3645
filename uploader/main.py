"""Geosubmit uploader — main entry point.

This is the only file that knows about concrete implementations.
It wires together the core, storage, submitter, and API layers.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from uploader.api.monitoring import router as monitoring_router
from uploader.api.reports import router as reports_router
from uploader.config import AppConfig, load_config
from uploader.core.runner import UploadRunner
from uploader.core.scheduler import SubmissionScheduler
from uploader.core.stats import UploadStats
from uploader.storage.base import ReportStore
from uploader.storage.file_storage import FileReportStore
from uploader.storage.memory_storage import InMemoryReportStore
from uploader.submit.geosubmit_client import GeosubmitClient

log = structlog.get_logger()

# Module-level singletons (set during startup)
_runner: UploadRunner | None = None
_store: ReportStore | None = None
_stats: UploadStats | None = None
_config: AppConfig | None = None


def get_runner() -> UploadRunner:
    assert _runner is not None, "Uploader not initialized"
    return _runner


def get_store() -> ReportStore:
    assert _store is not None, "Uploader not initialized"
    return _store


def get_stats() -> UploadStats:
    assert _stats is not None, "Uploader not initialized"
    return _stats


def get_config() -> AppConfig:
    assert _config is not None, "Uploader not initialized"
    return _config


def _setup_logging(config: AppConfig) -> None:
    """Configure structlog based on the logging config."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.logging.format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.logging.level.upper()),
        ),
    )


def _create_store(config: AppConfig) -> ReportStore:
    if config.storage.backend == "memory":
        return InMemoryReportStore()
    if config.storage.backend == "file":
        return FileReportStore(config.storage.path)
    raise ValueError(f"unknown storage backend: {config.storage.backend!r}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    global _runner, _store, _stats, _config

    _config = load_config()
    _setup_logging(_config)

    log.info("uploader_starting",
             env=_config.server.env,
             storage_backend=_config.storage.backend,
             endpoint=_config.submit.endpoint)

    # Create components
    _stats = UploadStats()
    _store = _create_store(_config)
    submitter = GeosubmitClient(
        endpoint=_config.submit.endpoint,
        timeout_seconds=_config.submit.timeout_seconds,
        user_agent=_config.submit.user_agent,
    )
    scheduler = SubmissionScheduler(
        store=_store,
        submitter=submitter,
        min_reports_to_send=_config.scheduler.min_reports_to_send,
    )
    _runner = UploadRunner(
        scheduler,
        _stats,
        interval_seconds=_config.scheduler.interval_seconds,
        periodic_send_all=_config.scheduler.periodic_send_all,
        retry_initial_seconds=_config.scheduler.retry_initial_seconds,
        retry_max_seconds=_config.scheduler.retry_max_seconds,
    )

    # Start background upload loop
    runner_task = None
    if _config.scheduler.enabled:
        runner_task = asyncio.create_task(_runner.run_periodic())

    log.info("uploader_started",
             host=_config.server.host,
             port=_config.server.port,
             periodic=_config.scheduler.enabled)

    yield

    # Shutdown
    if runner_task is not None:
        runner_task.cancel()
        try:
            await runner_task
        except asyncio.CancelledError:
            pass
    await submitter.aclose()
    log.info("uploader_stopped")


app = FastAPI(
    title="Geosubmit uploader",
    description="Uploads locally stored geolocation reports to a Geosubmit v2 service",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(reports_router)
app.include_router(monitoring_router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    config = load_config()
    uvicorn.run("uploader.main:app", host=config.server.host, port=config.server.port)
