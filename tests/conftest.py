"""Shared test fixtures."""

from __future__ import annotations

import random

import pytest
from httpx import ASGITransport, AsyncClient

import uploader.main as main_module
from uploader.config import AppConfig
from uploader.core.models import CellTower, PendingReport, Position, WifiAccessPoint
from uploader.core.runner import UploadRunner
from uploader.core.scheduler import SubmissionScheduler
from uploader.core.stats import UploadStats
from uploader.storage.memory_storage import InMemoryReportStore


class FakeSubmitter:
    """Records every batch it is given; raises ``error`` if set."""

    def __init__(self) -> None:
        self.calls: list[list[dict]] = []
        self.error: BaseException | None = None

    async def submit(self, items: list[dict]) -> None:
        self.calls.append(items)
        if self.error is not None:
            raise self.error


def build_report(i: int, *, wifi: bool = True, cells: bool = False) -> PendingReport:
    return PendingReport(
        report_id=0,
        timestamp_ms=1_700_000_000_000 + i * 1000,
        position=Position(latitude=60.17 + i * 1e-5, longitude=24.94, accuracy=8.0, source="gps"),
        wifi_access_points=(WifiAccessPoint(mac_address=f"aa:bb:cc:00:00:{i % 256:02x}", signal_strength=-70),)
        if wifi else (),
        cell_towers=(CellTower(radio_type="lte", mobile_country_code=244, mobile_network_code=5, cell_id=i),)
        if cells else (),
    )


@pytest.fixture
def store():
    return InMemoryReportStore()


@pytest.fixture
def submitter():
    return FakeSubmitter()


@pytest.fixture
def add_reports(store):
    async def _add(count: int, **kwargs) -> list[PendingReport]:
        return await store.add_reports([build_report(i, **kwargs) for i in range(count)])
    return _add


@pytest.fixture
def scheduler(store, submitter):
    return SubmissionScheduler(store, submitter, rng=random.Random(1234), clock=lambda: 1_800_000_000_000)


@pytest.fixture(autouse=True)
def _init_uploader(store, submitter, scheduler):
    """Initialize uploader singletons for every test, using in-memory storage."""
    config = AppConfig()
    config.storage.backend = "memory"
    config.scheduler.enabled = False
    config.logging.level = "warning"

    stats = UploadStats()
    runner = UploadRunner(scheduler, stats)

    # Patch module-level singletons
    main_module._config = config
    main_module._stats = stats
    main_module._store = store
    main_module._runner = runner

    yield

    # Cleanup
    main_module._config = None
    main_module._stats = None
    main_module._store = None
    main_module._runner = None


@pytest.fixture
async def client():
    from uploader.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
