"""Upload runner — decides when submission passes happen.

Serializes passes so that a periodic pass and a one-shot trigger never run
at the same time, and backs off exponentially after retryable failures.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from uploader.core.errors import StorageError
from uploader.core.models import SubmissionOutcome

if TYPE_CHECKING:
    from uploader.core.scheduler import SubmissionScheduler
    from uploader.core.stats import UploadStats

log = structlog.get_logger()


class UploadRunner:
    """Runs submission passes one at a time, on a cadence or on demand."""

    def __init__(
        self,
        scheduler: SubmissionScheduler,
        stats: UploadStats,
        *,
        interval_seconds: float = 3600.0,
        periodic_send_all: bool = False,
        retry_initial_seconds: float = 30.0,
        retry_max_seconds: float = 18_000.0,
    ) -> None:
        self._scheduler = scheduler
        self._stats = stats
        self._interval = interval_seconds
        self._periodic_send_all = periodic_send_all
        self._retry_initial = retry_initial_seconds
        self._retry_max = retry_max_seconds
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def run_once(self, send_all: bool) -> SubmissionOutcome:
        """Run a single pass, waiting for any pass already in progress."""
        async with self._lock:
            try:
                outcome = await self._scheduler.run_submission_pass(send_all)
            except StorageError:
                self._stats.record_storage_error()
                raise
            except Exception:
                self._stats.record_pass_error()
                raise

            self._stats.record_pass(outcome, uploaded=self._scheduler.last_batch_size)
            if outcome is SubmissionOutcome.TERMINAL_FAILURE:
                log.error("upload_failed_permanently", send_all=send_all)
            return outcome

    def next_delay(self, outcome: SubmissionOutcome | None) -> float:
        """Seconds to wait before the next periodic pass."""
        if outcome is SubmissionOutcome.RETRYABLE_FAILURE:
            attempt = max(self._stats.consecutive_retryable, 1)
            return min(self._retry_initial * 2 ** (attempt - 1), self._retry_max)
        return self._interval

    async def run_periodic(self) -> None:
        """Run passes forever. Runs as a background task."""
        log.info("upload_runner_started", interval_s=self._interval,
                 send_all=self._periodic_send_all)
        while True:
            outcome = None
            try:
                outcome = await self.run_once(self._periodic_send_all)
            except Exception:
                log.error("upload_pass_crashed", exc_info=True)

            delay = self.next_delay(outcome)
            if outcome is SubmissionOutcome.RETRYABLE_FAILURE:
                log.info("upload_retry_scheduled", delay_s=delay,
                         attempt=self._stats.consecutive_retryable)
            await asyncio.sleep(delay)
