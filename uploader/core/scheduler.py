"""Submission scheduler — one upload pass over the pending reports.

This is the core business logic. It depends on the ReportStore and
RemoteSubmitter protocols, not concrete implementations.
"""

from __future__ import annotations

import random
import time
from typing import Callable, Sequence, TYPE_CHECKING

import structlog

from uploader.core.errors import classify_failure
from uploader.core.geosubmit import report_to_wire
from uploader.core.models import SubmissionOutcome

if TYPE_CHECKING:
    from uploader.core.models import PendingReport
    from uploader.storage.base import ReportStore
    from uploader.submit.base import RemoteSubmitter

log = structlog.get_logger()

# Lower bound on how many reports a sampled pass sends.
MIN_REPORTS_TO_SEND = 100


def _now_ms() -> int:
    return int(time.time() * 1000)


def compute_sample_size(pending_count: int, minimum: int = MIN_REPORTS_TO_SEND) -> int:
    """A third of the backlog, but at least ``minimum``."""
    return max(pending_count // 3, minimum)


def select_batch(
    reports: Sequence[PendingReport],
    send_all: bool,
    rng: random.Random | None = None,
    minimum: int = MIN_REPORTS_TO_SEND,
) -> list[PendingReport]:
    """Choose the reports to send in one pass.

    Everything is selected when ``send_all`` is set or when the sample would
    cover the whole backlog anyway. Otherwise a fresh uniform sample without
    replacement is drawn.
    """
    sample_size = compute_sample_size(len(reports), minimum)
    if send_all or sample_size >= len(reports):
        return list(reports)
    return (rng or random).sample(list(reports), sample_size)


class SubmissionScheduler:
    """Selects pending reports, submits them and records the result."""

    def __init__(
        self,
        store: ReportStore,
        submitter: RemoteSubmitter,
        *,
        min_reports_to_send: int = MIN_REPORTS_TO_SEND,
        rng: random.Random | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        if min_reports_to_send < 1:
            raise ValueError(f"min_reports_to_send must be at least 1, got {min_reports_to_send}")
        self._store = store
        self._submitter = submitter
        self._min_reports = min_reports_to_send
        self._rng = rng or random.Random()
        self._clock = clock
        self.last_batch_size = 0

    async def run_submission_pass(self, send_all: bool) -> SubmissionOutcome:
        """Run one pass. Storage errors propagate; submit errors are classified."""
        self.last_batch_size = 0
        pending = await self._store.fetch_pending_reports()

        if not pending:
            log.info("no_reports_to_send")
            return SubmissionOutcome.NO_WORK_NEEDED

        batch = select_batch(pending, send_all, self._rng, self._min_reports)
        self.last_batch_size = len(batch)
        items = [report_to_wire(r) for r in batch]

        started = time.monotonic()
        try:
            await self._submitter.submit(items)
        except Exception as e:
            retryable = classify_failure(e)
            log.warning("reports_send_failed", count=len(batch),
                        pending=len(pending), retryable=retryable, error=str(e),
                        exc_info=True)
            if retryable:
                return SubmissionOutcome.RETRYABLE_FAILURE
            return SubmissionOutcome.TERMINAL_FAILURE
        duration_s = time.monotonic() - started

        now_ms = self._clock()
        await self._store.mark_uploaded(batch, now_ms)

        log.info("reports_sent", count=len(batch), pending=len(pending),
                 duration_s=round(duration_s, 2))
        return SubmissionOutcome.SUCCEEDED
