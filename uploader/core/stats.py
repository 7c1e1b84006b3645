"""Upload statistics.

Tracks in-memory counters of submission passes and their outcomes.
No framework dependencies.
"""

from __future__ import annotations

import threading
import time

from uploader.core.models import SubmissionOutcome


class UploadStats:
    """Thread-safe counters for submission passes.

    ``consecutive_retryable`` counts retryable failures since the last pass
    that was not one; the runner derives its backoff from it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._started_at = time.time()

        # Counters
        self.passes_total: int = 0
        self.reports_received: int = 0
        self.reports_uploaded: int = 0
        self.storage_errors: int = 0
        self.pass_errors: int = 0
        self.consecutive_retryable: int = 0
        self.last_outcome: str | None = None
        self.last_success_ms: int | None = None
        self._outcomes: dict[SubmissionOutcome, int] = {o: 0 for o in SubmissionOutcome}

    def record_received(self, count: int) -> None:
        with self._lock:
            self.reports_received += count

    def record_pass(self, outcome: SubmissionOutcome, uploaded: int = 0) -> None:
        """Record the outcome of one pass."""
        with self._lock:
            self.passes_total += 1
            self._outcomes[outcome] += 1
            self.last_outcome = outcome.value
            if outcome is SubmissionOutcome.RETRYABLE_FAILURE:
                self.consecutive_retryable += 1
            else:
                self.consecutive_retryable = 0
            if outcome is SubmissionOutcome.SUCCEEDED:
                self.reports_uploaded += uploaded
                self.last_success_ms = int(time.time() * 1000)

    def record_storage_error(self) -> None:
        with self._lock:
            self.passes_total += 1
            self.storage_errors += 1
            self.consecutive_retryable = 0
            self.last_outcome = "storage_error"

    def record_pass_error(self) -> None:
        """A pass crashed on something other than storage."""
        with self._lock:
            self.passes_total += 1
            self.pass_errors += 1
            self.consecutive_retryable = 0
            self.last_outcome = "pass_error"

    def snapshot(self) -> dict:
        """Return a JSON-serializable snapshot of all stats."""
        with self._lock:
            return {
                "uptime_seconds": round(time.time() - self._started_at, 1),
                "passes_total": self.passes_total,
                "passes": {o.value: n for o, n in self._outcomes.items()},
                "reports_received": self.reports_received,
                "reports_uploaded": self.reports_uploaded,
                "storage_errors": self.storage_errors,
                "pass_errors": self.pass_errors,
                "consecutive_retryable": self.consecutive_retryable,
                "last_outcome": self.last_outcome,
                "last_success_ms": self.last_success_ms,
            }
