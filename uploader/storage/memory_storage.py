"""In-process implementation of ReportStore."""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from uploader.core.models import PendingReport


class InMemoryReportStore:
    """ReportStore backed by a dict. Zero dependencies, lost on restart."""

    def __init__(self) -> None:
        self._reports: dict[int, PendingReport] = {}
        self._next_report_id = 1

    async def fetch_pending_reports(self) -> list[PendingReport]:
        return [r for r in self._reports.values() if not r.uploaded]

    async def mark_uploaded(self, reports: Sequence[PendingReport], uploaded_at_ms: int) -> None:
        for report in reports:
            current = self._reports.get(report.report_id)
            if current is None:
                continue
            self._reports[report.report_id] = replace(
                current, uploaded=True, upload_timestamp_ms=uploaded_at_ms,
            )

    async def add_reports(self, reports: Sequence[PendingReport]) -> list[PendingReport]:
        added = []
        for report in reports:
            stored = replace(report, report_id=self._next_report_id)
            self._next_report_id += 1
            self._reports[stored.report_id] = stored
            added.append(stored)
        return added

    async def count_pending(self) -> int:
        return sum(1 for r in self._reports.values() if not r.uploaded)

    def get(self, report_id: int) -> PendingReport | None:
        return self._reports.get(report_id)
