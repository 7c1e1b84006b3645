"""Storage interface (port) for locally held reports."""

from __future__ import annotations

from typing import Protocol, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from uploader.core.models import PendingReport


class ReportStore(Protocol):
    """Port: holds reports until they are confirmed delivered."""

    async def fetch_pending_reports(self) -> list[PendingReport]: ...

    async def mark_uploaded(self, reports: Sequence[PendingReport], uploaded_at_ms: int) -> None: ...

    async def add_reports(self, reports: Sequence[PendingReport]) -> list[PendingReport]: ...

    async def count_pending(self) -> int: ...
