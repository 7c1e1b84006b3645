"""File-based storage implementation.

Stores reports as one JSON object per line in a single .jsonl file.
New reports are appended. Marking reports as uploaded rewrites the whole
file through a temporary sibling and os.replace(), so a crash mid-write
leaves either the old file or the new one, never a mix.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, replace
from pathlib import Path
from typing import Sequence

import structlog

from uploader.core.errors import StorageError
from uploader.core.models import (
    BluetoothBeacon,
    CellTower,
    PendingReport,
    Position,
    WifiAccessPoint,
)

log = structlog.get_logger()


def _serialize_report(report: PendingReport) -> str:
    return json.dumps(asdict(report), separators=(",", ":"))


def _deserialize_report(line: str) -> PendingReport:
    data = json.loads(line)
    return PendingReport(
        report_id=data["report_id"],
        timestamp_ms=data["timestamp_ms"],
        position=Position(**data["position"]),
        wifi_access_points=tuple(WifiAccessPoint(**ap) for ap in data.get("wifi_access_points", [])),
        cell_towers=tuple(CellTower(**c) for c in data.get("cell_towers", [])),
        bluetooth_beacons=tuple(BluetoothBeacon(**b) for b in data.get("bluetooth_beacons", [])),
        uploaded=data.get("uploaded", False),
        upload_timestamp_ms=data.get("upload_timestamp_ms"),
    )


class FileReportStore:
    """ReportStore backed by a JSON Lines file on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._next_report_id = max((r.report_id for r in self._read_all()), default=0) + 1

    def _read_all(self) -> list[PendingReport]:
        if not self._path.exists():
            return []
        try:
            with open(self._path) as f:
                return [_deserialize_report(line) for line in f if line.strip()]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StorageError(f"cannot read {self._path}: {e}") from e

    def _write_all(self, reports: list[PendingReport]) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            with open(tmp_path, "w") as f:
                for report in reports:
                    f.write(_serialize_report(report) + "\n")
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageError(f"cannot write {self._path}: {e}") from e

    async def fetch_pending_reports(self) -> list[PendingReport]:
        return [r for r in self._read_all() if not r.uploaded]

    async def mark_uploaded(self, reports: Sequence[PendingReport], uploaded_at_ms: int) -> None:
        """Mark exactly the given reports as uploaded, in a single rewrite."""
        ids = {r.report_id for r in reports}
        updated = []
        marked = 0
        for report in self._read_all():
            if report.report_id in ids and not report.uploaded:
                report = replace(report, uploaded=True, upload_timestamp_ms=uploaded_at_ms)
                marked += 1
            updated.append(report)

        self._write_all(updated)
        log.debug("reports_marked_uploaded", count=marked, path=str(self._path))

    async def add_reports(self, reports: Sequence[PendingReport]) -> list[PendingReport]:
        added = []
        for report in reports:
            added.append(replace(report, report_id=self._next_report_id))
            self._next_report_id += 1

        try:
            with open(self._path, "a") as f:
                for report in added:
                    f.write(_serialize_report(report) + "\n")
        except OSError as e:
            raise StorageError(f"cannot append to {self._path}: {e}") from e

        log.debug("reports_written", count=len(added), path=str(self._path))
        return added

    async def count_pending(self) -> int:
        return sum(1 for r in self._read_all() if not r.uploaded)
