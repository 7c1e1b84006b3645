"""Geosubmit uploader — core internal data models.

These are plain dataclasses with no framework dependencies.
JSON payloads are converted to/from these at the boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float
    accuracy: float | None = None
    age: int | None = None
    altitude: float | None = None
    altitude_accuracy: float | None = None
    heading: float | None = None
    pressure: float | None = None
    speed: float | None = None
    source: str | None = None  # "gps", "fused", "manual"


@dataclass(frozen=True)
class WifiAccessPoint:
    mac_address: str
    age: int | None = None
    channel: int | None = None
    frequency: int | None = None
    radio_type: str | None = None
    signal_strength: int | None = None
    signal_to_noise: int | None = None
    ssid: str | None = None


@dataclass(frozen=True)
class CellTower:
    radio_type: str  # "gsm", "wcdma", "lte", "nr"
    mobile_country_code: int | None = None
    mobile_network_code: int | None = None
    location_area_code: int | None = None
    cell_id: int | None = None
    age: int | None = None
    arfcn: int | None = None
    asu: int | None = None
    primary_scrambling_code: int | None = None
    serving_cell: int | None = None
    signal_strength: int | None = None
    timing_advance: int | None = None


@dataclass(frozen=True)
class BluetoothBeacon:
    mac_address: str
    age: int | None = None
    name: str | None = None
    signal_strength: int | None = None


@dataclass(frozen=True)
class PendingReport:
    report_id: int
    timestamp_ms: int
    position: Position
    wifi_access_points: tuple[WifiAccessPoint, ...] = ()
    cell_towers: tuple[CellTower, ...] = ()
    bluetooth_beacons: tuple[BluetoothBeacon, ...] = ()
    uploaded: bool = False
    upload_timestamp_ms: int | None = None


class SubmissionOutcome(str, Enum):
    """Result of one submission pass."""

    SUCCEEDED = "succeeded"
    NO_WORK_NEEDED = "no_work_needed"
    RETRYABLE_FAILURE = "retryable_failure"
    TERMINAL_FAILURE = "terminal_failure"

    @property
    def is_retryable(self) -> bool:
        return self is SubmissionOutcome.RETRYABLE_FAILURE
