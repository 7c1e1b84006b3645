"""Geosubmit v2 wire shape.

Converts PendingReport objects to the JSON items the ingestion service
accepts. Keys are camelCase, unset optional fields are left out, and empty
sighting lists are omitted entirely rather than sent as [].
"""

from __future__ import annotations

from typing import Any

from uploader.core.models import (
    BluetoothBeacon,
    CellTower,
    PendingReport,
    Position,
    WifiAccessPoint,
)


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def position_to_wire(position: Position) -> dict[str, Any]:
    return _compact({
        "latitude": position.latitude,
        "longitude": position.longitude,
        "accuracy": position.accuracy,
        "age": position.age,
        "altitude": position.altitude,
        "altitudeAccuracy": position.altitude_accuracy,
        "heading": position.heading,
        "pressure": position.pressure,
        "speed": position.speed,
        "source": position.source,
    })


def wifi_to_wire(ap: WifiAccessPoint) -> dict[str, Any]:
    return _compact({
        "macAddress": ap.mac_address,
        "age": ap.age,
        "channel": ap.channel,
        "frequency": ap.frequency,
        "radioType": ap.radio_type,
        "signalStrength": ap.signal_strength,
        "signalToNoiseRatio": ap.signal_to_noise,
        "ssid": ap.ssid,
    })


def cell_to_wire(cell: CellTower) -> dict[str, Any]:
    return _compact({
        "radioType": cell.radio_type,
        "mobileCountryCode": cell.mobile_country_code,
        "mobileNetworkCode": cell.mobile_network_code,
        "locationAreaCode": cell.location_area_code,
        "cellId": cell.cell_id,
        "age": cell.age,
        "arfcn": cell.arfcn,
        "asu": cell.asu,
        "primaryScramblingCode": cell.primary_scrambling_code,
        "serving": cell.serving_cell,
        "signalStrength": cell.signal_strength,
        "timingAdvance": cell.timing_advance,
    })


def beacon_to_wire(beacon: BluetoothBeacon) -> dict[str, Any]:
    return _compact({
        "macAddress": beacon.mac_address,
        "age": beacon.age,
        "name": beacon.name,
        "signalStrength": beacon.signal_strength,
    })


def report_to_wire(report: PendingReport) -> dict[str, Any]:
    """Translate one report into a Geosubmit item."""
    item: dict[str, Any] = {
        "timestamp": report.timestamp_ms,
        "position": position_to_wire(report.position),
    }
    if report.wifi_access_points:
        item["wifiAccessPoints"] = [wifi_to_wire(ap) for ap in report.wifi_access_points]
    if report.cell_towers:
        item["cellTowers"] = [cell_to_wire(c) for c in report.cell_towers]
    if report.bluetooth_beacons:
        item["bluetoothBeacons"] = [beacon_to_wire(b) for b in report.bluetooth_beacons]
    return item
