"""Report intake and upload trigger endpoints.

This is the thin FastAPI adapter. It parses Geosubmit-shaped JSON into
internal models, hands them to the store, and triggers submission passes.
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Query, Request, Response

from uploader.core.models import (
    BluetoothBeacon,
    CellTower,
    PendingReport,
    Position,
    WifiAccessPoint,
)

router = APIRouter(prefix="/api/v1")


def _json_response(content: dict, status_code: int = 200) -> Response:
    return Response(
        content=json.dumps(content),
        status_code=status_code,
        media_type="application/json",
    )


def _parse_json_report(data: dict) -> PendingReport:
    """Parse a Geosubmit item into a report. Raises KeyError/TypeError/ValueError."""
    pos = data["position"]
    return PendingReport(
        report_id=0,
        timestamp_ms=int(data["timestamp"]),
        position=Position(
            latitude=float(pos["latitude"]),
            longitude=float(pos["longitude"]),
            accuracy=pos.get("accuracy"),
            age=pos.get("age"),
            altitude=pos.get("altitude"),
            altitude_accuracy=pos.get("altitudeAccuracy"),
            heading=pos.get("heading"),
            pressure=pos.get("pressure"),
            speed=pos.get("speed"),
            source=pos.get("source"),
        ),
        wifi_access_points=tuple(
            WifiAccessPoint(
                mac_address=ap["macAddress"],
                age=ap.get("age"),
                channel=ap.get("channel"),
                frequency=ap.get("frequency"),
                radio_type=ap.get("radioType"),
                signal_strength=ap.get("signalStrength"),
                signal_to_noise=ap.get("signalToNoiseRatio"),
                ssid=ap.get("ssid"),
            )
            for ap in data.get("wifiAccessPoints") or []
        ),
        cell_towers=tuple(
            CellTower(
                radio_type=c["radioType"],
                mobile_country_code=c.get("mobileCountryCode"),
                mobile_network_code=c.get("mobileNetworkCode"),
                location_area_code=c.get("locationAreaCode"),
                cell_id=c.get("cellId"),
                age=c.get("age"),
                arfcn=c.get("arfcn"),
                asu=c.get("asu"),
                primary_scrambling_code=c.get("primaryScramblingCode"),
                serving_cell=c.get("serving"),
                signal_strength=c.get("signalStrength"),
                timing_advance=c.get("timingAdvance"),
            )
            for c in data.get("cellTowers") or []
        ),
        bluetooth_beacons=tuple(
            BluetoothBeacon(
                mac_address=b["macAddress"],
                age=b.get("age"),
                name=b.get("name"),
                signal_strength=b.get("signalStrength"),
            )
            for b in data.get("bluetoothBeacons") or []
        ),
    )


@router.post("/reports")
async def receive_reports(request: Request) -> Response:
    """Store reports for a later upload.

    Body: {"items": [<Geosubmit item>, ...]}
    """
    from uploader.main import get_stats, get_store

    body_bytes = await request.body()
    try:
        body = json.loads(body_bytes)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _json_response({"accepted": False, "error": "invalid JSON"}, 400)

    items = body.get("items") if isinstance(body, dict) else None
    if not isinstance(items, list):
        return _json_response({"accepted": False, "error": "items list is required"}, 422)

    try:
        reports = [_parse_json_report(item) for item in items]
    except (KeyError, TypeError, ValueError) as e:
        return _json_response({"accepted": False, "error": f"invalid report: {e}"}, 422)

    stored = await get_store().add_reports(reports)
    get_stats().record_received(len(stored))
    return _json_response({"accepted": True, "error": "", "reports_stored": len(stored)})


@router.post("/upload")
async def trigger_upload(send_all: bool = Query(default=True)) -> Response:
    """Run one submission pass now and report its outcome."""
    from uploader.main import get_runner

    outcome = await get_runner().run_once(send_all)
    return _json_response({"outcome": outcome.value, "retryable": outcome.is_retryable})
