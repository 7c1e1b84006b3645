"""Tests for the Geosubmit wire shape and the httpx client."""

from __future__ import annotations

import json

import httpx
import pytest

from uploader.core.errors import FailureKind, SubmitError
from uploader.core.geosubmit import report_to_wire
from uploader.core.models import (
    BluetoothBeacon,
    CellTower,
    PendingReport,
    Position,
    SubmissionOutcome,
    WifiAccessPoint,
)
from uploader.core.scheduler import SubmissionScheduler
from uploader.submit.geosubmit_client import GeosubmitClient

ENDPOINT = "https://geosubmit.test/v2/geosubmit"


def test_report_to_wire_full():
    report = PendingReport(
        report_id=7,
        timestamp_ms=1_700_000_123_000,
        position=Position(latitude=60.1699, longitude=24.9384, accuracy=5.0,
                          altitude=12.5, altitude_accuracy=3.0, speed=1.2, source="gps"),
        wifi_access_points=(WifiAccessPoint(mac_address="01:23:45:67:89:ab", frequency=2412,
                                            signal_strength=-51, ssid="cafe"),),
        cell_towers=(CellTower(radio_type="lte", mobile_country_code=244, mobile_network_code=91,
                               location_area_code=4100, cell_id=123456, serving_cell=1),),
        bluetooth_beacons=(BluetoothBeacon(mac_address="ff:ee:dd:cc:bb:aa", name="tag"),),
    )

    item = report_to_wire(report)

    assert item["timestamp"] == 1_700_000_123_000
    assert item["position"] == {
        "latitude": 60.1699,
        "longitude": 24.9384,
        "accuracy": 5.0,
        "altitude": 12.5,
        "altitudeAccuracy": 3.0,
        "speed": 1.2,
        "source": "gps",
    }
    assert item["wifiAccessPoints"] == [
        {"macAddress": "01:23:45:67:89:ab", "frequency": 2412, "signalStrength": -51, "ssid": "cafe"},
    ]
    assert item["cellTowers"][0]["mobileNetworkCode"] == 91
    assert item["cellTowers"][0]["serving"] == 1
    assert item["bluetoothBeacons"] == [{"macAddress": "ff:ee:dd:cc:bb:aa", "name": "tag"}]
    assert "report_id" not in item


def test_report_to_wire_omits_empty_lists():
    report = PendingReport(report_id=1, timestamp_ms=1, position=Position(latitude=1.0, longitude=2.0))

    item = report_to_wire(report)

    assert item == {"timestamp": 1, "position": {"latitude": 1.0, "longitude": 2.0}}


def _client(handler) -> GeosubmitClient:
    transport = httpx.MockTransport(handler)
    return GeosubmitClient(ENDPOINT, user_agent="test-agent",
                           client=httpx.AsyncClient(transport=transport))


@pytest.mark.asyncio
async def test_submit_posts_items():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["ua"] = request.headers["user-agent"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={})

    await _client(handler).submit([{"timestamp": 1, "position": {"latitude": 1.0, "longitude": 2.0}}])

    assert seen["url"] == ENDPOINT
    assert seen["ua"] == "test-agent"
    assert seen["body"] == {"items": [{"timestamp": 1, "position": {"latitude": 1.0, "longitude": 2.0}}]}


@pytest.mark.asyncio
@pytest.mark.parametrize("status, kind", [
    (500, FailureKind.SERVER_ERROR),
    (503, FailureKind.SERVER_ERROR),
    (400, FailureKind.CLIENT_ERROR),
    (404, FailureKind.CLIENT_ERROR),
])
async def test_submit_maps_http_status(status, kind):
    client = _client(lambda request: httpx.Response(status, text="nope"))

    with pytest.raises(SubmitError) as exc_info:
        await client.submit([])

    assert exc_info.value.kind is kind
    assert exc_info.value.status_code == status


@pytest.mark.asyncio
@pytest.mark.parametrize("exc", [
    httpx.ReadTimeout("slow"),
    httpx.ConnectTimeout("slow"),
    httpx.WriteTimeout("slow"),
])
async def test_submit_maps_timeouts_to_transient(exc):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    with pytest.raises(SubmitError) as exc_info:
        await _client(handler).submit([])

    assert exc_info.value.kind is FailureKind.TRANSIENT
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
@pytest.mark.parametrize("exc", [
    httpx.ConnectError("connection refused"),
    httpx.ReadError("connection reset"),
    httpx.RemoteProtocolError("garbage"),
])
async def test_submit_maps_other_transport_errors_to_other(exc):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    with pytest.raises(SubmitError) as exc_info:
        await _client(handler).submit([])

    assert exc_info.value.kind is FailureKind.OTHER


@pytest.mark.asyncio
async def test_refused_connection_fails_pass_terminally(store, add_reports):
    await add_reports(3)

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    scheduler = SubmissionScheduler(store, _client(handler))
    outcome = await scheduler.run_submission_pass(send_all=True)

    assert outcome is SubmissionOutcome.TERMINAL_FAILURE
    assert await store.count_pending() == 3


@pytest.mark.asyncio
async def test_timeout_fails_pass_retryably(store, add_reports):
    await add_reports(3)

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow")

    scheduler = SubmissionScheduler(store, _client(handler))
    outcome = await scheduler.run_submission_pass(send_all=True)

    assert outcome is SubmissionOutcome.RETRYABLE_FAILURE
    assert await store.count_pending() == 3
