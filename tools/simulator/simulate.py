#!/usr/bin/env python3
"""Geosubmit uploader report simulator.

Generates plausible wifi/cell/bluetooth observation reports and feeds them
to the uploader's intake endpoint, optionally triggering an upload pass.

Usage:
    # 5 devices walking around Helsinki, 20 reports each
    python -m tools.simulator.simulate --server http://localhost:8000 --devices 5 --reports 20

    # Build a backlog, then run one sampled pass
    python -m tools.simulator.simulate --reports 200 --upload --no-send-all
"""

from __future__ import annotations

import argparse
import asyncio
import json
import math
import random
import time
from dataclasses import dataclass, field

import httpx


@dataclass
class SimDevice:
    lat: float
    lon: float
    bearing: float
    speed_mps: float
    reports: list[dict] = field(default_factory=list)


def _random_mac() -> str:
    return ":".join(f"{random.randint(0, 255):02x}" for _ in range(6))


def make_report(device: SimDevice, timestamp_ms: int) -> dict:
    """Create a single Geosubmit item at the device's current position."""
    item = {
        "timestamp": timestamp_ms,
        "position": {
            "latitude": round(device.lat, 7),
            "longitude": round(device.lon, 7),
            "accuracy": round(random.uniform(3, 25), 1),
            "speed": round(device.speed_mps, 1),
            "heading": round(device.bearing, 1),
            "source": "gps",
        },
    }

    # Not every scan sees every radio; empty kinds are left out.
    n_wifi = random.choice([0, 0, 2, 5, 12])
    if n_wifi:
        item["wifiAccessPoints"] = [
            {
                "macAddress": _random_mac(),
                "frequency": random.choice([2412, 2437, 2462, 5180, 5500]),
                "signalStrength": random.randint(-95, -40),
            }
            for _ in range(n_wifi)
        ]
    if random.random() < 0.8:
        item["cellTowers"] = [{
            "radioType": random.choice(["gsm", "wcdma", "lte", "nr"]),
            "mobileCountryCode": 244,
            "mobileNetworkCode": random.choice([5, 12, 91]),
            "locationAreaCode": random.randint(1, 65_000),
            "cellId": random.randint(1, 268_435_455),
            "signalStrength": random.randint(-120, -60),
            "serving": 1,
        }]
    if random.random() < 0.3:
        item["bluetoothBeacons"] = [
            {"macAddress": _random_mac(), "signalStrength": random.randint(-100, -50)}
        ]
    return item


def move_device(device: SimDevice, dt_seconds: float) -> None:
    """Move a device along its current bearing, with random turns."""
    device.bearing = (device.bearing + random.uniform(-20, 20)) % 360
    device.speed_mps = max(0.5, min(15.0, device.speed_mps + random.uniform(-0.5, 0.5)))

    distance_m = device.speed_mps * dt_seconds
    bearing_rad = math.radians(device.bearing)

    # Approximate: 1 degree latitude = 111,000 m
    device.lat += (distance_m * math.cos(bearing_rad)) / 111_000
    device.lon += (distance_m * math.sin(bearing_rad)) / (111_000 * math.cos(math.radians(device.lat)))


async def send_reports(client: httpx.AsyncClient, server_url: str, items: list[dict],
                       batch_size: int) -> tuple[int, int]:
    """POST items in chunks. Returns (stored, errors)."""
    stored = errors = 0
    for start in range(0, len(items), batch_size):
        chunk = items[start:start + batch_size]
        try:
            resp = await client.post(
                f"{server_url}/api/v1/reports",
                content=json.dumps({"items": chunk}),
                headers={"content-type": "application/json"},
            )
            if resp.status_code == 200:
                stored += resp.json()["reports_stored"]
            else:
                errors += len(chunk)
        except httpx.RequestError:
            errors += len(chunk)
    return stored, errors


async def run_simulation(args: argparse.Namespace) -> None:
    """Generate reports for every device, send them, optionally upload."""
    center_lat, center_lon = args.center
    devices = []
    for _ in range(args.devices):
        angle = random.uniform(0, 2 * math.pi)
        dist_km = random.uniform(0, args.radius_km)
        devices.append(SimDevice(
            lat=center_lat + (dist_km / 111.0) * math.cos(angle),
            lon=center_lon + (dist_km / (111.0 * math.cos(math.radians(center_lat)))) * math.sin(angle),
            bearing=random.uniform(0, 360),
            speed_mps=random.uniform(1, 10),
        ))

    now_ms = int(time.time() * 1000)
    items = []
    for dev in devices:
        ts = now_ms - args.reports * args.interval * 1000
        for _ in range(args.reports):
            move_device(dev, args.interval)
            ts += args.interval * 1000
            items.append(make_report(dev, int(ts)))

    print(f"Generated {len(items)} reports from {args.devices} devices")
    print(f"  Center: {center_lat:.4f}, {center_lon:.4f}")
    print(f"  Server: {args.server}")

    async with httpx.AsyncClient(timeout=args.timeout) as client:
        stored, errors = await send_reports(client, args.server, items, args.batch_size)
        print(f"  Stored: {stored}, errors: {errors}")

        if args.upload:
            resp = await client.post(f"{args.server}/api/v1/upload",
                                     params={"send_all": str(args.send_all).lower()})
            print(f"\nUpload pass: {resp.json()}")

        resp = await client.get(f"{args.server}/api/v1/health")
        if resp.status_code == 200:
            print(f"  Pending reports: {resp.json()['pending_reports']}")


def main():
    parser = argparse.ArgumentParser(description="Geosubmit uploader report simulator")
    parser.add_argument("--server", default="http://localhost:8000", help="Uploader URL")
    parser.add_argument("--devices", type=int, default=5, help="Number of simulated devices")
    parser.add_argument("--reports", type=int, default=20, help="Reports per device")
    parser.add_argument("--interval", type=float, default=10.0, help="Seconds between scans")
    parser.add_argument("--center", type=str, default="60.1699,24.9384",
                        help="Center lat,lon (default: Helsinki)")
    parser.add_argument("--radius-km", type=float, default=3.0, help="Scatter radius in km")
    parser.add_argument("--batch-size", type=int, default=50, help="Reports per intake request")
    parser.add_argument("--timeout", type=float, default=60.0, help="HTTP timeout in seconds")
    parser.add_argument("--upload", action="store_true", help="Trigger an upload pass afterwards")
    parser.add_argument("--no-send-all", dest="send_all", action="store_false",
                        help="Upload a sampled subset instead of everything")

    args = parser.parse_args()

    lat, lon = args.center.split(",")
    args.center = (float(lat), float(lon))

    asyncio.run(run_simulation(args))


if __name__ == "__main__":
    main()
