import asyncio
from typing import List, Sequence

import pytest

from netadvisor.health import PathHealthMonitor
from netadvisor.models import Band, Observation


def make_obs(ssid, rssi, band=Band.TWO_FOUR, security="WPA2", bssid=None, channel=6):
    return Observation.create(
        ssid=ssid,
        bssid=bssid or f"{ssid}@{band.value}/{rssi}",
        rssi=rssi,
        band=band,
        channel=channel,
        security=security,
    )


class FakeScanSource:
    """Replays scripted snapshots; the last one repeats once the script runs out."""

    def __init__(self, snapshots: Sequence[List[Observation]], ssid="Home") -> None:
        self.snapshots = list(snapshots)
        self.ssid = ssid
        self.scan_calls = 0
        self.gate: asyncio.Event | None = None
        self.error: Exception | None = None

    async def scan(self) -> List[Observation]:
        self.scan_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        index = min(self.scan_calls - 1, len(self.snapshots) - 1)
        return list(self.snapshots[index]) if self.snapshots else []

    async def current_ssid(self):
        return self.ssid


class RecordingSink:
    def __init__(self) -> None:
        self.calls = []

    async def notify(self, current_ssid, best_ssid, delta):
        self.calls.append((current_ssid, best_ssid, delta))


@pytest.fixture
def home():
    return make_obs("Home", -55, Band.TWO_FOUR, "WPA2", bssid="AA:00:00:00:00:01")


@pytest.fixture
def home5g():
    return make_obs("Home5G", -50, Band.FIVE, "WPA3", bssid="AA:00:00:00:00:02")


@pytest.fixture
def healthy():
    return PathHealthMonitor(satisfied=True, internet_reachable=True)


@pytest.fixture
def sink():
    return RecordingSink()
