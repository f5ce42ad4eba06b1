from __future__ import annotations

import asyncio
import math
import random
import re
import shutil
from typing import List, Protocol, Tuple

from .log import get_logger
from .models import Band, Observation

logger = get_logger(__name__)

_TERSE_SPLIT = re.compile(r"(?<!\\):")
_MAC = re.compile(r"[0-9A-Fa-f]{2}(?:[:-][0-9A-Fa-f]{2}){5}")
_DIGITS = re.compile(r"\d+")


class RadioScanSource(Protocol):
    async def scan(self) -> List[Observation]:
        ...

    async def current_ssid(self) -> str | None:
        ...


def split_terse(row: str) -> List[str]:
    """Split one `nmcli -t` row, honouring backslash-escaped colons."""
    return [p.replace("\\:", ":").replace("\\\\", "\\") for p in _TERSE_SPLIT.split(row)]


def signal_to_dbm(signal_pct: float) -> float:
    return -100.0 + (signal_pct / 2.0)


def _first_int(text: str) -> int | None:
    m = _DIGITS.search(text or "")
    return int(m.group()) if m else None


def parse_nmcli_wifi(output: str) -> List[Observation]:
    """Parse `nmcli -t -f SSID,BSSID,SIGNAL,CHAN,FREQ,SECURITY dev wifi list` output.

    Rows that cannot be read are skipped. The result is sorted strongest first.
    """
    out: List[Observation] = []
    for row in output.splitlines():
        if not row.strip():
            continue
        parts = split_terse(row)
        if len(parts) < 6:
            continue
        # SSID may itself contain unescaped separators on older nmcli builds;
        # the fixed-width tail is always the last five fields.
        ssid = ":".join(parts[:-5]).strip()
        bssid, signal, chan, freq, sec = parts[-5:]
        try:
            signal_pct = float(signal)
        except ValueError:
            continue
        if not math.isfinite(signal_pct):
            continue
        if not _MAC.fullmatch(bssid.strip()):
            bssid = ""
        frequency = _first_int(freq)
        security = sec.strip()
        if security in ("", "--"):
            security = "Open"
        out.append(
            Observation.create(
                ssid=ssid or None,
                bssid=bssid.replace("-", ":") or None,
                rssi=signal_to_dbm(signal_pct),
                frequency=frequency,
                channel=_first_int(chan),
                security=security,
            )
        )
    out.sort(key=lambda o: o.rssi, reverse=True)
    return out


def parse_nmcli_active(output: str) -> str | None:
    """Return the SSID of the `yes` row from `nmcli -t -f ACTIVE,SSID dev wifi`."""
    for row in output.splitlines():
        parts = split_terse(row)
        if len(parts) >= 2 and parts[0].strip().lower() == "yes":
            ssid = ":".join(parts[1:]).strip()
            return ssid or None
    return None


async def run_nmcli(*args: str) -> Tuple[int, str]:
    proc = await asyncio.create_subprocess_exec(
        "nmcli",
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, _ = await proc.communicate()
    return proc.returncode or 0, stdout.decode(errors="ignore")


class NmcliScanSource:
    """Radio scan source backed by NetworkManager's `nmcli`.

    Any failure (tool missing, radio off, non-zero exit) yields an empty scan.
    """

    def __init__(self, rescan: bool = True) -> None:
        self.rescan = rescan

    async def scan(self) -> List[Observation]:
        args = [
            "-t",
            "-f",
            "SSID,BSSID,SIGNAL,CHAN,FREQ,SECURITY",
            "dev",
            "wifi",
            "list",
            "--rescan",
            "yes" if self.rescan else "no",
        ]
        try:
            code, stdout = await run_nmcli(*args)
        except OSError as exc:
            logger.warning("nmcli scan failed: %s", exc)
            return []
        if code != 0:
            logger.warning("nmcli scan exited with status %s", code)
            return []
        return parse_nmcli_wifi(stdout)

    async def current_ssid(self) -> str | None:
        try:
            code, stdout = await run_nmcli("-t", "-f", "ACTIVE,SSID", "dev", "wifi", "list", "--rescan", "no")
        except OSError as exc:
            logger.warning("nmcli association lookup failed: %s", exc)
            return None
        if code != 0:
            return None
        return parse_nmcli_active(stdout)


class MockScanSource:
    """Synthetic networks with drifting signal, for hosts without nmcli."""

    def __init__(self, associated: str | None = "NEO-MESH", seed: int | None = None) -> None:
        self.associated = associated
        self._rng = random.Random(seed)
        self._catalog = [
            ("NEO-MESH", "AA:11:22:33:44:01", 2412, 1, "WPA2"),
            ("ZION-HUB", "AA:11:22:33:44:02", 2437, 6, "WPA2"),
            ("MATRIX-NODE", "AA:11:22:33:44:03", 2462, 11, "WPA3"),
            ("SENTINEL-5G", "AA:11:22:33:44:04", 5180, 36, "WPA2 WPA3"),
            ("ORACLE-LINK", "AA:11:22:33:44:05", 5200, 40, "Open"),
            ("", "AA:11:22:33:44:06", 5745, 149, "WPA2"),
        ]
        self._phase = 0.0

    async def scan(self) -> List[Observation]:
        self._phase += 0.3
        out: List[Observation] = []
        for i, (ssid, bssid, freq, chan, sec) in enumerate(self._catalog):
            wave = 12.0 * (0.6 * math.sin(self._phase + i * 0.7) + 0.4 * math.sin(self._phase * 0.5 + i))
            noise = self._rng.uniform(-2.5, 2.5)
            rssi = max(-95.0, min(-30.0, -62.0 + wave + noise))
            out.append(
                Observation.create(
                    ssid=ssid or None,
                    bssid=bssid,
                    rssi=rssi,
                    band=Band.from_frequency(freq),
                    channel=chan,
                    security=sec,
                )
            )
        out.sort(key=lambda o: o.rssi, reverse=True)
        return out

    async def current_ssid(self) -> str | None:
        return self.associated


def default_scan_source() -> RadioScanSource:
    if shutil.which("nmcli") is not None:
        return NmcliScanSource()
    logger.info("nmcli not found, using synthetic networks")
    return MockScanSource()
