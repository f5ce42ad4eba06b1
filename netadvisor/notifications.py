from __future__ import annotations

import asyncio
import shutil
from typing import Protocol

from .log import get_logger

logger = get_logger(__name__)

TITLE = "Better Wi-Fi Available"


class NotificationSink(Protocol):
    async def notify(self, current_ssid: str | None, best_ssid: str, delta: int) -> None:
        ...


def format_body(current_ssid: str | None, best_ssid: str, delta: int) -> str:
    current = current_ssid or "not connected"
    return (
        f"You're connected to {current}.\n"
        f"{best_ssid} is significantly better ({delta} points)."
    )


class LogNotificationSink:
    """Writes the alert to the log; used when no desktop is available."""

    async def notify(self, current_ssid: str | None, best_ssid: str, delta: int) -> None:
        logger.info("%s: %s", TITLE, format_body(current_ssid, best_ssid, delta).replace("\n", " "))


class DesktopNotificationSink:
    """Shows the alert through `notify-send`, falling back to the log."""

    def __init__(self, fallback: NotificationSink | None = None) -> None:
        self.fallback = fallback or LogNotificationSink()
        self._has_notify_send = shutil.which("notify-send") is not None

    async def notify(self, current_ssid: str | None, best_ssid: str, delta: int) -> None:
        if not self._has_notify_send:
            await self.fallback.notify(current_ssid, best_ssid, delta)
            return
        body = format_body(current_ssid, best_ssid, delta)
        try:
            proc = await asyncio.create_subprocess_exec(
                "notify-send",
                "--app-name=netadvisor",
                TITLE,
                body,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
            _, stderr = await proc.communicate()
        except OSError as exc:
            logger.warning("notify-send failed: %s", exc)
            await self.fallback.notify(current_ssid, best_ssid, delta)
            return
        if proc.returncode != 0:
            logger.warning("notify-send exited with %s: %s", proc.returncode, stderr.decode(errors="ignore").strip())
            await self.fallback.notify(current_ssid, best_ssid, delta)
