"""
Path health and internet reachability.

`PathHealthMonitor` caches the latest link and internet values and pushes
changes to subscribers. The scan loop only ever reads the cached values.
`NmcliPathWatcher` feeds the monitor from NetworkManager and an HTTP probe.
"""

from __future__ import annotations

import asyncio
import shutil
import time
from typing import Callable, List

import httpx

from .config import AdvisorConfig
from .log import get_logger
from .models import PathHealth
from .wifi_scanner import run_nmcli

logger = get_logger(__name__)

HealthCallback = Callable[[PathHealth], None]


class PathHealthMonitor:
    def __init__(self, satisfied: bool = False, internet_reachable: bool = False) -> None:
        self._health = PathHealth(satisfied=satisfied, internet_reachable=internet_reachable)
        self._subscribers: List[HealthCallback] = []

    @property
    def satisfied(self) -> bool:
        return self._health.satisfied

    @property
    def internet_reachable(self) -> bool:
        return self._health.internet_reachable

    def snapshot(self) -> PathHealth:
        return self._health

    def subscribe(self, callback: HealthCallback) -> Callable[[], None]:
        """Register a callback for every change; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def update_path(self, satisfied: bool) -> None:
        # a path that goes down takes internet reachability with it
        internet = self._health.internet_reachable if satisfied else False
        self._set(PathHealth(satisfied=satisfied, internet_reachable=internet))

    def update_internet(self, reachable: bool) -> None:
        self._set(PathHealth(satisfied=self._health.satisfied, internet_reachable=reachable))

    def _set(self, health: PathHealth) -> None:
        if health == self._health:
            return
        self._health = health
        for callback in list(self._subscribers):
            try:
                callback(health)
            except Exception:
                logger.exception("Path health subscriber failed")


class ReachabilityChecker:
    """GETs a known page; HTTP 200 means the internet is reachable."""

    def __init__(
        self,
        url: str,
        timeout_s: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout_s = timeout_s
        self._transport = transport

    async def check(self) -> bool:
        headers = {"Cache-Control": "no-cache", "Pragma": "no-cache"}
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_s),
                transport=self._transport,
                follow_redirects=False,
            ) as client:
                response = await client.get(self.url, headers=headers)
        except httpx.HTTPError as exc:
            logger.debug("Reachability probe failed: %s", exc)
            return False
        return response.status_code == 200


async def read_path_state() -> bool | None:
    """True when NetworkManager reports a connected state, None if unknown."""
    try:
        code, stdout = await run_nmcli("-t", "-f", "STATE", "general")
    except OSError as exc:
        logger.warning("nmcli state lookup failed: %s", exc)
        return None
    if code != 0:
        return None
    state = stdout.strip().lower()
    return state.startswith("connected")


class NmcliPathWatcher:
    """Polls link state and probes reachability, pushing both into a monitor."""

    def __init__(
        self,
        monitor: PathHealthMonitor,
        config: AdvisorConfig | None = None,
        checker: ReachabilityChecker | None = None,
        clock: Callable[[], float] = time.monotonic,
        use_nmcli: bool | None = None,
    ) -> None:
        self.monitor = monitor
        self.config = config or AdvisorConfig.default()
        self.checker = checker or ReachabilityChecker(self.config.probe_url, self.config.probe_timeout_s)
        self._clock = clock
        self._last_probe: float | None = None
        self._has_nmcli = shutil.which("nmcli") is not None if use_nmcli is None else use_nmcli
        self._task: asyncio.Task | None = None

    async def poll_once(self) -> None:
        if self._has_nmcli:
            satisfied = await read_path_state()
            if satisfied is None:
                return
        else:
            satisfied = True
        self.monitor.update_path(satisfied)
        if satisfied:
            await self.probe_if_due()

    async def probe_if_due(self) -> None:
        now = self._clock()
        if self._last_probe is not None and now - self._last_probe < self.config.probe_min_interval_s:
            return
        self._last_probe = now
        reachable = await self.checker.check()
        logger.debug("Internet reachable: %s", reachable)
        self.monitor.update_internet(reachable)

    async def run_forever(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.config.health_poll_s)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
