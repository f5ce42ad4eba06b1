"""
Periodic scan loop.

Each cycle reads the cached path health, asks the radio source for a
snapshot, runs it through the selector and the debouncer, and publishes one
complete `ViewState`. Timer ticks and manual triggers share the same cycle;
a trigger that arrives while a cycle is running is dropped.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from typing import Callable, List

from .config import AdvisorConfig
from .debouncer import NotificationDebouncer
from .health import PathHealthMonitor
from .log import get_logger
from .models import Observation, SelectionResult, ViewState
from .notifications import NotificationSink
from .score_engine import ScoreEngine
from .selector import NetworkSelector
from .wifi_scanner import RadioScanSource

logger = get_logger(__name__)

StateListener = Callable[[ViewState], None]


class ScanOrchestrator:
    def __init__(
        self,
        source: RadioScanSource,
        health: PathHealthMonitor,
        sink: NotificationSink,
        selector: NetworkSelector | None = None,
        debouncer: NotificationDebouncer | None = None,
        config: AdvisorConfig | None = None,
        initial_ssid: str | None = None,
    ) -> None:
        self.config = config or AdvisorConfig.default()
        self.source = source
        self.health = health
        self.sink = sink
        self.selector = selector or NetworkSelector(ScoreEngine(self.config.policy))
        self.debouncer = debouncer or NotificationDebouncer(rearm_after=self.config.rearm_after_s)
        self._state = ViewState()
        self._last_current_ssid = initial_ssid
        self._in_flight = False
        self._listeners: List[StateListener] = []
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def last_current_ssid(self) -> str | None:
        return self._last_current_ssid

    @property
    def is_scanning(self) -> bool:
        return self._in_flight

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def scan_now(self) -> bool:
        """Run one cycle immediately, ignoring path health."""
        return await self.run_cycle(manual=True)

    async def run_cycle(self, manual: bool = False) -> bool:
        """Run one scan cycle; returns False when it was skipped or dropped."""
        if self._in_flight:
            logger.debug("Scan already in progress, dropping %s trigger", "manual" if manual else "timer")
            return False
        if not manual and not self.health.satisfied:
            logger.debug("Path not satisfied, skipping scheduled scan")
            return False

        self._in_flight = True
        completed = False
        try:
            await self._cycle()
            completed = True
        finally:
            self._in_flight = False
            if not completed and self._state.is_scanning:
                self._publish(replace(self._state, is_scanning=False))
        return True

    async def _cycle(self) -> None:
        internet = self.health.internet_reachable
        self._publish(replace(self._state, is_scanning=True))

        snapshot = await self._scan()
        associated = await self._associated_ssid()
        if associated:
            self._last_current_ssid = associated

        if not snapshot:
            logger.info("Scan returned no networks")
            self._publish(ViewState(current_ssid=self._last_current_ssid, updated_at=time.time()))
            return

        result, ranked = self.selector.select_ranked(snapshot, self._last_current_ssid, internet)
        logger.info(
            "Scanned %d networks: current=%s best=%s delta=%d recommend=%s",
            len(ranked),
            result.current.ssid if result.current else None,
            result.best_alternative.ssid if result.best_alternative else None,
            result.score_delta,
            result.recommend_switch,
        )

        if self.debouncer.should_notify(result):
            await self._notify(result)

        self._publish(
            ViewState(
                ranked=tuple(ranked),
                current_id=result.current.id if result.current else None,
                best_id=result.best_alternative.id if result.best_alternative else None,
                current_ssid=self._last_current_ssid,
                recommend_switch=result.recommend_switch,
                score_delta=result.score_delta,
                is_scanning=False,
                updated_at=time.time(),
            )
        )

    async def _scan(self) -> List[Observation]:
        try:
            return list(await self.source.scan())
        except Exception:
            logger.exception("Radio scan failed")
            return []

    async def _associated_ssid(self) -> str | None:
        try:
            return await self.source.current_ssid()
        except Exception:
            logger.exception("Could not read the associated network")
            return None

    async def _notify(self, result: SelectionResult) -> None:
        best = result.best_alternative
        if best is None:
            return
        current_ssid = result.current.ssid if result.current else None
        logger.info("Recommending %s over %s (+%d)", best.ssid, current_ssid, result.score_delta)
        try:
            await self.sink.notify(current_ssid, best.ssid, result.score_delta)
        except Exception:
            logger.exception("Notification delivery failed")

    def _publish(self, state: ViewState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("View state listener failed")

    async def run_forever(self) -> None:
        while True:
            try:
                await self.run_cycle()
            except Exception:
                logger.exception("Scan cycle failed")
            await asyncio.sleep(self.config.scan_interval_s)

    def start(self) -> None:
        if self._task is None or self._task.done():
            logger.info("Starting scan loop every %.0fs", self.config.scan_interval_s)
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
