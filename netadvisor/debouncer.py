from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from .models import SelectionResult


@dataclass
class DebounceState:
    last_notified_id: str | None = None
    last_notified_at: float | None = None


class NotificationDebouncer:
    """Announces each recommended network once.

    The remembered id is only replaced when a different network becomes the
    recommendation; it is not cleared when the recommendation goes away.
    With ``rearm_after`` set, the same recommendation may be announced again
    once that many seconds have passed since the last announcement.
    """

    def __init__(
        self,
        rearm_after: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rearm_after = rearm_after
        self._clock = clock
        self._state = DebounceState()

    @property
    def last_notified_id(self) -> str | None:
        return self._state.last_notified_id

    def should_notify(self, result: SelectionResult) -> bool:
        best = result.best_alternative
        if not result.recommend_switch or best is None:
            return False

        now = self._clock()
        if best.id == self._state.last_notified_id and not self._rearmed(now):
            return False

        self._state.last_notified_id = best.id
        self._state.last_notified_at = now
        return True

    def _rearmed(self, now: float) -> bool:
        if self.rearm_after is None or self._state.last_notified_at is None:
            return False
        return now - self._state.last_notified_at >= self.rearm_after
