from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .models import Observation, ScoredObservation, SelectionResult
from .score_engine import ScoreEngine


def _rank_key(item: ScoredObservation) -> Tuple[int, int, str]:
    return (-item.score, -item.rssi, item.id)


class NetworkSelector:
    """Picks the current network and the best alternative from one snapshot.

    - The current network is the strongest non-hidden observation carrying the
      associated SSID.
    - Only the current network gets the internet bonus.
    - Alternatives below the viability floor are never recommended.
    - A switch is recommended only when the gain reaches the switch threshold.
    """

    def __init__(self, engine: ScoreEngine | None = None) -> None:
        self.engine = engine or ScoreEngine()

    @property
    def switch_threshold(self) -> int:
        return self.engine.policy.switch_threshold

    @property
    def viability_floor(self) -> int:
        return self.engine.policy.weak_signal_floor

    @staticmethod
    def resolve_current(snapshot: Sequence[Observation], previous_ssid: str | None) -> Optional[Observation]:
        if not previous_ssid:
            return None
        current: Optional[Observation] = None
        for obs in snapshot:
            if obs.is_hidden or obs.ssid != previous_ssid:
                continue
            if current is None or obs.rssi > current.rssi:
                current = obs
        return current

    def rank(
        self,
        snapshot: Sequence[Observation],
        current: Optional[Observation],
        internet_available: bool,
    ) -> List[ScoredObservation]:
        current_id = current.id if current is not None else None
        scored = [
            self.engine.score_observation(obs, internet_available and obs.id == current_id)
            for obs in snapshot
        ]
        return sorted(scored, key=_rank_key)

    def select_ranked(
        self,
        snapshot: Sequence[Observation],
        previous_current_ssid: str | None,
        internet_available: bool,
    ) -> Tuple[SelectionResult, List[ScoredObservation]]:
        # ids are unique per snapshot; keep the first copy if a source repeats one
        seen = set()
        unique: List[Observation] = []
        for obs in snapshot:
            if obs.id not in seen:
                seen.add(obs.id)
                unique.append(obs)

        current = self.resolve_current(unique, previous_current_ssid)
        ranked = self.rank(unique, current, internet_available)

        current_score = 0
        if current is not None:
            current_score = next(s.score for s in ranked if s.id == current.id)

        viable = [s for s in ranked if s.score >= self.viability_floor]
        alternatives = [s for s in viable if current is None or s.id != current.id]
        if not alternatives:
            return SelectionResult(current, None, False, 0), ranked

        best = alternatives[0]
        delta = best.score - current_score
        top_is_current = current is not None and bool(viable) and viable[0].id == current.id
        recommend = not top_is_current and delta >= self.switch_threshold
        return SelectionResult(current, best.observation, recommend, delta), ranked

    def select(
        self,
        snapshot: Sequence[Observation],
        previous_current_ssid: str | None,
        internet_available: bool,
    ) -> SelectionResult:
        result, _ = self.select_ranked(snapshot, previous_current_ssid, internet_available)
        return result
