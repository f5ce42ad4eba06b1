from __future__ import annotations

from typing import Tuple

from .config import ScoringPolicy
from .models import Band, Observation, ScoredObservation


def _bucket(rssi: int, buckets: Tuple[Tuple[int, int], ...], fallback: int) -> int:
    for threshold, score in buckets:
        if rssi >= threshold:
            return score
    return fallback


class ScoreEngine:
    """Turns one observation into a 0-100 quality score.

    Stateless: the same observation and internet flag always give the same
    score, so it can be shared freely between the selector and the loop.
    """

    def __init__(self, policy: ScoringPolicy | None = None) -> None:
        self.policy = policy or ScoringPolicy.default()

    def signal_score(self, rssi: int) -> int:
        return _bucket(rssi, self.policy.signal_buckets, self.policy.signal_else_score)

    def band_score(self, band: Band, rssi: int) -> int:
        if band is Band.FIVE:
            return _bucket(rssi, self.policy.band_5ghz_buckets, self.policy.band_5ghz_else_score)
        return self.policy.band_24ghz_score

    def security_score(self, security: str | None) -> int:
        label = (security or "").upper()
        for tier, score in self.policy.security_tiers:
            if tier in label:
                return score
        return self.policy.open_security_score

    def is_weak(self, rssi: int) -> bool:
        return self.signal_score(rssi) < self.policy.weak_signal_floor

    def score(self, observation: Observation, internet_available: bool = False) -> int:
        signal = self.signal_score(observation.rssi)
        internet = self.policy.internet_bonus if internet_available else 0

        # weak links never win on band or security alone
        if signal < self.policy.weak_signal_floor:
            return max(0, min(signal + internet, self.policy.max_score))

        total = (
            signal
            + self.band_score(observation.band, observation.rssi)
            + self.security_score(observation.security)
            + internet
        )
        return max(0, min(total, self.policy.max_score))

    def score_observation(self, observation: Observation, internet_available: bool = False) -> ScoredObservation:
        return ScoredObservation(
            observation=observation,
            score=self.score(observation, internet_available),
            has_internet_bonus_applied=internet_available and self.policy.internet_bonus > 0,
        )

    @staticmethod
    def signal_bars(rssi: int) -> int:
        if rssi >= -50:
            return 4
        if rssi >= -60:
            return 3
        if rssi >= -70:
            return 2
        return 1

    @staticmethod
    def signal_quality(rssi: int) -> int:
        """1-5 rating used by the CLI listing."""
        if rssi >= -50:
            return 5
        if rssi >= -60:
            return 4
        if rssi >= -70:
            return 3
        if rssi >= -80:
            return 2
        return 1
