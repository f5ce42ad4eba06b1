# netadvisor/config.py
"""
Tunable policy for scoring, selection and the scan loop.

The scoring weights have changed several times while the advisor was tuned,
so every threshold lives here rather than in the scoring or selection code.
"""

from dataclasses import dataclass, field
from typing import Tuple


class ConfigError(ValueError):
    """Raised when a policy or loop configuration is internally inconsistent."""


def _check_descending(name: str, buckets: Tuple[Tuple[int, int], ...]) -> None:
    if not buckets:
        raise ConfigError(f"{name}: at least one bucket is required")
    thresholds = [t for t, _ in buckets]
    scores = [s for _, s in buckets]
    if thresholds != sorted(thresholds, reverse=True) or len(set(thresholds)) != len(thresholds):
        raise ConfigError(f"{name}: thresholds must be strictly descending, got {thresholds}")
    if scores != sorted(scores, reverse=True):
        raise ConfigError(f"{name}: scores must not increase as signal weakens, got {scores}")
    if any(s < 0 for s in scores):
        raise ConfigError(f"{name}: scores must be non-negative")


@dataclass(frozen=True)
class ScoringPolicy:
    """
    Weights and thresholds used by the score engine and the selector.

    Attributes
    ----------
    signal_buckets
        ``(min_rssi_dbm, score)`` pairs, strongest first.
    signal_else_score
        Score for anything weaker than the last bucket.
    band_5ghz_buckets
        ``(min_rssi_dbm, score)`` pairs for 5 GHz links, strongest first.
    band_5ghz_else_score
        Score for a 5 GHz link weaker than every 5 GHz bucket.
    band_24ghz_score
        Flat score for 2.4 GHz links.
    security_tiers
        ``(label, score)`` pairs matched as case-insensitive substrings, in order.
    open_security_score
        Score for open, WEP or unrecognised security.
    internet_bonus
        Added only for the network whose reachability was actually probed.
    weak_signal_floor
        Signal scores below this cap the total and make a network non-viable.
    switch_threshold
        Minimum score improvement before a switch is recommended.
    max_score
        Saturation point of the total.
    """
    signal_buckets: Tuple[Tuple[int, int], ...] = ((-50, 50), (-60, 40), (-70, 30), (-80, 20))
    signal_else_score: int = 10
    band_5ghz_buckets: Tuple[Tuple[int, int], ...] = ((-60, 20), (-70, 15))
    band_5ghz_else_score: int = 10
    band_24ghz_score: int = 5
    security_tiers: Tuple[Tuple[str, int], ...] = (("WPA3", 10), ("WPA2", 7), ("WPA", 4))
    open_security_score: int = 0
    internet_bonus: int = 10
    weak_signal_floor: int = 20
    switch_threshold: int = 15
    max_score: int = 100

    def __post_init__(self) -> None:
        _check_descending("signal_buckets", self.signal_buckets)
        _check_descending("band_5ghz_buckets", self.band_5ghz_buckets)
        if self.signal_else_score < 0 or self.signal_else_score > self.signal_buckets[-1][1]:
            raise ConfigError("signal_else_score must sit below the weakest signal bucket")
        if self.band_5ghz_else_score < 0 or self.band_5ghz_else_score > self.band_5ghz_buckets[-1][1]:
            raise ConfigError("band_5ghz_else_score must sit below the weakest 5 GHz bucket")
        top_signal = self.signal_buckets[0][1]
        if self.band_5ghz_buckets[0][1] > top_signal or self.band_24ghz_score > top_signal:
            raise ConfigError("band scores may not exceed the top signal bucket")
        tier_scores = [s for _, s in self.security_tiers]
        if tier_scores != sorted(tier_scores, reverse=True) or min(tier_scores + [self.open_security_score]) < 0:
            raise ConfigError("security tiers must be ordered strongest first and non-negative")
        if any(s <= self.open_security_score for s in tier_scores):
            raise ConfigError("every security tier must outscore open networks")
        for name in ("internet_bonus", "weak_signal_floor", "switch_threshold"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be non-negative")
        if self.max_score <= 0:
            raise ConfigError("max_score must be positive")

    @classmethod
    def default(cls) -> "ScoringPolicy":
        return cls()


DEFAULT_PROBE_URL = "https://www.apple.com/library/test/success.html"


@dataclass(frozen=True)
class AdvisorConfig:
    """
    Timing for the scan loop and its health collaborators.

    Attributes
    ----------
    scan_interval_s
        Period of the automatic scan loop.
    health_poll_s
        How often the path watcher polls the OS for link state.
    probe_url
        URL fetched to decide whether the internet is reachable.
    probe_timeout_s
        Timeout for a single reachability probe.
    probe_min_interval_s
        Minimum spacing between two reachability probes.
    rearm_after_s
        When set, a standing recommendation is re-announced after this many
        seconds. ``None`` keeps the announce-once behaviour.
    policy
        Scoring weights.
    """
    scan_interval_s: float = 20.0
    health_poll_s: float = 5.0
    probe_url: str = DEFAULT_PROBE_URL
    probe_timeout_s: float = 5.0
    probe_min_interval_s: float = 30.0
    rearm_after_s: float | None = None
    policy: ScoringPolicy = field(default_factory=ScoringPolicy.default)

    def __post_init__(self) -> None:
        for name in ("scan_interval_s", "health_poll_s", "probe_timeout_s"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
        if self.probe_min_interval_s < 0:
            raise ConfigError("probe_min_interval_s must be non-negative")
        if self.rearm_after_s is not None and self.rearm_after_s <= 0:
            raise ConfigError("rearm_after_s must be positive when set")

    @classmethod
    def default(cls) -> "AdvisorConfig":
        """Preset matching the desktop app (20 s scans, 30 s probe spacing)."""
        return cls()

    @classmethod
    def battery_saver(cls) -> "AdvisorConfig":
        """Preset for laptops on battery (slower scans and probes)."""
        return cls(
            scan_interval_s=60.0,
            health_poll_s=15.0,
            probe_min_interval_s=120.0,
        )
