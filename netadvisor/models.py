from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

HIDDEN_SSID = "Hidden"
OPEN_SECURITY = "Open"


class Band(str, Enum):
    TWO_FOUR = "2.4GHz"
    FIVE = "5GHz"

    @classmethod
    def from_frequency(cls, frequency: int | None) -> "Band":
        return cls.FIVE if (frequency or 0) >= 5000 else cls.TWO_FOUR

    @property
    def label(self) -> str:
        return "5 GHz" if self is Band.FIVE else "2.4 GHz"


def stable_network_id(ssid: str, band: Band, channel: int, security: str) -> str:
    """Identity for networks that expose no hardware address.

    Built only from attributes that do not drift between scans, so the same
    hidden network keeps its id from one cycle to the next.
    """
    raw = f"{ssid}|{band.value}|{channel}|{security.strip().upper()}"
    return "hidden-" + hashlib.sha1(raw.encode("utf-8")).hexdigest()[:12]


@dataclass(frozen=True)
class Observation:
    id: str
    ssid: str
    rssi: int
    band: Band
    channel: int
    security: str
    is_hidden: bool = False

    @classmethod
    def create(
        cls,
        *,
        ssid: str | None,
        rssi: float,
        bssid: str | None = None,
        band: Band | None = None,
        frequency: int | None = None,
        channel: int | None = None,
        security: str | None = None,
    ) -> "Observation":
        hidden = not ssid
        name = ssid if ssid else HIDDEN_SSID
        chan = channel if channel is not None and channel >= 0 else 0
        sec = security.strip() if security and security.strip() else OPEN_SECURITY
        resolved_band = band if band is not None else Band.from_frequency(frequency)
        ident = bssid.strip().upper() if bssid and bssid.strip() else None
        if ident is None:
            ident = stable_network_id(name, resolved_band, chan, sec)
        return cls(
            id=ident,
            ssid=name,
            rssi=int(round(rssi)),
            band=resolved_band,
            channel=chan,
            security=sec,
            is_hidden=hidden,
        )

    @property
    def details(self) -> str:
        return f"{self.band.label} • Ch {self.channel} • {self.security}"


@dataclass(frozen=True)
class ScoredObservation:
    observation: Observation
    score: int
    has_internet_bonus_applied: bool = False

    @property
    def id(self) -> str:
        return self.observation.id

    @property
    def ssid(self) -> str:
        return self.observation.ssid

    @property
    def rssi(self) -> int:
        return self.observation.rssi


@dataclass(frozen=True)
class SelectionResult:
    current: Optional[Observation]
    best_alternative: Optional[Observation]
    recommend_switch: bool
    score_delta: int

    @classmethod
    def empty(cls) -> "SelectionResult":
        return cls(current=None, best_alternative=None, recommend_switch=False, score_delta=0)


@dataclass(frozen=True)
class PathHealth:
    satisfied: bool = False
    internet_reachable: bool = False


@dataclass(frozen=True)
class ViewState:
    ranked: Tuple[ScoredObservation, ...] = ()
    current_id: str | None = None
    best_id: str | None = None
    current_ssid: str | None = None
    recommend_switch: bool = False
    score_delta: int = 0
    is_scanning: bool = False
    updated_at: float | None = None

    def to_payload(self) -> Dict:
        nodes: List[Dict] = [
            {
                "id": s.id,
                "ssid": s.ssid,
                "hidden": s.observation.is_hidden,
                "rssi": s.rssi,
                "band": s.observation.band.value,
                "channel": s.observation.channel,
                "security": s.observation.security,
                "details": s.observation.details,
                "score": s.score,
                "internet_bonus": s.has_internet_bonus_applied,
                "is_current": s.id == self.current_id,
                "is_best": s.id == self.best_id,
            }
            for s in self.ranked
        ]
        return {
            "networks": nodes,
            "current_id": self.current_id,
            "best_id": self.best_id,
            "current_ssid": self.current_ssid,
            "recommend_switch": self.recommend_switch,
            "score_delta": self.score_delta,
            "is_scanning": self.is_scanning,
            "updated_at": self.updated_at,
        }
