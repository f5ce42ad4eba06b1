import pytest

from netadvisor.config import AdvisorConfig, ConfigError, ScoringPolicy
from netadvisor.models import Band, Observation, ViewState, stable_network_id
from netadvisor.score_engine import ScoreEngine


def test_observation_create_normalizes_fields():
    obs = Observation.create(ssid="", rssi=-61.6, bssid=None, frequency=5745, channel=-3, security=None)
    assert obs.ssid == "Hidden"
    assert obs.is_hidden
    assert obs.rssi == -62
    assert obs.band is Band.FIVE
    assert obs.channel == 0
    assert obs.security == "Open"
    assert obs.id == stable_network_id("Hidden", Band.FIVE, 0, "Open")


def test_observation_details():
    obs = Observation.create(ssid="Lab", rssi=-50, bssid="aa:bb:cc:dd:ee:ff", band=Band.FIVE, channel=36, security="WPA3")
    assert obs.id == "AA:BB:CC:DD:EE:FF"
    assert obs.details == "5 GHz • Ch 36 • WPA3"


def test_band_from_frequency():
    assert Band.from_frequency(2412) is Band.TWO_FOUR
    assert Band.from_frequency(5180) is Band.FIVE
    assert Band.from_frequency(None) is Band.TWO_FOUR


def test_view_state_payload_marks_current_and_best():
    engine = ScoreEngine()
    a = engine.score_observation(Observation.create(ssid="A", rssi=-50, bssid="A1", band=Band.FIVE, security="WPA3"))
    b = engine.score_observation(Observation.create(ssid="B", rssi=-70, bssid="B1", security="WPA2"), True)
    payload = ViewState(ranked=(a, b), current_id="B1", best_id="A1", recommend_switch=True, score_delta=30).to_payload()
    assert [n["id"] for n in payload["networks"]] == ["A1", "B1"]
    assert payload["networks"][0]["is_best"] and not payload["networks"][0]["is_current"]
    assert payload["networks"][1]["is_current"] and payload["networks"][1]["internet_bonus"]


def test_default_policy_constants():
    policy = ScoringPolicy.default()
    assert policy.switch_threshold == 15
    assert policy.weak_signal_floor == 20
    assert policy.internet_bonus == 10


@pytest.mark.parametrize(
    "kwargs",
    [
        {"signal_buckets": ((-60, 40), (-50, 50))},
        {"signal_buckets": ((-50, 30), (-60, 40))},
        {"band_5ghz_buckets": ((-60, 60), (-70, 15))},
        {"security_tiers": (("WPA", 4), ("WPA3", 10))},
        {"open_security_score": 5, "security_tiers": (("WPA3", 10), ("WPA2", 7), ("WPA", 4))},
        {"switch_threshold": -1},
        {"signal_buckets": ()},
        {"band_5ghz_buckets": ()},
    ],
)
def test_inconsistent_policy_is_rejected(kwargs):
    with pytest.raises(ConfigError):
        ScoringPolicy(**kwargs)


def test_advisor_presets():
    assert AdvisorConfig.default().scan_interval_s == 20.0
    saver = AdvisorConfig.battery_saver()
    assert saver.scan_interval_s == 60.0
    assert saver.probe_min_interval_s == 120.0
    with pytest.raises(ConfigError):
        AdvisorConfig(scan_interval_s=0)
    with pytest.raises(ConfigError):
        AdvisorConfig(rearm_after_s=0)
