import pytest

from conftest import make_obs
from netadvisor.config import ScoringPolicy
from netadvisor.models import Band
from netadvisor.score_engine import ScoreEngine

SECURITIES = ["WPA3", "WPA2", "WPA", "Open", "WEP", "", "garbage!!"]


def test_score_stays_in_bounds():
    engine = ScoreEngine()
    for rssi in range(-120, 1, 3):
        for band in Band:
            for sec in SECURITIES:
                for internet in (False, True):
                    s = engine.score(make_obs("N", rssi, band, sec), internet)
                    assert 0 <= s <= 100


def test_score_never_decreases_with_stronger_signal():
    engine = ScoreEngine()
    for band in Band:
        for sec in SECURITIES:
            for internet in (False, True):
                scores = [engine.score(make_obs("N", rssi, band, sec), internet) for rssi in range(-110, 1)]
                assert scores == sorted(scores)


def test_weak_signal_is_capped_to_signal_plus_bonus():
    engine = ScoreEngine()
    for rssi in (-81, -90, -100):
        assert engine.signal_score(rssi) < 20
        for band in Band:
            for sec in ("WPA3", "Open"):
                obs = make_obs("Far", rssi, band, sec)
                assert engine.score(obs, False) == engine.signal_score(rssi)
                assert engine.score(obs, True) == engine.signal_score(rssi) + 10


def test_security_ordering():
    engine = ScoreEngine()
    for rssi in (-45, -58, -66, -77):
        for band in Band:
            s = [engine.score(make_obs("N", rssi, band, sec)) for sec in ("WPA3", "WPA2", "WPA", "Open")]
            assert s[0] >= s[1] >= s[2] >= s[3]
    assert engine.security_score("WPA3") > engine.security_score("WPA2") > engine.security_score("WPA") > engine.security_score("Open")


def test_unknown_security_falls_to_open_tier():
    engine = ScoreEngine()
    assert engine.security_score("802.1X?") == engine.security_score("Open") == 0
    assert engine.security_score(None) == 0
    assert engine.security_score("wpa2 wpa3") == 10
    assert engine.security_score("WPA2 Enterprise") == 7


def test_signal_buckets():
    engine = ScoreEngine()
    assert engine.signal_score(-30) == 50
    assert engine.signal_score(-50) == 50
    assert engine.signal_score(-51) == 40
    assert engine.signal_score(-65) == 30
    assert engine.signal_score(-80) == 20
    assert engine.signal_score(-81) == 10


def test_band_score_tracks_signal_on_5ghz():
    engine = ScoreEngine()
    assert engine.band_score(Band.FIVE, -55) == 20
    assert engine.band_score(Band.FIVE, -65) == 15
    assert engine.band_score(Band.FIVE, -75) == 10
    assert engine.band_score(Band.TWO_FOUR, -40) == 5
    # a weak 5 GHz link does not beat a strong 2.4 GHz one
    assert engine.score(make_obs("A", -78, Band.FIVE, "WPA2")) < engine.score(make_obs("B", -48, Band.TWO_FOUR, "WPA2"))


def test_reference_scores():
    engine = ScoreEngine()
    assert engine.score(make_obs("Home", -55, Band.TWO_FOUR, "WPA2"), True) == 62
    assert engine.score(make_obs("Home5G", -50, Band.FIVE, "WPA3"), False) == 80


def test_score_saturates_at_max():
    policy = ScoringPolicy(internet_bonus=60)
    engine = ScoreEngine(policy)
    assert engine.score(make_obs("X", -40, Band.FIVE, "WPA3"), True) == 100


def test_score_observation_marks_bonus():
    engine = ScoreEngine()
    scored = engine.score_observation(make_obs("X", -40), True)
    assert scored.has_internet_bonus_applied
    assert not engine.score_observation(make_obs("X", -40), False).has_internet_bonus_applied


@pytest.mark.parametrize("rssi,bars,quality", [(-40, 4, 5), (-55, 3, 4), (-65, 2, 3), (-75, 1, 2), (-90, 1, 1)])
def test_display_helpers(rssi, bars, quality):
    assert ScoreEngine.signal_bars(rssi) == bars
    assert ScoreEngine.signal_quality(rssi) == quality
