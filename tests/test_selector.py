from conftest import make_obs
from netadvisor.models import Band
from netadvisor.selector import NetworkSelector


def test_scenario_a_recommends_faster_network(home, home5g):
    result = NetworkSelector().select([home, home5g], "Home", True)
    assert result.current == home
    assert result.best_alternative == home5g
    assert result.score_delta == 18
    assert result.recommend_switch


def test_current_resolves_to_strongest_same_ssid():
    far = make_obs("Home", -72, bssid="AA:00:00:00:00:01")
    near = make_obs("Home", -48, bssid="AA:00:00:00:00:02")
    twin = make_obs("Home", -48, bssid="AA:00:00:00:00:03")
    assert NetworkSelector.resolve_current([far, near, twin], "Home") == near
    assert NetworkSelector.resolve_current([far, near], None) is None
    assert NetworkSelector.resolve_current([far, near], "Office") is None


def test_hidden_networks_never_resolve_as_current():
    hidden = make_obs(None, -40)
    assert hidden.ssid == "Hidden"
    assert NetworkSelector.resolve_current([hidden], "Hidden") is None


def test_only_current_gets_internet_bonus(home, home5g):
    selector = NetworkSelector()
    ranked = selector.rank([home, home5g], home, True)
    bonus = {s.id: s.has_internet_bonus_applied for s in ranked}
    assert bonus == {home.id: True, home5g.id: False}
    assert [s.id for s in ranked] == [home5g.id, home.id]


def test_delta_of_14_does_not_recommend():
    current = make_obs("Home", -55, Band.TWO_FOUR, "Open")      # 45
    alt = make_obs("Cafe", -50, Band.TWO_FOUR, "WPA")           # 59
    result = NetworkSelector().select([current, alt], "Home", False)
    assert result.best_alternative == alt
    assert result.score_delta == 14
    assert not result.recommend_switch


def test_delta_of_15_recommends():
    current = make_obs("Home", -55, Band.TWO_FOUR, "Open")      # 45
    alt = make_obs("Cafe", -55, Band.FIVE, "Open")              # 60
    result = NetworkSelector().select([current, alt], "Home", False)
    assert result.score_delta == 15
    assert result.recommend_switch


def test_weak_networks_are_never_recommended():
    weak = make_obs("FarAway", -92, Band.FIVE, "WPA3")
    result = NetworkSelector().select([weak], None, True)
    assert result.best_alternative is None
    assert not result.recommend_switch


def test_any_viable_network_beats_no_association():
    alt = make_obs("Cafe", -65, Band.TWO_FOUR, "Open")          # 35
    result = NetworkSelector().select([alt], "Home", True)
    assert result.current is None
    assert result.best_alternative == alt
    assert result.score_delta == 35
    assert result.recommend_switch


def test_current_is_never_its_own_alternative():
    only = make_obs("Home", -45, Band.FIVE, "WPA3")
    result = NetworkSelector().select([only], "Home", True)
    assert result.current == only
    assert result.best_alternative is None
    assert result.score_delta == 0
    assert not result.recommend_switch


def test_no_switch_when_current_is_top():
    current = make_obs("Home", -45, Band.FIVE, "WPA3")          # 90 with internet
    alt = make_obs("Cafe", -50, Band.FIVE, "WPA3")              # 80
    result = NetworkSelector().select([current, alt], "Home", True)
    assert result.best_alternative == alt
    assert result.score_delta == -10
    assert not result.recommend_switch


def test_ties_prefer_stronger_signal_then_id():
    a = make_obs("A", -52, Band.TWO_FOUR, "WPA2", bssid="AA:00:00:00:00:0B")   # 52
    b = make_obs("B", -58, Band.TWO_FOUR, "WPA2", bssid="AA:00:00:00:00:0A")   # 52
    c = make_obs("C", -52, Band.TWO_FOUR, "WPA2", bssid="AA:00:00:00:00:09")   # 52
    result = NetworkSelector().select([a, b, c], None, False)
    assert result.best_alternative == c


def test_empty_snapshot_gives_empty_result():
    result, ranked = NetworkSelector().select_ranked([], "Home", True)
    assert ranked == []
    assert result.current is None
    assert result.best_alternative is None
    assert not result.recommend_switch


def test_duplicate_ids_are_collapsed():
    first = make_obs("Home", -60, bssid="AA:00:00:00:00:01")
    dup = make_obs("Home", -40, bssid="AA:00:00:00:00:01")
    _, ranked = NetworkSelector().select_ranked([first, dup], "Home", False)
    assert len(ranked) == 1
    assert ranked[0].rssi == -60


def test_select_is_repeatable(home, home5g):
    selector = NetworkSelector()
    assert selector.select([home, home5g], "Home", True) == selector.select([home, home5g], "Home", True)
