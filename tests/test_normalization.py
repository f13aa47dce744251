import pytest

from market_gauge.errors import InvalidInputError
from market_gauge.features import normalization as norm


def test_round_half_up_differs_from_bankers_rounding():
    assert norm.round_half_up(2.5) == 3
    assert norm.round_half_up(3.5) == 4
    assert norm.round_half_up(2.4999) == 2
    assert round(2.5) == 2


def test_clamp_score_bounds():
    assert norm.clamp_score(150.0) == 100
    assert norm.clamp_score(-5.0) == 0
    assert norm.clamp_score(49.5) == 50
    with pytest.raises(InvalidInputError):
        norm.clamp_score(float("nan"))


def test_percent_deviation_requires_baseline():
    assert norm.percent_deviation(110.0, 100.0) == pytest.approx(10.0)
    with pytest.raises(InvalidInputError):
        norm.percent_deviation(1.0, 0.0)
    with pytest.raises(InvalidInputError):
        norm.percent_deviation(1.0, None)


def test_volatility_is_inverted():
    assert norm.VOLATILITY.normalize(22.0, baseline=20.0) == 25
    assert norm.VOLATILITY.normalize(18.0, baseline=20.0) == 75
    assert norm.VOLATILITY.normalize(20.0, baseline=20.0) == 50


def test_momentum_is_direct():
    assert norm.MOMENTUM.normalize(105.0, baseline=100.0) == 90
    assert norm.MOMENTUM.normalize(90.0, baseline=100.0) == 0


def test_range_position():
    assert norm.RANGE.normalize(75.0, low=50.0, high=100.0) == 50
    assert norm.RANGE.normalize(100.0, low=50.0, high=100.0) == 100
    assert norm.RANGE.normalize(60.0, low=50.0, high=100.0) == 5
    with pytest.raises(InvalidInputError):
        norm.RANGE.normalize(50.0, low=50.0, high=50.0)


def test_put_call_from_vix():
    assert norm.implied_put_call_ratio(10.0) == pytest.approx(0.5)
    assert norm.implied_put_call_ratio(20.0) == pytest.approx(0.8)
    assert norm.PUT_CALL.normalize(norm.implied_put_call_ratio(20.0)) == 70
    assert norm.PUT_CALL.normalize(0.5) == 100


def test_linear_spreads():
    assert norm.SAFE_HAVEN.normalize(2.0) == 60
    assert norm.SAFE_HAVEN.normalize(-4.0) == 30
    assert norm.JUNK_BOND.normalize(1.0) == 67
    assert norm.JUNK_BOND.normalize(3.0) == 100


@pytest.mark.parametrize(
    "dominance, score",
    [(65.1, 80), (65.0, 65), (55.5, 65), (50.0, 50), (40.0, 35), (35.0, 20), (10.0, 20)],
)
def test_btc_dominance_steps(dominance, score):
    assert norm.BTC_DOMINANCE.normalize(dominance) == score


@pytest.mark.parametrize("proximity, score", [(99.0, 85), (95.0, 70), (85.0, 55), (80.0, 40)])
def test_gold_proximity_steps(proximity, score):
    assert norm.GOLD_PROXIMITY.normalize(proximity) == score


def test_passthrough_clamps():
    assert norm.PASSTHROUGH.normalize(72.0) == 72
    assert norm.PASSTHROUGH.normalize(140.0) == 100


def test_strategy_registry():
    assert norm.get_strategy("inverted") is norm.VOLATILITY
    assert norm.get_strategy("oil") is norm.OIL
    assert set(norm.STRATEGIES) == {
        "inverted",
        "direct",
        "range_position",
        "put_call",
        "safe_haven",
        "junk_bond",
        "oil",
        "btc_dominance",
        "gold_proximity",
        "passthrough",
    }
    with pytest.raises(InvalidInputError):
        norm.get_strategy("astrology")
