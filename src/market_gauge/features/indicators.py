"""
Builders turning raw market series into normalized IndicatorReadings.

Stocks (CNN-style, each weight 1): momentum, volatility, price strength,
breadth, put/call, safe-haven demand, junk-bond demand.
Crypto: Alternative.me Fear & Greed (weight 3), BTC dominance (weight 2).
Commodities: gold proximity to its 52-week high (weight 2), oil vs its mean.
"""

from typing import List, Sequence

from ..data.schemas import IndicatorReading
from ..errors import InsufficientDataError, InvalidInputError
from . import normalization as norm
from .sentiment import make_reading

MOMENTUM_WINDOW = 125
VOLATILITY_WINDOW = 50
BREADTH_WINDOW = 10
RETURN_LOOKBACK = 20

CRYPTO_FG_WEIGHT = 3.0
BTC_DOMINANCE_WEIGHT = 2.0
GOLD_WEIGHT = 2.0
OIL_WEIGHT = 1.0


def _clean(values: Sequence[float]) -> List[float]:
    return [float(v) for v in values if v is not None and v == v]


def trailing_mean(values: Sequence[float], window: int) -> float:
    """Mean of the last ``window`` values."""
    if len(values) < window:
        raise InsufficientDataError(window, len(values), what="closes")
    tail = values[-window:]
    return sum(tail) / window


def lookback_return(values: Sequence[float], lookback: int = RETURN_LOOKBACK) -> float:
    """Percent change from ``values[-lookback]`` to the last value."""
    if len(values) < lookback:
        raise InsufficientDataError(lookback, len(values), what="closes")
    start = values[-lookback]
    if start <= 0:
        raise InvalidInputError(f"non-positive start price {start}")
    return (values[-1] - start) / start * 100.0


def momentum_reading(closes: Sequence[float], current: float | None = None) -> IndicatorReading:
    prices = _clean(closes)
    if not prices:
        raise InsufficientDataError(1, 0, what="closes")
    price = current if current is not None else prices[-1]
    ma = trailing_mean(prices, MOMENTUM_WINDOW)
    score = norm.MOMENTUM.normalize(price, baseline=ma)
    return make_reading("Market Momentum", score, detail={"price": price, "ma125": ma})


def volatility_reading(closes: Sequence[float], current: float | None = None) -> IndicatorReading:
    levels = _clean(closes)
    if not levels:
        raise InsufficientDataError(1, 0, what="closes")
    vix = current if current is not None else levels[-1]
    ma = trailing_mean(levels, VOLATILITY_WINDOW)
    score = norm.VOLATILITY.normalize(vix, baseline=ma)
    return make_reading("Market Volatility", score, detail={"vix": vix, "ma50": ma})


def strength_reading(closes: Sequence[float], current: float | None = None) -> IndicatorReading:
    prices = _clean(closes)
    if not prices:
        raise InsufficientDataError(1, 0, what="closes")
    price = current if current is not None else prices[-1]
    low, high = min(prices), max(prices)
    score = norm.RANGE.normalize(price, low=low, high=high)
    position = (price - low) / (high - low)
    return make_reading(
        "Stock Price Strength",
        score,
        detail={"year_low": low, "year_high": high, "position_in_range": round(position * 100)},
    )


def breadth_reading(closes: Sequence[float], volumes: Sequence[float]) -> IndicatorReading:
    """Up-day ratio over the last 10 sessions, damped when today's volume is light."""
    prices = _clean(closes)
    vols = [v for v in _clean(volumes) if v > 0]
    if len(prices) < BREADTH_WINDOW or len(vols) < BREADTH_WINDOW:
        raise InsufficientDataError(BREADTH_WINDOW, min(len(prices), len(vols)), what="sessions")
    recent = prices[-BREADTH_WINDOW:]
    recent_vols = vols[-BREADTH_WINDOW:]
    up_days = sum(1 for prev, curr in zip(recent, recent[1:]) if curr > prev)
    up_ratio = up_days / (len(recent) - 1)
    volume_ratio = recent_vols[-1] / (sum(recent_vols) / len(recent_vols))
    volume_weight = min(volume_ratio, 2.0) / 2.0
    breadth = up_ratio * 100.0
    score = norm.clamp_score(breadth * (0.5 + volume_weight * 0.5))
    return make_reading(
        "Stock Price Breadth",
        score,
        detail={"breadth_score": norm.round_half_up(breadth), "volume_ratio": volume_ratio},
    )


def put_call_reading(vix: float) -> IndicatorReading:
    ratio = norm.implied_put_call_ratio(vix)
    score = norm.PUT_CALL.normalize(ratio)
    return make_reading("Put/Call Options", score, detail={"vix": vix, "ratio": round(ratio, 2)})


def safe_haven_reading(stock_closes: Sequence[float], bond_closes: Sequence[float]) -> IndicatorReading:
    stock_return = lookback_return(_clean(stock_closes))
    bond_return = lookback_return(_clean(bond_closes))
    diff = stock_return - bond_return
    score = norm.SAFE_HAVEN.normalize(diff)
    return make_reading(
        "Safe Haven Demand",
        score,
        detail={"stock_return": round(stock_return, 1), "bond_return": round(bond_return, 1), "diff": round(diff, 1)},
    )


def junk_bond_reading(high_yield_closes: Sequence[float], grade_closes: Sequence[float]) -> IndicatorReading:
    high_yield_return = lookback_return(_clean(high_yield_closes))
    grade_return = lookback_return(_clean(grade_closes))
    tightening = high_yield_return - grade_return
    score = norm.JUNK_BOND.normalize(tightening)
    return make_reading("Junk Bond Demand", score, detail={"spread_change": round(tightening, 1)})


def crypto_fear_greed_reading(value: float, classification: str = "") -> IndicatorReading:
    score = norm.PASSTHROUGH.normalize(value)
    detail = {"classification": classification} if classification else {}
    return make_reading("Crypto Fear & Greed", score, weight=CRYPTO_FG_WEIGHT, detail=detail)


def btc_dominance_reading(dominance_pct: float) -> IndicatorReading:
    dominance = round(dominance_pct, 1)
    score = norm.BTC_DOMINANCE.normalize(dominance)
    return make_reading("Bitcoin Dominance", score, weight=BTC_DOMINANCE_WEIGHT, detail={"dominance": dominance})


def gold_reading(closes: Sequence[float], current: float | None = None) -> IndicatorReading:
    prices = _clean(closes)
    if not prices:
        raise InsufficientDataError(1, 0, what="closes")
    price = current if current is not None else prices[-1]
    year_high = max(prices)
    proximity = price / year_high * 100.0
    score = norm.GOLD_PROXIMITY.normalize(proximity)
    return make_reading(
        "Gold",
        score,
        weight=GOLD_WEIGHT,
        detail={"price": round(price, 2), "year_high": round(year_high, 2), "proximity": norm.round_half_up(proximity)},
    )


def oil_reading(closes: Sequence[float], current: float | None = None) -> IndicatorReading:
    prices = _clean(closes)
    if not prices:
        raise InsufficientDataError(1, 0, what="closes")
    price = current if current is not None else prices[-1]
    average = sum(prices) / len(prices)
    score = norm.OIL.normalize(price, baseline=average)
    return make_reading("Oil", score, weight=OIL_WEIGHT, detail={"price": round(price, 2), "average": round(average, 2)})
