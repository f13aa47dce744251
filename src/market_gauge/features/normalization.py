"""
Normalization strategies mapping raw indicator values onto a 0-100 greed scale.

Every strategy shares one call shape, ``normalize(value, *, baseline, low, high)``,
and ignores the context it does not need. Scaling constants live here as named
values so recalibration never touches control flow.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Sequence, Tuple

from ..errors import InvalidInputError

SCORE_MIN = 0
SCORE_MAX = 100
SCORE_CENTER = 50.0

# Points per 1% deviation of VIX from its 50-day mean (inverted).
VOLATILITY_SENSITIVITY = 2.5
# Points per 1% deviation of the S&P 500 from its 125-day mean.
MOMENTUM_SENSITIVITY = 8.0
# Points per unit of 52-week range position away from the midpoint.
RANGE_POSITION_SCALE = 150.0
# Points per unit of put/call ratio above 0.5 (inverted).
PUT_CALL_SCALE = 100.0
PUT_CALL_PIVOT = 0.5
# Put/call ratio implied from VIX: 0.5 at VIX 10, +0.03 per VIX point.
VIX_PUT_CALL_BASE = 0.5
VIX_PUT_CALL_FLOOR = 10.0
VIX_PUT_CALL_SLOPE = 0.03
# Points per 1% of 20-day stock-minus-bond return spread.
SAFE_HAVEN_SCALE = 5.0
# Points per 1% of 20-day high-yield-minus-investment-grade return spread.
JUNK_BOND_SCALE = 16.67
# Points per 1% deviation of oil from its one-year mean.
OIL_SENSITIVITY = 1.0

BTC_DOMINANCE_STEPS: Tuple[Tuple[float, int], ...] = ((65.0, 80), (55.0, 65), (45.0, 50), (35.0, 35))
BTC_DOMINANCE_FLOOR = 20
GOLD_PROXIMITY_STEPS: Tuple[Tuple[float, int], ...] = ((95.0, 85), (90.0, 70), (80.0, 55))
GOLD_PROXIMITY_FLOOR = 40


def round_half_up(value: float) -> int:
    """Round .5 away from zero on the upper side, as dashboards conventionally do."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    if not math.isfinite(value):
        raise InvalidInputError(f"cannot score non-finite value {value}")
    return max(SCORE_MIN, min(SCORE_MAX, round_half_up(value)))


def percent_deviation(value: float, baseline: Optional[float]) -> float:
    if baseline is None or baseline == 0 or not math.isfinite(baseline):
        raise InvalidInputError(f"deviation needs a finite non-zero baseline, got {baseline}")
    return (value - baseline) / baseline * 100.0


class NormalizationStrategy(Protocol):
    tag: str

    def normalize(
        self,
        value: float,
        *,
        baseline: Optional[float] = None,
        low: Optional[float] = None,
        high: Optional[float] = None,
    ) -> int:
        ...


@dataclass(frozen=True)
class InvertedDeviation:
    """Volatility-style: a higher raw value means more fear, so a lower score."""

    sensitivity: float = VOLATILITY_SENSITIVITY
    tag: str = "inverted"

    def normalize(self, value, *, baseline=None, low=None, high=None) -> int:
        return clamp_score(SCORE_CENTER - self.sensitivity * percent_deviation(value, baseline))


@dataclass(frozen=True)
class DirectDeviation:
    """Momentum-style: a higher raw value means more greed."""

    sensitivity: float = MOMENTUM_SENSITIVITY
    tag: str = "direct"

    def normalize(self, value, *, baseline=None, low=None, high=None) -> int:
        return clamp_score(SCORE_CENTER + self.sensitivity * percent_deviation(value, baseline))


@dataclass(frozen=True)
class RangePosition:
    scale: float = RANGE_POSITION_SCALE
    tag: str = "range_position"

    def normalize(self, value, *, baseline=None, low=None, high=None) -> int:
        if low is None or high is None or not high > low:
            raise InvalidInputError(f"range position needs low < high, got low={low} high={high}")
        ratio = (value - low) / (high - low)
        return clamp_score(SCORE_CENTER + (ratio - 0.5) * self.scale)


@dataclass(frozen=True)
class LinearScale:
    """``center + slope * (value - pivot)``; a negative slope inverts the scale."""

    slope: float
    center: float = SCORE_CENTER
    pivot: float = 0.0
    tag: str = "linear"

    def normalize(self, value, *, baseline=None, low=None, high=None) -> int:
        return clamp_score(self.center + self.slope * (value - self.pivot))


@dataclass(frozen=True)
class StepTable:
    """Fixed score per threshold; first ``value > threshold`` wins."""

    steps: Sequence[Tuple[float, int]]
    floor: int
    tag: str = "step"

    def normalize(self, value, *, baseline=None, low=None, high=None) -> int:
        if not math.isfinite(value):
            raise InvalidInputError(f"cannot score non-finite value {value}")
        for threshold, score in self.steps:
            if value > threshold:
                return score
        return self.floor


@dataclass(frozen=True)
class Passthrough:
    """Value already on the 0-100 scale (e.g. the Alternative.me index)."""

    tag: str = "passthrough"

    def normalize(self, value, *, baseline=None, low=None, high=None) -> int:
        return clamp_score(value)


def implied_put_call_ratio(vix: float) -> float:
    return VIX_PUT_CALL_BASE + (vix - VIX_PUT_CALL_FLOOR) * VIX_PUT_CALL_SLOPE


VOLATILITY = InvertedDeviation(VOLATILITY_SENSITIVITY)
MOMENTUM = DirectDeviation(MOMENTUM_SENSITIVITY)
RANGE = RangePosition(RANGE_POSITION_SCALE)
PUT_CALL = LinearScale(slope=-PUT_CALL_SCALE, center=100.0, pivot=PUT_CALL_PIVOT, tag="put_call")
SAFE_HAVEN = LinearScale(slope=SAFE_HAVEN_SCALE, tag="safe_haven")
JUNK_BOND = LinearScale(slope=JUNK_BOND_SCALE, tag="junk_bond")
OIL = DirectDeviation(OIL_SENSITIVITY, tag="oil")
BTC_DOMINANCE = StepTable(BTC_DOMINANCE_STEPS, BTC_DOMINANCE_FLOOR, tag="btc_dominance")
GOLD_PROXIMITY = StepTable(GOLD_PROXIMITY_STEPS, GOLD_PROXIMITY_FLOOR, tag="gold_proximity")
PASSTHROUGH = Passthrough()

STRATEGIES: Dict[str, NormalizationStrategy] = {
    s.tag: s
    for s in (
        VOLATILITY,
        MOMENTUM,
        RANGE,
        PUT_CALL,
        SAFE_HAVEN,
        JUNK_BOND,
        OIL,
        BTC_DOMINANCE,
        GOLD_PROXIMITY,
        PASSTHROUGH,
    )
}


def get_strategy(tag: str) -> NormalizationStrategy:
    try:
        return STRATEGIES[tag]
    except KeyError:
        raise InvalidInputError(
            f"unknown normalization strategy {tag!r}, expected one of {sorted(STRATEGIES)}"
        ) from None
