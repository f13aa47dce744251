"""
Log-log power-law regression for long-horizon price valuation.

Fits ``ln(price) = intercept + slope * ln(days)`` by closed-form ordinary least
squares, then scores every point by its residual in units of the population
standard deviation of residuals (sigma).

Bands (fixed, strict inequalities on the outer side):
- z > 2         bubble
- 1 < z <= 2    overvalued
- -1 <= z <= 1  fair
- z < -1        undervalued
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..data.schemas import (
    EXACT_FIT_TOLERANCE,
    PricePoint,
    RegressionResult,
    ValuationBand,
    ValuationPoint,
)
from ..errors import DegenerateFitError, InsufficientDataError, InvalidInputError

DEFAULT_MIN_POINTS = 100

BUBBLE_Z = 2.0
OVERVALUED_Z = 1.0
UNDERVALUED_Z = -1.0
SELL_SIGNAL_Z = 2.5


@dataclass(frozen=True)
class PowerLawAnalysis:
    regression: RegressionResult
    points: List[ValuationPoint] = field(default_factory=list)
    dropped: int = 0

    def latest(self) -> ValuationPoint:
        return self.points[-1]

    def to_dict(self, tail: Optional[int] = None) -> Dict[str, Any]:
        current = self.latest()
        points = self.points[-tail:] if tail else self.points
        return {
            "current": {
                "price": current.price,
                "fair_value": current.fair_value,
                "z_score": current.z_score,
                "band": current.band.value,
                "advice": power_law_advice(current.z_score),
            },
            "regression": self.regression.to_dict(),
            "data": [p.to_dict() for p in points],
            "dropped_points": self.dropped,
        }


def linear_regression(x: Sequence[float], y: Sequence[float]) -> RegressionResult:
    """Closed-form OLS of y on x with population sigma of the residuals."""
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if xs.shape != ys.shape or xs.ndim != 1:
        raise InvalidInputError(f"x and y must be 1-d and equal length, got {xs.shape} and {ys.shape}")
    n = xs.size
    if n < 2:
        raise InsufficientDataError(2, n)
    if not (np.all(np.isfinite(xs)) and np.all(np.isfinite(ys))):
        raise InvalidInputError("x and y must be finite")
    if np.ptp(xs) == 0:
        raise DegenerateFitError("zero variance in x, slope is undefined")
    if np.ptp(ys) == 0:
        raise DegenerateFitError("zero variance in y, r-squared is undefined")

    sum_x = xs.sum()
    sum_y = ys.sum()
    sum_xy = (xs * ys).sum()
    sum_xx = (xs * xs).sum()

    denominator = n * sum_xx - sum_x * sum_x
    if denominator <= 0:
        raise DegenerateFitError("x variance vanished in floating point")
    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n

    residuals = ys - (intercept + slope * xs)
    ss_res = float((residuals * residuals).sum())
    ss_tot = float(((ys - sum_y / n) ** 2).sum())
    if ss_tot == 0:
        raise DegenerateFitError("zero total sum of squares, r-squared is undefined")

    return RegressionResult(
        slope=float(slope),
        intercept=float(intercept),
        r_squared=1.0 - ss_res / ss_tot,
        sigma=math.sqrt(ss_res / n),
        n_points=int(n),
    )


def is_valid_point(point: PricePoint) -> bool:
    price = point.price
    if price is None or not math.isfinite(price) or price <= 0:
        return False
    return point.timestamp_days is not None and point.timestamp_days > 0


def filter_valid_points(points: Sequence[PricePoint]) -> Tuple[List[PricePoint], int]:
    """Drop points the log transform cannot take. Returns (valid, dropped_count)."""
    valid = [p for p in points if is_valid_point(p)]
    return valid, len(points) - len(valid)


def fit_power_law(
    points: Sequence[PricePoint], min_points: int = DEFAULT_MIN_POINTS
) -> RegressionResult:
    valid, _ = filter_valid_points(points)
    required = max(min_points, 2)
    if len(valid) < required:
        raise InsufficientDataError(required, len(valid))
    log_days = [math.log(p.timestamp_days) for p in valid]
    log_prices = [math.log(p.price) for p in valid]
    return linear_regression(log_days, log_prices)


def classify_band(z_score: float) -> ValuationBand:
    if z_score > BUBBLE_Z:
        return ValuationBand.BUBBLE
    if z_score > OVERVALUED_Z:
        return ValuationBand.OVERVALUED
    if z_score < UNDERVALUED_Z:
        return ValuationBand.UNDERVALUED
    return ValuationBand.FAIR


def value_points(
    points: Sequence[PricePoint], regression: RegressionResult
) -> List[ValuationPoint]:
    """Score points against a fitted trend line.

    On an exact fit (sigma at or below ``EXACT_FIT_TOLERANCE``) every point
    sits on the line: z-scores are pinned to 0 rather than dividing rounding
    noise by rounding noise. ``RegressionResult.exact_fit`` flags the case.
    """
    if regression.sigma < 0 or not math.isfinite(regression.sigma):
        raise DegenerateFitError(f"invalid sigma {regression.sigma}")
    exact = regression.sigma <= EXACT_FIT_TOLERANCE
    scored: List[ValuationPoint] = []
    for point in points:
        if not is_valid_point(point):
            raise InvalidInputError(
                f"point at day {point.timestamp_days} has non-positive price or day count"
            )
        log_days = math.log(point.timestamp_days)
        log_price = math.log(point.price)
        expected = regression.intercept + regression.slope * log_days
        residual = log_price - expected
        z_score = 0.0 if exact else residual / regression.sigma
        scored.append(
            ValuationPoint(
                timestamp_days=point.timestamp_days,
                price=point.price,
                date=point.date,
                log_days=log_days,
                log_price=log_price,
                expected_log_price=expected,
                fair_value=math.exp(expected),
                residual=residual,
                z_score=z_score,
                band=classify_band(z_score),
            )
        )
    return scored


def analyze_power_law(
    points: Sequence[PricePoint], min_points: int = DEFAULT_MIN_POINTS
) -> PowerLawAnalysis:
    """Filter, fit and score a time-ordered price history."""
    valid, dropped = filter_valid_points(points)
    for prev, curr in zip(valid, valid[1:]):
        if curr.timestamp_days < prev.timestamp_days:
            raise InvalidInputError(
                f"timestamps must be non-decreasing, day {curr.timestamp_days} follows {prev.timestamp_days}"
            )
    regression = fit_power_law(valid, min_points=min_points)
    return PowerLawAnalysis(
        regression=regression,
        points=value_points(valid, regression),
        dropped=dropped,
    )


def power_law_advice(z_score: float) -> str:
    if z_score > SELL_SIGNAL_Z:
        return "Extreme greed (consider selling)"
    if z_score < UNDERVALUED_Z:
        return "Undervalued (buying opportunity)"
    return "Normal market (hold)"


def utc_date(moment: datetime | date) -> date:
    """Calendar date of ``moment`` in UTC; naive datetimes are taken as UTC."""
    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.date()
    return moment


def days_since(moment: datetime | date, epoch: date) -> int:
    """Whole days elapsed from ``epoch`` to ``moment`` (UTC calendar days)."""
    return (utc_date(moment) - epoch).days


def build_price_points(
    timestamps: Sequence[datetime],
    closes: Sequence[Optional[float]],
    epoch: date,
    min_days: int = 1,
) -> List[PricePoint]:
    """Turn a raw close series into PricePoints, skipping gaps and the early days."""
    points: List[PricePoint] = []
    for ts, close in zip(timestamps, closes):
        if close is None or not math.isfinite(close) or close <= 0:
            continue
        day = utc_date(ts)
        elapsed = days_since(day, epoch)
        if elapsed < min_days:
            continue
        points.append(PricePoint(timestamp_days=elapsed, price=float(close), date=day.isoformat()))
    return points
