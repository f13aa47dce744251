import math
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np

from ..data.schemas import CorrelationResult, ReturnPoint, RollingCorrelationPoint
from ..errors import InsufficientDataError, InvalidInputError

AlignedRow = Tuple[str, float, float]


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson's r via the raw-sums formula.

    r is undefined when either series has zero variance; this returns 0.0
    for that case instead of raising, so a flat series reads as "no
    relationship".
    """
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if xs.shape != ys.shape or xs.ndim != 1:
        raise InvalidInputError(f"series must be 1-d and equal length, got {xs.shape} and {ys.shape}")
    n = xs.size
    if n < 2:
        raise InsufficientDataError(2, n)
    if not (np.all(np.isfinite(xs)) and np.all(np.isfinite(ys))):
        raise InvalidInputError("series must be finite")
    if np.ptp(xs) == 0 or np.ptp(ys) == 0:
        return 0.0

    sum_x = xs.sum()
    sum_y = ys.sum()
    sum_xy = (xs * ys).sum()
    sum_x2 = (xs * xs).sum()
    sum_y2 = (ys * ys).sum()

    numerator = n * sum_xy - sum_x * sum_y
    spread = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)
    if spread <= 0:
        return 0.0
    r = float(numerator / math.sqrt(spread))
    return max(-1.0, min(1.0, r))


def correlate(x: Sequence[float], y: Sequence[float]) -> CorrelationResult:
    return CorrelationResult(coefficient=pearson(x, y), n=len(x))


def rolling_correlation(
    dates: Sequence[str], x: Sequence[float], y: Sequence[float], window: int
) -> List[RollingCorrelationPoint]:
    """
    r over each trailing window ``[i - window, i)`` for ``i = window .. n - 1``,
    labeled with ``dates[i]``. Yields ``n - window`` points; short windows are
    skipped, never padded.
    """
    if not len(dates) == len(x) == len(y):
        raise InvalidInputError("dates, x and y must have equal length")
    if window < 2:
        raise InvalidInputError(f"window must be at least 2, got {window}")
    return [
        RollingCorrelationPoint(date=dates[i], coefficient=pearson(x[i - window : i], y[i - window : i]))
        for i in range(window, len(x))
    ]


def align_series(left: Mapping[str, float], right: Mapping[str, float]) -> List[AlignedRow]:
    """Inner join two keyed series, ascending by key. Unmatched keys are dropped."""
    shared = sorted(set(left) & set(right))
    return [(key, float(left[key]), float(right[key])) for key in shared]


def percent_returns(values: Sequence[float]) -> List[float]:
    returns: List[float] = []
    for prev, curr in zip(values, values[1:]):
        if prev == 0:
            raise InvalidInputError("cannot compute a return from a zero price")
        returns.append((curr - prev) / prev * 100.0)
    return returns


def return_pairs(aligned: Sequence[AlignedRow]) -> List[ReturnPoint]:
    """Paired percent returns from an aligned close series, dated by the later day."""
    if len(aligned) < 2:
        raise InsufficientDataError(2, len(aligned), what="aligned rows")
    dates = [row[0] for row in aligned]
    xs = percent_returns([row[1] for row in aligned])
    ys = percent_returns([row[2] for row in aligned])
    return [ReturnPoint(date=d, x=rx, y=ry) for d, rx, ry in zip(dates[1:], xs, ys)]


def basket_correlations(
    base: Mapping[str, float], basket: Mapping[str, Mapping[str, float]]
) -> List[Dict[str, float]]:
    """Correlate the base close series with each basket member, strongest |r| first."""
    ranked: List[Dict[str, float]] = []
    for name, series in basket.items():
        aligned = align_series(base, series)
        if len(aligned) < 2:
            continue
        r = pearson([row[1] for row in aligned], [row[2] for row in aligned])
        ranked.append({"name": name, "value": r, "n": len(aligned)})
    ranked.sort(key=lambda item: abs(item["value"]), reverse=True)
    return ranked
