"""Weighted Fear & Greed composite over normalized indicator readings."""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

from ..data.schemas import CompositeScore, IndicatorReading, SentimentLabel
from ..errors import InvalidInputError, NoDataError
from .normalization import SCORE_CENTER, NormalizationStrategy, get_strategy, round_half_up

# Lower bound (inclusive) of each label band, highest first.
LABEL_BANDS = (
    (75, SentimentLabel.EXTREME_GREED),
    (55, SentimentLabel.GREED),
    (45, SentimentLabel.NEUTRAL),
    (25, SentimentLabel.FEAR),
)


def label_for_score(score: float) -> SentimentLabel:
    for lower, label in LABEL_BANDS:
        if score >= lower:
            return label
    return SentimentLabel.EXTREME_FEAR


@dataclass(frozen=True)
class RawIndicator:
    """An un-normalized input: raw value, weight and the strategy tag to apply."""

    name: str
    value: Optional[float]
    weight: float = 1.0
    strategy: str = "passthrough"
    baseline: Optional[float] = None
    low: Optional[float] = None
    high: Optional[float] = None


def make_reading(
    name: str,
    score: int,
    weight: float = 1.0,
    detail: Optional[Mapping[str, Any]] = None,
) -> IndicatorReading:
    return IndicatorReading(
        name=name,
        score=score,
        weight=weight,
        status=label_for_score(score),
        detail=dict(detail or {}),
    )


def normalize_reading(
    raw: RawIndicator, strategy: Optional[NormalizationStrategy] = None
) -> IndicatorReading:
    """Apply the tagged strategy; a missing value or zero weight yields an unavailable reading."""
    if raw.weight < 0:
        raise InvalidInputError(f"weight must be non-negative, got {raw.weight} for {raw.name}")
    if raw.value is None or raw.weight == 0:
        return IndicatorReading.unavailable(raw.name, nominal_weight=raw.weight or 1.0)
    strat = strategy or get_strategy(raw.strategy)
    score = strat.normalize(raw.value, baseline=raw.baseline, low=raw.low, high=raw.high)
    return make_reading(
        raw.name,
        score,
        weight=raw.weight,
        detail={"raw_value": raw.value, "strategy": strat.tag},
    )


def composite_score(
    readings: Sequence[IndicatorReading], possible_weight: Optional[float] = None
) -> CompositeScore:
    """
    Weighted mean of the available readings.

    Readings with weight 0 (source unavailable) are excluded from numerator
    and denominator alike. Confidence is the share of ``possible_weight``
    (default: the sum of every reading's expected weight) that is live.

    Raises:
        NoDataError: If no reading carries a positive weight and a score
    """
    for reading in readings:
        if reading.weight < 0:
            raise InvalidInputError(f"weight must be non-negative, got {reading.weight} for {reading.name}")

    included = [r for r in readings if r.available]
    if not included:
        raise NoDataError(f"none of {len(readings)} indicators returned live data")

    active_weight = sum(r.weight for r in included)
    weighted_sum = sum(r.score * r.weight for r in included)
    score = round_half_up(weighted_sum / active_weight)

    total = possible_weight if possible_weight is not None else sum(r.expected_weight for r in readings)
    if total <= 0:
        raise InvalidInputError(f"possible_weight must be positive, got {total}")
    confidence = min(100, round_half_up(100 * active_weight / total))

    return CompositeScore(score=score, label=label_for_score(score), confidence_percent=confidence)


def score_or_fallback(
    readings: Sequence[IndicatorReading], possible_weight: Optional[float] = None
) -> CompositeScore:
    """Like ``composite_score`` but degrades to a flagged neutral placeholder."""
    try:
        return composite_score(readings, possible_weight=possible_weight)
    except NoDataError:
        center = int(SCORE_CENTER)
        return CompositeScore(
            score=center,
            label=label_for_score(center),
            confidence_percent=0,
            fallback=True,
        )


def summarize(composite: CompositeScore, readings: Sequence[IndicatorReading]) -> Dict[str, Any]:
    live = [r.name for r in readings if r.available]
    return {
        "current": composite.to_dict(),
        "indicators": [r.to_dict() for r in readings],
        "live_sources": live,
        "description": (
            f"{len(live)} of {len(readings)} indicators live. Overall: {composite.label.value}"
            + (" (fallback, no live data)" if composite.fallback else "")
        ),
    }
