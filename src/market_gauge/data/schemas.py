from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

# Residual RMS (log space) at or below which a fit counts as exact.
EXACT_FIT_TOLERANCE = 1e-9


class ValuationBand(str, Enum):
    BUBBLE = "bubble"
    OVERVALUED = "overvalued"
    FAIR = "fair"
    UNDERVALUED = "undervalued"
    # Placeholder before a point has been scored.
    NEUTRAL = "neutral"


class SentimentLabel(str, Enum):
    EXTREME_FEAR = "Extreme Fear"
    FEAR = "Fear"
    NEUTRAL = "Neutral"
    GREED = "Greed"
    EXTREME_GREED = "Extreme Greed"


@dataclass
class MarketSeries:
    """Raw close/volume history handed over by a connector."""

    symbol: str
    timestamps: List[datetime]
    closes: List[float]
    volumes: List[float] = field(default_factory=list)
    source: str = "unknown"

    def latest_price(self) -> float:
        return self.closes[-1]

    def dates(self) -> List[str]:
        return [ts.strftime("%Y-%m-%d") for ts in self.timestamps]

    def closes_by_date(self) -> Dict[str, float]:
        return dict(zip(self.dates(), self.closes))


@dataclass(frozen=True)
class PricePoint:
    timestamp_days: int
    price: float
    date: Optional[str] = None


@dataclass(frozen=True)
class RegressionResult:
    slope: float
    intercept: float
    r_squared: float
    sigma: float
    n_points: int = 0

    @property
    def exact_fit(self) -> bool:
        """True when the residuals vanish and z-scores carry no information."""
        return self.sigma <= EXACT_FIT_TOLERANCE

    def equation(self) -> str:
        return f"log(Price) = {self.intercept:.3f} + {self.slope:.3f} × log(Days)"

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["equation"] = self.equation()
        payload["exact_fit"] = self.exact_fit
        return payload


@dataclass(frozen=True, kw_only=True)
class ValuationPoint(PricePoint):
    log_days: float
    log_price: float
    expected_log_price: float
    fair_value: float
    residual: float
    z_score: float
    band: ValuationBand = ValuationBand.NEUTRAL

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["band"] = self.band.value
        return payload


@dataclass(frozen=True)
class IndicatorReading:
    """One normalized sub-indicator.

    ``weight == 0`` is the "source unavailable" sentinel, not a real zero
    importance. ``nominal_weight`` remembers what the weight would have been
    so confidence can be measured against the full set of expected sources.
    """

    name: str
    score: Optional[int]
    weight: float
    status: SentimentLabel = SentimentLabel.NEUTRAL
    nominal_weight: Optional[float] = None
    detail: Dict[str, Any] = field(default_factory=dict)

    @property
    def available(self) -> bool:
        return self.weight > 0 and self.score is not None

    @property
    def expected_weight(self) -> float:
        if self.nominal_weight is not None:
            return self.nominal_weight
        return self.weight

    @classmethod
    def unavailable(
        cls, name: str, nominal_weight: float = 1.0, reason: str = ""
    ) -> "IndicatorReading":
        detail: Dict[str, Any] = {"fallback": True}
        if reason:
            detail["reason"] = reason
        return cls(
            name=name,
            score=None,
            weight=0.0,
            status=SentimentLabel.NEUTRAL,
            nominal_weight=nominal_weight,
            detail=detail,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "weight": self.weight,
            "status": self.status.value,
            "real_time": self.available,
            "detail": dict(self.detail),
        }


@dataclass(frozen=True)
class CompositeScore:
    score: int
    label: SentimentLabel
    confidence_percent: int
    fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "label": self.label.value,
            "confidence_percent": self.confidence_percent,
            "fallback": self.fallback,
        }


@dataclass(frozen=True)
class CorrelationResult:
    coefficient: float
    n: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RollingCorrelationPoint:
    date: str
    coefficient: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ReturnPoint:
    """Paired daily returns (percent) for a scatter plot."""

    date: str
    x: float
    y: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
