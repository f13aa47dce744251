from typing import Any, Dict

from .api_schemas import CompositeRequest, CorrelationAnalyzeRequest, PowerLawAnalyzeRequest
from .data.schemas import PricePoint
from .errors import InsufficientDataError
from .features.correlation import align_series, correlate, return_pairs, rolling_correlation
from .features.power_law import analyze_power_law
from .features.sentiment import RawIndicator, normalize_reading, score_or_fallback, summarize
from .pipeline.correlation import CorrelationEngine
from .pipeline.fear_greed import FearGreedEngine
from .pipeline.power_law import PowerLawEngine


def power_law_endpoint(engine: PowerLawEngine | None = None) -> Dict[str, Any]:
    eng = engine or PowerLawEngine()
    return eng.report().to_dict()


def fear_greed_endpoint(asset_type: str = "stocks", engine: FearGreedEngine | None = None) -> Dict[str, Any]:
    eng = engine or FearGreedEngine()
    return eng.report(asset_type).to_dict()


def correlation_endpoint(engine: CorrelationEngine | None = None) -> Dict[str, Any]:
    eng = engine or CorrelationEngine()
    return eng.report().to_dict()


def analyze_points_endpoint(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Fit the power law to caller-supplied points."""
    request = PowerLawAnalyzeRequest.model_validate(payload)
    points = [PricePoint(timestamp_days=p.timestamp_days, price=p.price, date=p.date) for p in request.points]
    analysis = analyze_power_law(points, min_points=request.min_points)
    return analysis.to_dict(tail=request.tail)


def composite_endpoint(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize raw indicator values and combine them; no live input yields a flagged fallback."""
    request = CompositeRequest.model_validate(payload)
    readings = [normalize_reading(RawIndicator(**item.model_dump())) for item in request.indicators]
    composite = score_or_fallback(readings, possible_weight=request.possible_weight)
    return summarize(composite, readings)


def correlation_analyze_endpoint(payload: Dict[str, Any]) -> Dict[str, Any]:
    request = CorrelationAnalyzeRequest.model_validate(payload)
    aligned = align_series(request.left, request.right)
    if request.use_returns:
        pairs = return_pairs(aligned)
        dates = [p.date for p in pairs]
        xs = [p.x for p in pairs]
        ys = [p.y for p in pairs]
    else:
        if len(aligned) < 2:
            raise InsufficientDataError(2, len(aligned), what="aligned rows")
        dates = [row[0] for row in aligned]
        xs = [row[1] for row in aligned]
        ys = [row[2] for row in aligned]
    overall = correlate(xs, ys)
    rolling = rolling_correlation(dates, xs, ys, request.window)
    return {
        "coefficient": overall.coefficient,
        "n": overall.n,
        "rolling": [p.to_dict() for p in rolling],
    }
