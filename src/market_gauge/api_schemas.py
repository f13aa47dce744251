from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PricePointPayload(BaseModel):
    timestamp_days: int = Field(..., ge=0)
    price: float
    date: Optional[str] = None


class PowerLawAnalyzeRequest(BaseModel):
    points: List[PricePointPayload] = Field(..., min_length=2)
    min_points: int = Field(100, ge=2)
    tail: Optional[int] = Field(None, ge=1)


class RawIndicatorPayload(BaseModel):
    name: str
    value: Optional[float] = None
    weight: float = Field(1.0, ge=0)
    strategy: str = "passthrough"
    baseline: Optional[float] = None
    low: Optional[float] = None
    high: Optional[float] = None


class CompositeRequest(BaseModel):
    indicators: List[RawIndicatorPayload]
    possible_weight: Optional[float] = Field(None, gt=0)


class CompositeResponse(BaseModel):
    current: Dict[str, Any]
    indicators: List[Dict[str, Any]]
    live_sources: List[str]
    description: str


class CorrelationAnalyzeRequest(BaseModel):
    """Two date-keyed series; they are inner-joined on date before analysis."""

    left: Dict[str, float]
    right: Dict[str, float]
    window: int = Field(30, ge=2)
    use_returns: bool = True


class CorrelationAnalyzeResponse(BaseModel):
    coefficient: float
    n: int
    rolling: List[Dict[str, Any]]
