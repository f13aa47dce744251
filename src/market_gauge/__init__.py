"Market Gauge: power-law valuation, composite sentiment and return correlation."

from .config import CorrelationConfig, FearGreedConfig, PowerLawConfig
from .errors import (
    DataSourceError,
    DegenerateFitError,
    InsufficientDataError,
    InvalidInputError,
    MarketGaugeError,
    NoDataError,
)
from .pipeline import CorrelationEngine, FearGreedEngine, PowerLawEngine

__all__ = [
    "CorrelationConfig",
    "FearGreedConfig",
    "PowerLawConfig",
    "DataSourceError",
    "DegenerateFitError",
    "InsufficientDataError",
    "InvalidInputError",
    "MarketGaugeError",
    "NoDataError",
    "CorrelationEngine",
    "FearGreedEngine",
    "PowerLawEngine",
]
