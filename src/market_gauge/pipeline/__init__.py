# Pipeline orchestration
from .correlation import CorrelationEngine, CorrelationReport
from .fear_greed import FearGreedEngine, FearGreedReport
from .power_law import PowerLawEngine, PowerLawReport

__all__ = [
    "CorrelationEngine",
    "CorrelationReport",
    "FearGreedEngine",
    "FearGreedReport",
    "PowerLawEngine",
    "PowerLawReport",
]
