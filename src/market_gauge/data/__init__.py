# Data connectors and schemas
from .interfaces import CryptoSentimentConnector, HistoryConnector, KlinesConnector, MarketDominanceConnector
from .schemas import (
    CompositeScore,
    CorrelationResult,
    IndicatorReading,
    MarketSeries,
    PricePoint,
    RegressionResult,
    ReturnPoint,
    RollingCorrelationPoint,
    SentimentLabel,
    ValuationBand,
    ValuationPoint,
)
from .connectors import (
    AlternativeMeConnector,
    CCXTKlinesConnector,
    CoinGeckoGlobalConnector,
    YFinanceHistoryConnector,
)

__all__ = [
    "CryptoSentimentConnector",
    "HistoryConnector",
    "KlinesConnector",
    "MarketDominanceConnector",
    "CompositeScore",
    "CorrelationResult",
    "IndicatorReading",
    "MarketSeries",
    "PricePoint",
    "RegressionResult",
    "ReturnPoint",
    "RollingCorrelationPoint",
    "SentimentLabel",
    "ValuationBand",
    "ValuationPoint",
    "AlternativeMeConnector",
    "CCXTKlinesConnector",
    "CoinGeckoGlobalConnector",
    "YFinanceHistoryConnector",
]
