from typing import Dict, Protocol

from .schemas import MarketSeries


class HistoryConnector(Protocol):
    """Daily/weekly close history by ticker (Yahoo Finance style period strings)."""

    def fetch_history(self, symbol: str, period: str = "1y", interval: str = "1d") -> MarketSeries:
        ...


class KlinesConnector(Protocol):
    """Exchange candles by market symbol (e.g. ``BTC/USDT``)."""

    def fetch_klines(self, symbol: str, timeframe: str = "1d", limit: int = 100) -> MarketSeries:
        ...


class CryptoSentimentConnector(Protocol):
    """Latest crypto Fear & Greed index: value, classification, timestamp."""

    def fetch_index(self) -> Dict[str, object]:
        ...


class MarketDominanceConnector(Protocol):
    """Global crypto market snapshot: BTC dominance percent and total cap."""

    def fetch_global(self) -> Dict[str, float]:
        ...
