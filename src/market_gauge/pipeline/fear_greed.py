import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ..config import ASSET_TYPES, FearGreedConfig
from ..data.connectors import AlternativeMeConnector, CoinGeckoGlobalConnector, YFinanceHistoryConnector
from ..data.interfaces import CryptoSentimentConnector, HistoryConnector, MarketDominanceConnector
from ..data.schemas import CompositeScore, IndicatorReading, MarketSeries
from ..errors import DataSourceError, InvalidInputError, MarketGaugeError
from ..features import indicators
from ..features.sentiment import score_or_fallback, summarize
from ..monitoring import LoggingMetricsSink, MetricsSink
from ..utils.retry import retry_call
from .fanout import gather

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndicatorSource:
    name: str
    nominal_weight: float
    build: Callable[[], IndicatorReading]


@dataclass
class FearGreedReport:
    asset_type: str
    composite: CompositeScore
    readings: List[IndicatorReading]
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        payload = summarize(self.composite, self.readings)
        payload["asset_type"] = self.asset_type
        payload["timestamp"] = self.generated_at.isoformat()
        return payload


class FearGreedEngine:
    """Collects indicator readings for an asset class in parallel and scores them."""

    def __init__(
        self,
        history: HistoryConnector | None = None,
        crypto_sentiment: CryptoSentimentConnector | None = None,
        dominance: MarketDominanceConnector | None = None,
        config: FearGreedConfig | None = None,
        metrics: MetricsSink | None = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.config = config or FearGreedConfig()
        self.history = history or YFinanceHistoryConnector()
        self.crypto_sentiment = crypto_sentiment or AlternativeMeConnector(timeout=self.config.request_timeout)
        self.dominance = dominance or CoinGeckoGlobalConnector(timeout=self.config.request_timeout)
        self.metrics = metrics or LoggingMetricsSink()
        self._sleep = sleep

    def report(self, asset_type: str = "stocks") -> FearGreedReport:
        self.config.validate()
        sources = self.sources(asset_type)
        readings = self.collect(sources)
        composite = score_or_fallback(readings, possible_weight=sum(s.nominal_weight for s in sources))
        self.metrics.emit_composite(
            asset_type=asset_type,
            score=composite.score,
            label=composite.label.value,
            confidence_percent=composite.confidence_percent,
            fallback=composite.fallback,
        )
        return FearGreedReport(asset_type=asset_type, composite=composite, readings=readings)

    def sources(self, asset_type: str) -> List[IndicatorSource]:
        if asset_type == "stocks":
            return [
                IndicatorSource("Market Momentum", 1.0, lambda: indicators.momentum_reading(self._closes("SPY", "1y"))),
                IndicatorSource("Market Volatility", 1.0, lambda: indicators.volatility_reading(self._closes("^VIX", "3mo"))),
                IndicatorSource("Stock Price Strength", 1.0, lambda: indicators.strength_reading(self._closes("^NYA", "1y"))),
                IndicatorSource("Stock Price Breadth", 1.0, self._breadth),
                IndicatorSource("Put/Call Options", 1.0, lambda: indicators.put_call_reading(self._series("^VIX", "5d").latest_price())),
                IndicatorSource(
                    "Safe Haven Demand",
                    1.0,
                    lambda: indicators.safe_haven_reading(self._closes("SPY", "1mo"), self._closes("TLT", "1mo")),
                ),
                IndicatorSource(
                    "Junk Bond Demand",
                    1.0,
                    lambda: indicators.junk_bond_reading(self._closes("HYG", "1mo"), self._closes("LQD", "1mo")),
                ),
            ]
        if asset_type == "crypto":
            return [
                IndicatorSource("Crypto Fear & Greed", indicators.CRYPTO_FG_WEIGHT, self._crypto_fear_greed),
                IndicatorSource("Bitcoin Dominance", indicators.BTC_DOMINANCE_WEIGHT, self._btc_dominance),
            ]
        if asset_type == "commodities":
            return [
                IndicatorSource("Gold", indicators.GOLD_WEIGHT, lambda: indicators.gold_reading(self._closes("GC=F", "1y"))),
                IndicatorSource("Oil", indicators.OIL_WEIGHT, lambda: indicators.oil_reading(self._closes("CL=F", "1y"))),
            ]
        raise InvalidInputError(f"asset_type must be one of {ASSET_TYPES}, got {asset_type!r}")

    def collect(self, sources: List[IndicatorSource]) -> List[IndicatorReading]:
        """Fan out every source, then keep the original order; failures become unavailable readings."""
        settled = gather({s.name: s.build for s in sources}, max_workers=self.config.max_workers)
        readings: List[IndicatorReading] = []
        for source in sources:
            outcome = settled[source.name]
            if isinstance(outcome, (DataSourceError, MarketGaugeError)):
                logger.warning(f"{source.name} unavailable: {outcome}")
                self.metrics.emit_error("indicator_unavailable", {"indicator": source.name, "detail": str(outcome)})
                readings.append(IndicatorReading.unavailable(source.name, source.nominal_weight, reason=str(outcome)))
            elif isinstance(outcome, Exception):
                raise outcome
            else:
                readings.append(outcome)
        return readings

    def _retry(self, fetch_fn: Callable[[], Any], source: str) -> Any:
        return retry_call(
            fetch_fn,
            source=source,
            attempts=self.config.max_retries,
            backoff_seconds=self.config.backoff_seconds,
            sleep=self._sleep,
        )

    def _series(self, symbol: str, period: str) -> MarketSeries:
        return self._retry(lambda: self.history.fetch_history(symbol, period=period, interval="1d"), f"history:{symbol}")

    def _closes(self, symbol: str, period: str) -> List[float]:
        return self._series(symbol, period).closes

    def _breadth(self) -> IndicatorReading:
        series = self._series("^NYA", "1mo")
        return indicators.breadth_reading(series.closes, series.volumes)

    def _crypto_fear_greed(self) -> IndicatorReading:
        index = self._retry(self.crypto_sentiment.fetch_index, "alternative.me")
        return indicators.crypto_fear_greed_reading(float(index["value"]), str(index.get("classification", "")))

    def _btc_dominance(self) -> IndicatorReading:
        snapshot = self._retry(self.dominance.fetch_global, "coingecko")
        return indicators.btc_dominance_reading(snapshot["btc_dominance"])
