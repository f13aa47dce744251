import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ..config import CorrelationConfig
from ..data.connectors import CCXTKlinesConnector
from ..data.interfaces import KlinesConnector
from ..data.schemas import CorrelationResult, MarketSeries, ReturnPoint, RollingCorrelationPoint
from ..features.correlation import align_series, basket_correlations, correlate, return_pairs, rolling_correlation
from ..monitoring import LoggingMetricsSink, MetricsSink
from ..utils.retry import retry_call
from .fanout import gather

logger = logging.getLogger(__name__)


def short_name(symbol: str) -> str:
    return symbol.split("/", maxsplit=1)[0]


@dataclass
class CorrelationReport:
    base_symbol: str
    pair_symbol: str
    window: int
    overall: CorrelationResult
    scatter: List[ReturnPoint]
    rolling: List[RollingCorrelationPoint]
    basket: List[Dict[str, Any]]
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base": short_name(self.base_symbol),
            "pair": short_name(self.pair_symbol),
            "window": self.window,
            "overall": self.overall.to_dict(),
            "scatter": [p.to_dict() for p in self.scatter],
            "rolling": [p.to_dict() for p in self.rolling],
            "basket": self.basket,
            "timestamp": self.generated_at.isoformat(),
        }


class CorrelationEngine:
    """Return correlation between two coins plus a ranked basket of peers."""

    def __init__(
        self,
        connector: KlinesConnector | None = None,
        config: CorrelationConfig | None = None,
        metrics: MetricsSink | None = None,
        retry_attempts: int = 3,
        backoff_seconds: float = 1.0,
        max_workers: int = 8,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.connector = connector or CCXTKlinesConnector()
        self.config = config or CorrelationConfig()
        self.metrics = metrics or LoggingMetricsSink()
        self.retry_attempts = retry_attempts
        self.backoff_seconds = backoff_seconds
        self.max_workers = max_workers
        self._sleep = sleep

    def report(self) -> CorrelationReport:
        cfg = self.config
        cfg.validate()

        symbols = list(dict.fromkeys([cfg.base_symbol, cfg.pair_symbol, *cfg.basket_targets()]))
        settled = gather({s: self._fetcher(s) for s in symbols}, max_workers=self.max_workers)

        for required in (cfg.base_symbol, cfg.pair_symbol):
            outcome = settled[required]
            if isinstance(outcome, Exception):
                self.metrics.emit_error("correlation_failed", {"symbol": required, "detail": str(outcome)})
                raise outcome

        base: MarketSeries = settled[cfg.base_symbol]
        pair: MarketSeries = settled[cfg.pair_symbol]
        base_closes = base.closes_by_date()

        scatter = return_pairs(align_series(base_closes, pair.closes_by_date()))
        xs = [p.x for p in scatter]
        ys = [p.y for p in scatter]
        overall = correlate(xs, ys)
        rolling = rolling_correlation([p.date for p in scatter], xs, ys, cfg.window)

        peers: Dict[str, Dict[str, float]] = {}
        for symbol in cfg.basket_targets():
            outcome = settled[symbol]
            if isinstance(outcome, Exception):
                logger.warning(f"Skipping {symbol} in basket: {outcome}")
                continue
            peers[short_name(symbol)] = outcome.closes_by_date()

        pair_label = f"{short_name(cfg.base_symbol)}/{short_name(cfg.pair_symbol)}"
        self.metrics.emit_correlation(pair_label, overall.coefficient, overall.n)
        return CorrelationReport(
            base_symbol=cfg.base_symbol,
            pair_symbol=cfg.pair_symbol,
            window=cfg.window,
            overall=overall,
            scatter=scatter,
            rolling=rolling,
            basket=basket_correlations(base_closes, peers),
        )

    def _fetcher(self, symbol: str) -> Callable[[], MarketSeries]:
        def fetch() -> MarketSeries:
            return retry_call(
                lambda: self.connector.fetch_klines(symbol, timeframe=self.config.timeframe, limit=self.config.lookback),
                source=f"klines:{symbol}",
                attempts=self.retry_attempts,
                backoff_seconds=self.backoff_seconds,
                sleep=self._sleep,
            )

        return fetch
