import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from ..config import PowerLawConfig
from ..data.connectors import YFinanceHistoryConnector
from ..data.interfaces import HistoryConnector
from ..errors import MarketGaugeError
from ..features.power_law import PowerLawAnalysis, analyze_power_law, build_price_points
from ..monitoring import LoggingMetricsSink, MetricsSink
from ..utils.retry import retry_call

logger = logging.getLogger(__name__)

HIGH_RELIABILITY_R2 = 0.9


@dataclass
class PowerLawReport:
    analysis: PowerLawAnalysis
    config: PowerLawConfig
    data_source: str
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload = self.analysis.to_dict(tail=self.config.chart_points)
        payload["timestamp"] = self.generated_at.isoformat()
        payload["metadata"] = {
            "data_source": self.data_source,
            "reliability": "high" if self.analysis.regression.r_squared > HIGH_RELIABILITY_R2 else "moderate",
            "total_data_points": len(self.analysis.points),
            "analysis_method": "Power Law Regression (Log-Log)",
            "genesis_date": self.config.genesis.isoformat(),
            **self.metadata,
        }
        return payload


class PowerLawEngine:
    """Fetches a long price history and fits the log-log power-law trend to it."""

    def __init__(
        self,
        connector: HistoryConnector | None = None,
        config: PowerLawConfig | None = None,
        metrics: MetricsSink | None = None,
        retry_attempts: int = 3,
        backoff_seconds: float = 1.0,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.connector = connector or YFinanceHistoryConnector()
        self.config = config or PowerLawConfig()
        self.metrics = metrics or LoggingMetricsSink()
        self.retry_attempts = retry_attempts
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    def report(self) -> PowerLawReport:
        cfg = self.config
        cfg.validate()
        start = time.perf_counter()

        series = retry_call(
            lambda: self.connector.fetch_history(cfg.ticker, period=cfg.period, interval=cfg.interval),
            source=f"history:{cfg.ticker}",
            attempts=self.retry_attempts,
            backoff_seconds=self.backoff_seconds,
            sleep=self._sleep,
        )
        points = build_price_points(series.timestamps, series.closes, cfg.genesis, min_days=cfg.min_days)
        logger.info(f"Loaded {len(points)} {cfg.ticker} points from {series.source}")

        try:
            analysis = analyze_power_law(points, min_points=cfg.min_points)
        except MarketGaugeError as exc:
            self.metrics.emit_error("power_law_failed", {"asset": cfg.ticker, "detail": str(exc)})
            raise

        latest = analysis.latest()
        self.metrics.emit_valuation(
            asset_id=cfg.ticker,
            z_score=latest.z_score,
            band=latest.band.value,
            r_squared=analysis.regression.r_squared,
            n_points=analysis.regression.n_points,
        )
        return PowerLawReport(
            analysis=analysis,
            config=cfg,
            data_source=series.source,
            metadata={"latency_ms": round((time.perf_counter() - start) * 1000, 2)},
        )
