import logging
from dataclasses import dataclass
from typing import Dict


@dataclass
class MetricsSink:
    """Interface for engine diagnostics; swap with real telemetry in prod."""

    def emit_valuation(
        self,
        asset_id: str,
        z_score: float,
        band: str,
        r_squared: float,
        n_points: int,
    ) -> None:
        return

    def emit_composite(
        self,
        asset_type: str,
        score: int,
        label: str,
        confidence_percent: int,
        fallback: bool = False,
    ) -> None:
        return

    def emit_correlation(self, pair: str, coefficient: float, n: int) -> None:
        return

    def emit_error(self, name: str, detail: Dict[str, str]) -> None:
        return


class LoggingMetricsSink(MetricsSink):
    """Logs metrics to standard logging for dev/debug."""

    def __init__(self) -> None:
        self._logger = logging.getLogger("market_gauge.metrics")

    def emit_valuation(
        self,
        asset_id: str,
        z_score: float,
        band: str,
        r_squared: float,
        n_points: int,
    ) -> None:
        self._logger.info(
            "valuation asset=%s z=%.2f band=%s r2=%.4f points=%d",
            asset_id,
            z_score,
            band,
            r_squared,
            n_points,
        )

    def emit_composite(
        self,
        asset_type: str,
        score: int,
        label: str,
        confidence_percent: int,
        fallback: bool = False,
    ) -> None:
        self._logger.info(
            "composite asset_type=%s score=%d label=%s confidence=%d%% fallback=%s",
            asset_type,
            score,
            label,
            confidence_percent,
            fallback,
        )

    def emit_correlation(self, pair: str, coefficient: float, n: int) -> None:
        self._logger.info("correlation pair=%s r=%.3f n=%d", pair, coefficient, n)

    def emit_error(self, name: str, detail: Dict[str, str]) -> None:
        self._logger.error("engine_error name=%s detail=%s", name, detail)


__all__ = ["MetricsSink", "LoggingMetricsSink"]
