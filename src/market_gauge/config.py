import os
from dataclasses import dataclass, field
from datetime import date
from typing import Sequence


BITCOIN_GENESIS = date(2009, 1, 3)

DEFAULT_BASKET: tuple[str, ...] = (
    "BTC/USDT",
    "ETH/USDT",
    "BNB/USDT",
    "SOL/USDT",
    "XRP/USDT",
    "ADA/USDT",
    "DOGE/USDT",
    "AVAX/USDT",
)

ASSET_TYPES: tuple[str, ...] = ("stocks", "crypto", "commodities")


def _getenv_int(key: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to default."""
    val = os.getenv(key, "").strip()
    return int(val) if val.isdigit() else default


@dataclass
class PowerLawConfig:
    ticker: str = "BTC-USD"
    interval: str = "1wk"
    period: str = "max"
    genesis: date = BITCOIN_GENESIS
    min_days: int = 365  # skip the first year, before BTC had a meaningful price
    min_points: int = field(default_factory=lambda: _getenv_int("MARKET_GAUGE_MIN_POINTS", 100))
    chart_points: int = 500

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ValueError: If any parameter is invalid
        """
        if not self.ticker or not self.ticker.strip():
            raise ValueError("ticker cannot be empty")
        if self.min_days < 1:
            raise ValueError(f"min_days must be positive, got {self.min_days}")
        if self.min_points < 2:
            raise ValueError(f"min_points must be at least 2, got {self.min_points}")
        if self.chart_points <= 0:
            raise ValueError(f"chart_points must be positive, got {self.chart_points}")


@dataclass
class CorrelationConfig:
    base_symbol: str = "BTC/USDT"
    pair_symbol: str = "ETH/USDT"
    basket: Sequence[str] = DEFAULT_BASKET
    timeframe: str = "1d"
    lookback: int = 100
    window: int = field(default_factory=lambda: _getenv_int("MARKET_GAUGE_ROLLING_WINDOW", 30))

    def validate(self) -> None:
        if self.window < 2:
            raise ValueError(f"window must be at least 2, got {self.window}")
        if self.lookback <= self.window:
            raise ValueError(
                f"lookback ({self.lookback}) must exceed the rolling window ({self.window})"
            )
        if self.base_symbol == self.pair_symbol:
            raise ValueError("base_symbol and pair_symbol must differ")

    def basket_targets(self) -> list[str]:
        return [s for s in self.basket if s != self.base_symbol]


@dataclass
class FearGreedConfig:
    max_retries: int = 3
    backoff_seconds: float = 1.0
    max_workers: int = 8
    request_timeout: float = 10.0

    def validate(self) -> None:
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {self.max_retries}")
        if self.backoff_seconds < 0:
            raise ValueError(f"backoff_seconds must be non-negative, got {self.backoff_seconds}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
