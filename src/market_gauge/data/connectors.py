"""
Free public data connectors (no API keys).

Uses:
- yfinance for Yahoo Finance histories (BTC-USD, SPY, ^VIX, ^NYA, TLT, HYG, LQD, GC=F, CL=F)
- ccxt (Binance) for daily crypto klines
- httpx for Alternative.me Fear & Greed and the CoinGecko global snapshot

Connectors raise ``DataSourceError`` on malformed or empty payloads and never
substitute synthetic values; retries live in the pipelines.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import ccxt
import httpx
import yfinance as yf

from ..errors import DataSourceError
from .interfaces import CryptoSentimentConnector, HistoryConnector, KlinesConnector, MarketDominanceConnector
from .schemas import MarketSeries

logger = logging.getLogger(__name__)

ALTERNATIVE_ME_URL = "https://api.alternative.me/fng/"
COINGECKO_GLOBAL_URL = "https://api.coingecko.com/api/v3/global"


class YFinanceHistoryConnector(HistoryConnector):
    """Fetches close/volume history via yfinance."""

    def __init__(self, ticker_factory: Optional[Callable[[str], Any]] = None) -> None:
        self._ticker_factory = ticker_factory or yf.Ticker

    def fetch_history(self, symbol: str, period: str = "1y", interval: str = "1d") -> MarketSeries:
        hist = self._ticker_factory(symbol).history(period=period, interval=interval)
        if hist is None or hist.empty or "Close" not in hist:
            raise DataSourceError("yfinance", f"no history for {symbol} ({period}/{interval})")
        hist = hist.dropna(subset=["Close"])
        if hist.empty:
            raise DataSourceError("yfinance", f"only empty closes for {symbol}")

        timestamps = [ts.to_pydatetime() for ts in hist.index]
        closes = [float(v) for v in hist["Close"].tolist()]
        volumes = [float(v) for v in hist["Volume"].fillna(0.0).tolist()] if "Volume" in hist else []
        logger.debug(f"Fetched {len(closes)} {interval} closes for {symbol} from yfinance")
        return MarketSeries(symbol=symbol, timestamps=timestamps, closes=closes, volumes=volumes, source="yfinance")


class CCXTKlinesConnector(KlinesConnector):
    """Fetches daily candles via ccxt (default Binance)."""

    def __init__(self, exchange: str = "binance", client: Optional[ccxt.Exchange] = None) -> None:
        self.exchange = exchange
        self.client = client or getattr(ccxt, exchange)()

    def fetch_klines(self, symbol: str, timeframe: str = "1d", limit: int = 100) -> MarketSeries:
        candles = self.client.fetch_ohlcv(symbol, timeframe=timeframe, limit=limit)
        if not candles:
            raise DataSourceError(f"ccxt/{self.exchange}", f"no candles for {symbol}")
        timestamps = [datetime.fromtimestamp(c[0] / 1000, tz=timezone.utc) for c in candles]
        closes = [float(c[4]) for c in candles]
        volumes = [float(c[5]) for c in candles]
        logger.debug(f"Fetched {len(candles)} candles for {symbol} from ccxt/{self.exchange}")
        return MarketSeries(
            symbol=symbol,
            timestamps=timestamps,
            closes=closes,
            volumes=volumes,
            source=f"ccxt/{self.exchange}",
        )


class AlternativeMeConnector(CryptoSentimentConnector):
    """Latest crypto Fear & Greed value from Alternative.me."""

    def __init__(self, timeout: float = 10.0) -> None:
        self._client = httpx.Client(timeout=timeout)

    def fetch_index(self) -> Dict[str, Any]:
        resp = self._client.get(ALTERNATIVE_ME_URL, params={"limit": 1})
        resp.raise_for_status()
        try:
            latest = resp.json()["data"][0]
            value = int(latest["value"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise DataSourceError("alternative.me", f"unexpected payload: {e}") from e
        return {
            "value": value,
            "classification": latest.get("value_classification", ""),
            "timestamp": latest.get("timestamp"),
        }


class CoinGeckoGlobalConnector(MarketDominanceConnector):
    """BTC market-cap dominance from the CoinGecko global endpoint."""

    def __init__(self, timeout: float = 10.0) -> None:
        self._client = httpx.Client(timeout=timeout)

    def fetch_global(self) -> Dict[str, float]:
        resp = self._client.get(COINGECKO_GLOBAL_URL)
        resp.raise_for_status()
        try:
            data = resp.json()["data"]
            dominance = float(data["market_cap_percentage"]["btc"])
            total_cap = float(data.get("total_market_cap", {}).get("usd", math.nan))
        except (KeyError, TypeError, ValueError) as e:
            raise DataSourceError("coingecko", f"unexpected payload: {e}") from e
        return {"btc_dominance": dominance, "total_market_cap_usd": total_cap}
