"""Quote sources: the only module that imports from yfinance or massive.

Every provider exposes ``fetch_quotes(symbols) -> List[Quote]``. Result
order need not match the request; callers match quotes by symbol. Any
failure that leaves no usable quote raises QuoteSourceError.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import yfinance as yf
from massive import RESTClient

from tickerboard.config import Config
from tickerboard.errors import ConfigError, QuoteSourceError
from tickerboard.state import Quote

logger = logging.getLogger(__name__)


def _as_float(val: Any) -> Optional[float]:
    if val is None:
        return None
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


class YahooProvider:
    """Yahoo Finance quotes via yfinance."""

    def fetch_quotes(self, symbols: List[str]) -> List[Quote]:
        if not symbols:
            return []
        try:
            tickers = yf.Tickers(" ".join(symbols))
        except Exception as e:
            raise QuoteSourceError(f"Yahoo: {e}") from e

        quotes: List[Quote] = []
        errors: List[str] = []
        for symbol in symbols:
            try:
                ticker = tickers.tickers.get(symbol)
                if ticker is None:
                    continue
                quote = self._quote_from_info(symbol, ticker.info)
            except Exception as e:
                logger.warning("Yahoo quote for %s failed: %s", symbol, e)
                errors.append(f"{symbol}: {e}")
                continue
            if quote is not None:
                quotes.append(quote)

        if not quotes and errors:
            raise QuoteSourceError(f"Yahoo: {errors[0]}")
        return quotes

    @staticmethod
    def _quote_from_info(symbol: str, info: Any) -> Optional[Quote]:
        """Build a Quote from a yfinance info dict, or None if it carries no price."""
        if not isinstance(info, dict):
            return None
        price = _as_float(info.get("regularMarketPrice"))
        if price is None:
            price = _as_float(info.get("currentPrice"))
        if price is None:
            return None

        change = _as_float(info.get("regularMarketChange"))
        change_pct = _as_float(info.get("regularMarketChangePercent"))
        prev_close = _as_float(info.get("regularMarketPreviousClose") or info.get("previousClose"))
        # Derive change from previous close if the quote omits it
        if change is None and prev_close:
            change = price - prev_close
            change_pct = (change / prev_close) * 100

        return Quote(
            symbol=info.get("symbol") or symbol,
            price=price,
            change=change,
            change_pct=change_pct,
            day_high=_as_float(info.get("regularMarketDayHigh") or info.get("dayHigh")),
            day_low=_as_float(info.get("regularMarketDayLow") or info.get("dayLow")),
            day_open=_as_float(info.get("regularMarketOpen") or info.get("open")),
        )


class MassiveProvider:
    """Massive universal snapshots; needs an API key."""

    def __init__(self, api_key: str, client: Optional[RESTClient] = None):
        self._client = client or RESTClient(api_key=api_key)

    def fetch_quotes(self, symbols: List[str]) -> List[Quote]:
        if not symbols:
            return []
        try:
            raw = list(self._client.list_universal_snapshots(ticker_any_of=symbols))
        except Exception as e:
            err_str = str(e)
            if "429" in err_str or "rate" in err_str.lower():
                raise QuoteSourceError("Massive: rate limited") from e
            raise QuoteSourceError(f"Massive: {err_str[:80]}") from e

        quotes = []
        for snap in raw:
            t = getattr(snap, "ticker", None)
            if not t or getattr(snap, "error", None):
                continue
            d = self._normalize_snapshot(snap)
            if d["last"] is None:
                continue
            quotes.append(Quote(
                symbol=t,
                price=d["last"],
                change=d["change"],
                change_pct=d["change_pct"],
                day_high=d["high"],
                day_low=d["low"],
                day_open=d["open"],
            ))
        return quotes

    @staticmethod
    def _normalize_snapshot(snap: Any) -> Dict[str, Any]:
        """Convert an API snapshot object to a flat dict."""
        d: Dict[str, Any] = {}

        session = getattr(snap, "session", None)
        if session:
            d["last"] = getattr(session, "close", None) or getattr(session, "price", None)
            d["open"] = getattr(session, "open", None)
            d["high"] = getattr(session, "high", None)
            d["low"] = getattr(session, "low", None)
            d["change"] = getattr(session, "change", None)
            d["change_pct"] = getattr(session, "change_percent", None)
        else:
            d["last"] = getattr(snap, "value", None) or getattr(snap, "price", None)
            d["open"] = getattr(snap, "open", None)
            d["high"] = getattr(snap, "high", None)
            d["low"] = getattr(snap, "low", None)
            d["change"] = getattr(snap, "change", None)
            d["change_pct"] = getattr(snap, "change_percent", None)

        # Fallback: last_trade
        if d["last"] is None:
            lt = getattr(snap, "last_trade", None)
            if lt:
                d["last"] = getattr(lt, "price", None)

        # Fallback: last_quote midpoint
        if d["last"] is None:
            lq = getattr(snap, "last_quote", None)
            if lq:
                ask = getattr(lq, "ask", None)
                bid = getattr(lq, "bid", None)
                if ask and bid:
                    d["last"] = (ask + bid) / 2

        return {k: _as_float(v) for k, v in d.items()}


def make_provider(config: Config):
    """Build the quote source named in config.ini."""
    if config.provider == "massive":
        api_key = os.environ.get("MASSIVE_API_KEY")
        if not api_key:
            raise ConfigError("MASSIVE_API_KEY environment variable not set.")
        return MassiveProvider(api_key)
    return YahooProvider()
