import threading
from typing import Dict, List, Optional

import pytest

from tickerboard.config import WatchlistStore
from tickerboard.coordinator import RefreshCoordinator
from tickerboard.errors import QuoteSourceError, WatchlistError
from tickerboard.state import Quote


def make_quote(symbol: str, change: float = 0.0, price: float = 100.0) -> Quote:
    return Quote(
        symbol=symbol,
        price=price,
        change=change,
        change_pct=(change / (price - change)) * 100 if price != change else 0.0,
        day_high=price + 1,
        day_low=price - 1,
        day_open=price - change,
    )


class StubProvider:
    """Returns a quote for every requested symbol, in reverse order."""

    def __init__(self, quotes: Optional[Dict[str, Quote]] = None):
        self.quotes = dict(quotes or {})
        self.fail = False
        self.calls: List[List[str]] = []
        self.active = 0
        self.max_active = 0
        self.gate: Optional[threading.Event] = None
        self.entered = threading.Event()
        self._count_lock = threading.Lock()

    def fetch_quotes(self, symbols):
        with self._count_lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            self.calls.append(list(symbols))
            self.entered.set()
            if self.gate is not None:
                self.gate.wait(5)
            if self.fail:
                raise QuoteSourceError("Yahoo: connection refused")
            return [self.quotes.get(s) or make_quote(s) for s in reversed(symbols)]
        finally:
            with self._count_lock:
                self.active -= 1


class FailingStore(WatchlistStore):
    def __init__(self):
        super().__init__("/nonexistent/watchlist.txt")
        self.attempts = 0

    def save(self, symbols):
        self.attempts += 1
        raise WatchlistError("Cannot save /nonexistent/watchlist.txt: Permission denied")


@pytest.fixture
def provider():
    return StubProvider()


@pytest.fixture
def store(tmp_path):
    return WatchlistStore(str(tmp_path / "watchlist.txt"))


@pytest.fixture
def coordinator(provider, store):
    return RefreshCoordinator(provider, store, ["ORCL", "AAPL", "IBM"], clock=lambda: 1000.0)
