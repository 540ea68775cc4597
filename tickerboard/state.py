import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from tickerboard.formatting import fmt_cash_or_dash, fmt_pct_or_dash

# Characters seen in exchange tickers: BRK.B, ^GSPC, EURUSD=X, I:SPX, BTC-USD
SYMBOL_RE = re.compile(r"^[A-Z0-9.^=:/-]+$")


def normalize_symbol(name: str) -> str:
    return name.strip().upper()


def is_valid_symbol(symbol: str) -> bool:
    """True for a normalized symbol the watchlist file can store and read back."""
    return bool(SYMBOL_RE.match(symbol))


@dataclass(frozen=True)
class Quote:
    """Market data for one symbol at fetch time.

    Display strings are derived from the numeric fields once, when the
    quote is built, so rendering never re-formats.
    """
    symbol: str
    price: Optional[float] = None
    change: Optional[float] = None
    change_pct: Optional[float] = None
    day_high: Optional[float] = None
    day_low: Optional[float] = None
    day_open: Optional[float] = None

    price_str: str = field(init=False)
    change_str: str = field(init=False)
    change_pct_str: str = field(init=False)
    day_high_str: str = field(init=False)
    day_low_str: str = field(init=False)
    day_open_str: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "symbol", normalize_symbol(self.symbol))
        object.__setattr__(self, "price_str", fmt_cash_or_dash(self.price))
        object.__setattr__(self, "change_str", fmt_cash_or_dash(self.change))
        object.__setattr__(self, "change_pct_str", fmt_pct_or_dash(self.change_pct))
        object.__setattr__(self, "day_high_str", fmt_cash_or_dash(self.day_high))
        object.__setattr__(self, "day_low_str", fmt_cash_or_dash(self.day_low))
        object.__setattr__(self, "day_open_str", fmt_cash_or_dash(self.day_open))


@dataclass(frozen=True)
class Snapshot:
    """Quotes from the most recent successful refresh, in watchlist order."""
    quotes: Tuple[Quote, ...] = ()
    updated_at: Optional[float] = None

    def symbols(self) -> Tuple[str, ...]:
        return tuple(q.symbol for q in self.quotes)

    def without(self, symbol: str) -> "Snapshot":
        symbol = normalize_symbol(symbol)
        return Snapshot(tuple(q for q in self.quotes if q.symbol != symbol), self.updated_at)


@dataclass(frozen=True)
class DashboardView:
    """Consistent copy of coordinator state handed to the renderer."""
    symbols: Tuple[str, ...] = ()
    snapshot: Snapshot = field(default_factory=Snapshot)
    last_error: str = ""
    last_warning: str = ""
    refreshing: bool = False
