class TickerboardError(Exception):
    """Base class for errors raised by tickerboard."""


class ConfigError(TickerboardError):
    """config.ini or the environment cannot produce a usable setup."""


class WatchlistError(TickerboardError):
    """The watchlist file is malformed or cannot be written."""


class QuoteSourceError(TickerboardError):
    """A quote fetch produced no usable data."""
