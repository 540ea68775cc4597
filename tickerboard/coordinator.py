import logging
import threading
import time
from typing import Callable, Iterable, List, Optional

from tickerboard.config import WatchlistStore
from tickerboard.errors import QuoteSourceError, WatchlistError
from tickerboard.state import DashboardView, Snapshot, is_valid_symbol, normalize_symbol

logger = logging.getLogger(__name__)


class RefreshCoordinator:
    """Owns the watchlist and the latest quote snapshot.

    ``refresh``, ``add_symbols`` and ``remove_symbols`` are mutually
    exclusive: each holds the lock for its whole duration, network fetch
    included. The refresh that follows an edit runs inside the same
    critical section, so the snapshot it produces always matches the
    edited watchlist.

    Fetch failures raise QuoteSourceError and leave the snapshot alone.
    Save failures are recorded as a warning; the in-memory watchlist
    stays authoritative.
    """

    def __init__(self, provider, store: WatchlistStore, symbols: Iterable[str],
                 on_change: Optional[Callable[[], None]] = None,
                 clock: Callable[[], float] = time.time,
                 monotonic: Callable[[], float] = time.monotonic):
        self._provider = provider
        self._store = store
        self._on_change = on_change
        self._clock = clock
        self._monotonic = monotonic

        self._lock = threading.RLock()
        self._symbols: List[str] = []
        self._merge(symbols)
        self._snapshot = Snapshot()
        self._last_success_start: Optional[float] = None
        self._last_error = ""
        self._last_warning = ""
        self._refreshing = False
        self._view = DashboardView()
        self._publish()

    # -- Read access -----------------------------------------------------

    @property
    def symbols(self) -> List[str]:
        with self._lock:
            return list(self._symbols)

    @property
    def snapshot(self) -> Snapshot:
        with self._lock:
            return self._snapshot

    def view(self) -> DashboardView:
        """Latest published state, for rendering.

        Never waits on the lock, so drawing continues during a slow fetch.
        The view is rebuilt inside the critical section at consistent
        points only.
        """
        return self._view

    def _publish(self):
        self._view = DashboardView(
            symbols=tuple(self._symbols),
            snapshot=self._snapshot,
            last_error=self._last_error,
            last_warning=self._last_warning,
            refreshing=self._refreshing,
        )

    # -- Refresh ---------------------------------------------------------

    def refresh(self):
        """Fetch quotes for the watchlist and swap in a new snapshot.

        Raises QuoteSourceError on failure; the previous snapshot and its
        timestamp are kept.
        """
        with self._lock:
            self._refresh_locked()

    def refresh_if_due(self, interval: float) -> bool:
        """Refresh only if ``interval`` seconds passed since the last successful refresh began."""
        with self._lock:
            last = self._last_success_start
            if last is not None and self._monotonic() - last < interval:
                return False
            self._refresh_locked()
            return True

    def _refresh_locked(self):
        symbols = list(self._symbols)
        started = self._monotonic()
        self._refreshing = True
        self._notify()
        try:
            quotes = self._provider.fetch_quotes(symbols) if symbols else []
        except QuoteSourceError as e:
            self._last_error = str(e)
            logger.warning("Refresh failed: %s", e)
            raise
        except Exception as e:
            # Anything else escaping a provider is still just a failed fetch
            self._last_error = str(e)[:80] or type(e).__name__
            logger.exception("Refresh failed")
            raise QuoteSourceError(self._last_error) from e
        finally:
            self._refreshing = False
            self._notify()

        by_symbol = {}
        for q in quotes:
            by_symbol.setdefault(q.symbol, q)
        ordered = tuple(by_symbol[s] for s in symbols if s in by_symbol)
        self._snapshot = Snapshot(ordered, self._clock())
        self._last_success_start = started
        self._last_error = ""
        missing = [s for s in symbols if s not in by_symbol]
        if missing:
            logger.info("No quote returned for %s", ", ".join(missing))
        logger.debug("Refreshed %d/%d symbols", len(ordered), len(symbols))
        self._notify()

    # -- Watchlist edits -------------------------------------------------

    def add_symbols(self, names: Iterable[str]) -> List[str]:
        """Append names not already on the watchlist, save, then refresh.

        Returns the symbols actually added. Raises QuoteSourceError if the
        follow-up refresh fails; the additions stand regardless.
        """
        with self._lock:
            added = self._merge(names)
            if added:
                logger.info("Added %s", ", ".join(added))
            self._save_locked()
            self._refresh_locked()
            return added

    def remove_symbols(self, names: Iterable[str]) -> List[str]:
        """Drop names from the watchlist and snapshot, save, then refresh.

        Names not on the watchlist are ignored. Returns the symbols
        actually removed.
        """
        with self._lock:
            removed = []
            for name in names:
                symbol = normalize_symbol(name)
                if not is_valid_symbol(symbol):
                    continue
                if symbol in self._symbols:
                    self._symbols.remove(symbol)
                    self._snapshot = self._snapshot.without(symbol)
                    removed.append(symbol)
            if removed:
                logger.info("Removed %s", ", ".join(removed))
                self._save_locked()
            self._refresh_locked()
            return removed

    def _merge(self, names: Iterable[str]) -> List[str]:
        added = []
        for name in names:
            symbol = normalize_symbol(name)
            if not symbol:
                continue
            if not is_valid_symbol(symbol):
                logger.warning("Ignoring invalid symbol %r", name)
                continue
            if symbol not in self._symbols:
                self._symbols.append(symbol)
                added.append(symbol)
        return added

    def _save_locked(self):
        try:
            self._store.save(self._symbols)
        except WatchlistError as e:
            self._last_warning = str(e)
            logger.error("Watchlist not saved: %s", e)
        else:
            self._last_warning = ""

    def _notify(self):
        self._publish()
        if self._on_change is not None:
            self._on_change()
