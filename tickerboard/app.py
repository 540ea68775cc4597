import logging
import queue
import sys
import threading

from rich.console import Console
from rich.live import Live

from tickerboard.config import WatchlistStore, load_env, parse_config
from tickerboard.constants import DEFAULT_SYMBOLS, REDRAW_SECONDS
from tickerboard.coordinator import RefreshCoordinator
from tickerboard.errors import ConfigError, QuoteSourceError, WatchlistError
from tickerboard.events import AddRequested, InputHandler, Quit, Refresh, RemoveRequested
from tickerboard.provider import make_provider
from tickerboard.scheduler import Scheduler
from tickerboard.ui import build_layout, key_listener
from tickerboard.utils import setup_logging

logger = logging.getLogger(__name__)


def handle_event(coordinator: RefreshCoordinator, event) -> bool:
    """Apply one input event to the coordinator. Returns False when the app should quit."""
    if isinstance(event, Quit):
        return False
    try:
        if isinstance(event, Refresh):
            coordinator.refresh()
        elif isinstance(event, AddRequested):
            coordinator.add_symbols(event.names)
        elif isinstance(event, RemoveRequested):
            coordinator.remove_symbols(event.names)
    except QuoteSourceError as e:
        # Shown in the header through the coordinator's last error
        logger.debug("%s failed: %s", type(event).__name__, e)
    return True


def load_symbols(store: WatchlistStore):
    """Stored watchlist, or the built-in default when no file exists yet."""
    symbols = store.load()
    if symbols is None:
        print(f"[notice] {store.path} not found, using defaults")
        return list(DEFAULT_SYMBOLS)
    return symbols


def main():
    load_env()

    try:
        config = parse_config()
        setup_logging(config.log_level, config.log_file)
        store = WatchlistStore(config.watchlist_path)
        symbols = load_symbols(store)
        provider = make_provider(config)
    except (ConfigError, WatchlistError, OSError) as e:
        print(f"[error] {e}")
        sys.exit(1)

    print(f"[tickerboard] Refresh: {config.refresh_interval}s via {config.provider}")
    print(f"[tickerboard] Watching {len(symbols)} symbols")
    logger.info("Starting with %d symbols, provider=%s, refresh=%ss",
                len(symbols), config.provider, config.refresh_interval)

    redraw = threading.Event()
    coordinator = RefreshCoordinator(provider, store, symbols, on_change=redraw.set)
    scheduler = Scheduler(coordinator, interval=config.refresh_interval)
    handler = InputHandler()
    events: "queue.Queue" = queue.Queue()
    stop = threading.Event()

    listener = threading.Thread(target=key_listener, args=(handler, events, stop), daemon=True)
    listener.start()
    scheduler.start()

    console = Console()
    try:
        with Live(console=console, screen=True, refresh_per_second=4,
                  get_renderable=lambda: build_layout(coordinator.view(), handler)) as live:
            running = True
            while running:
                try:
                    event = events.get(timeout=REDRAW_SECONDS)
                except queue.Empty:
                    event = None
                if event is not None:
                    running = handle_event(coordinator, event)
                if redraw.is_set() or event is not None:
                    redraw.clear()
                    live.refresh()
    except KeyboardInterrupt:
        pass
    finally:
        stop.set()
        scheduler.stop(timeout=1.0)
        # Let the listener restore terminal settings
        listener.join(timeout=1.0)
        logger.info("Exiting")
        print("[tickerboard] Goodbye.")
