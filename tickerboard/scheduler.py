import logging
import threading
from typing import Optional

from tickerboard.constants import DEFAULT_REFRESH, TICK_SECONDS
from tickerboard.errors import QuoteSourceError

logger = logging.getLogger(__name__)


class Scheduler:
    """Background thread that asks the coordinator for a refresh once it is due.

    Ticks every ``tick`` seconds; a tick that finds the coordinator busy
    waits on its lock, and ticks missed meanwhile are not replayed.
    """

    def __init__(self, coordinator, interval: float = DEFAULT_REFRESH, tick: float = TICK_SECONDS):
        self._coordinator = coordinator
        self.interval = interval
        self._tick = tick
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="tickerboard-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        """Stop ticking. An in-flight refresh is not interrupted.

        If the thread outlives ``timeout`` it is kept, so ``running`` stays
        true and ``start`` will not launch a second loop beside it.
        """
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if not self._thread.is_alive():
                self._thread = None

    def tick(self) -> bool:
        """Run one scheduling step; returns whether a refresh ran."""
        try:
            return self._coordinator.refresh_if_due(self.interval)
        except QuoteSourceError as e:
            # Already recorded on the coordinator; try again on a later tick
            logger.debug("Scheduled refresh failed: %s", e)
            return False

    def _run(self):
        # First tick is immediate so quotes appear without waiting a full tick
        while not self._stop.is_set():
            self.tick()
            if self._stop.wait(self._tick):
                break
