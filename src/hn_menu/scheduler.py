from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .config import RELOAD_INTERVAL

logger = logging.getLogger("hn_menu")


class PeriodicReloader:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread."""

    def __init__(
        self,
        callback: Callable[[], object],
        interval: float = RELOAD_INTERVAL,
        run_immediately: bool = True,
    ):
        self.callback = callback
        self.interval = interval
        self.run_immediately = run_immediately
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="hn_menu-reloader", daemon=True
        )
        self._thread.start()
        logger.info("Periodic reload every %.0fs started", self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._thread = None

    def _tick(self) -> None:
        try:
            self.callback()
        except Exception:
            logger.exception("Periodic reload failed")

    def _loop(self) -> None:
        if self.run_immediately:
            self._tick()
        while not self._stop.wait(self.interval):
            self._tick()
