from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, TypeVar

from .errors import Cancelled, TimeoutExceeded

logger = logging.getLogger("hn_menu")

T = TypeVar("T")


class CancelToken:
    """Cooperative cancellation flag checked by operations at their suspension points."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise Cancelled()


def run_with_timeout(duration: float, operation: Callable[[CancelToken], T]) -> T:
    """Run ``operation(token)`` and give up on it after ``duration`` seconds.

    The operation runs on its own worker thread. If it returns (or raises)
    first, that outcome is passed through unchanged. If the deadline fires
    first, the token is cancelled so the operation stops at its next
    checkpoint, and TimeoutExceeded is raised right away; the abandoned
    worker is never joined and its eventual result is discarded.
    """
    token = CancelToken()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="hn_menu-envelope")
    future = executor.submit(operation, token)
    try:
        return future.result(timeout=duration)
    except FutureTimeoutError:
        token.cancel()
        future.cancel()
        logger.warning("Operation exceeded its %.1fs deadline; cancelled", duration)
        raise TimeoutExceeded(f"operation exceeded {duration}s deadline") from None
    finally:
        executor.shutdown(wait=False)
