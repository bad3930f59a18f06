from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Sequence

from .config import FILTER_DEBOUNCE
from .datamodels import Story

logger = logging.getLogger("hn_menu")


def story_matches(story: Story, needle: str) -> bool:
    """``needle`` must already be casefolded."""
    for value in (story.type, story.title, story.url, story.text):
        if value and needle in value.casefold():
            return True
    return False


def filter_stories(stories: Sequence[Story], query: str) -> List[Story]:
    """Case-insensitive substring filter over type, title, url and text.

    A blank query keeps every story. Matching stories keep their input order.
    """
    if not query.strip():
        return list(stories)
    needle = query.casefold()
    return [s for s in stories if story_matches(s, needle)]


class DebouncedFilter:
    """Runs filter requests after a quiet period and only publishes the newest.

    Each ``submit`` takes a new sequence number and replaces the pending
    timer. A run that finds its number is no longer the latest returns without
    publishing, so a superseded query can never overwrite a newer result even
    if its timer had already fired. ``publish`` gets the sequence number too,
    so a receiver can compare it with ``latest`` under its own lock.
    """

    def __init__(
        self,
        publish: Callable[[int, str, List[Story]], None],
        delay: float = FILTER_DEBOUNCE,
    ):
        self.publish = publish
        self.delay = delay
        self._lock = threading.Lock()
        self._seq = 0
        self._timer: Optional[threading.Timer] = None

    @property
    def latest(self) -> int:
        return self._seq

    def submit(self, stories: Sequence[Story], query: str, immediate: bool = False) -> int:
        snapshot = list(stories)
        with self._lock:
            self._seq += 1
            seq = self._seq
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if not immediate and self.delay > 0:
                self._timer = threading.Timer(self.delay, self._run, args=(seq, snapshot, query))
                self._timer.daemon = True
                self._timer.start()
                return seq
        self._run(seq, snapshot, query)
        return seq

    def cancel(self) -> None:
        """Drop the pending request and invalidate any run already in progress."""
        with self._lock:
            self._seq += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _is_current(self, seq: int) -> bool:
        with self._lock:
            return seq == self._seq

    def _run(self, seq: int, stories: List[Story], query: str) -> None:
        if not self._is_current(seq):
            return
        result = filter_stories(stories, query)
        if not self._is_current(seq):
            logger.debug("Discarding superseded filter result for %r", query)
            return
        self.publish(seq, query, result)
