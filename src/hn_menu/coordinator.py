from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, List, Optional

from . import sorting
from .client import HttpStoryClient
from .config import (
    FETCH_TIMEOUT,
    FILTER_DEBOUNCE,
    HEADLINE_HIDDEN,
    HEADLINE_PLACEHOLDER,
    MAX_TITLE_CHARS,
    MAX_WORKERS,
    NUM_POSTS,
)
from .datamodels import FeedSnapshot, SortKey, Story
from .errors import Cancelled, DecodeError, NetworkError, TimeoutExceeded
from .fetcher import fetch_ordered
from .filtering import DebouncedFilter, filter_stories
from .store import (
    KeyValueStore,
    load_snapshot,
    save_original_order,
    save_show_headline,
    save_sort_key,
    save_stories,
)
from .timeout import CancelToken, run_with_timeout

logger = logging.getLogger("hn_menu")

Listener = Callable[["FeedCoordinator"], None]


class FetchState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"


def truncate_title(title: str, max_chars: int = MAX_TITLE_CHARS) -> str:
    if len(title) <= max_chars:
        return title
    return title[: max_chars - 1].rstrip() + "…"


class FeedCoordinator:
    """Owns the FeedSnapshot and is the only thing that mutates or persists it.

    Reloads run on whatever thread calls ``reload``; every snapshot mutation
    happens under ``self._lock`` so reloads, sort changes and filter results
    never interleave.
    """

    def __init__(
        self,
        client: HttpStoryClient,
        store: KeyValueStore,
        num_posts: int = NUM_POSTS,
        fetch_timeout: float = FETCH_TIMEOUT,
        filter_debounce: float = FILTER_DEBOUNCE,
        max_workers: int = MAX_WORKERS,
    ):
        self.client = client
        self.store = store
        self.num_posts = num_posts
        self.fetch_timeout = fetch_timeout
        self.max_workers = max_workers

        self._lock = threading.RLock()
        self._state = FetchState.IDLE
        self._listeners: List[Listener] = []
        self._filter = DebouncedFilter(self._publish_filtered, delay=filter_debounce)

        self.snapshot: FeedSnapshot = load_snapshot(store)
        self.query = ""
        self.visible_stories: List[Story] = list(self.snapshot.stories)
        self.last_refreshed: Optional[float] = None
        logger.info(
            "Loaded %d stored stories (sort: %s)",
            len(self.snapshot.stories),
            self.snapshot.sort_key.label,
        )

    # --- state ---
    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def is_fetching(self) -> bool:
        return self._state is FetchState.FETCHING

    @property
    def stories(self) -> List[Story]:
        with self._lock:
            return list(self.snapshot.stories)

    @property
    def sort_key(self) -> SortKey:
        return self.snapshot.sort_key

    @property
    def display_title(self) -> str:
        if not self.snapshot.show_headline:
            return HEADLINE_HIDDEN
        return self.snapshot.menu_title or HEADLINE_PLACEHOLDER

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Feed listener %r failed", listener)

    # --- reload ---
    def reload(self) -> bool:
        """Fetch a fresh feed unless a fetch is already running.

        Returns False when the call was ignored because of an overlapping
        fetch. Failures and timeouts leave the previous feed in place.
        """
        with self._lock:
            if self._state is FetchState.FETCHING:
                logger.debug("Reload requested while fetching; ignored")
                return False
            self._state = FetchState.FETCHING
        self._notify()

        started = time.monotonic()
        try:
            run_with_timeout(self.fetch_timeout, self.fetch_feed)
        except TimeoutExceeded:
            logger.warning("Reload timed out after %.0fs; keeping previous feed", self.fetch_timeout)
        finally:
            with self._lock:
                self._apply_sort()
                self._refilter(immediate=True)
                self._state = FetchState.IDLE
            logger.info("Reload finished in %.2fs", time.monotonic() - started)
            self._notify()
        return True

    def fetch_feed(self, token: Optional[CancelToken] = None) -> None:
        token = token or CancelToken()
        try:
            ids = self.client.fetch_top_ids(self.num_posts)
        except (NetworkError, DecodeError) as e:
            logger.warning("Could not fetch top stories: %s", e)
            return
        with self._lock:
            if token.cancelled:
                return
            self.snapshot.original_order = list(ids)
            save_original_order(self.store, ids)

        if not ids:
            logger.info("Top stories list is empty; keeping previous feed")
            return

        try:
            stories = fetch_ordered(
                ids, self.client.fetch_story, token=token, max_workers=self.max_workers
            )
        except Cancelled:
            return
        if not stories:
            logger.warning("No stories could be fetched; keeping previous feed")
            return

        with self._lock:
            if token.cancelled:
                return
            self._set_stories(sorting.sort_stories(stories, self.snapshot.sort_key, ids))
            self.last_refreshed = time.time()
        logger.info("Feed updated with %d stories", len(stories))

    # --- sorting ---
    def select_sort_key(self, key: SortKey) -> None:
        """Switch to ``key``, or reverse the current order if it is already active."""
        with self._lock:
            if key is self.snapshot.sort_key:
                reordered = sorting.reverse_stories(self.snapshot.stories, key)
            else:
                self.snapshot.sort_key = key
                save_sort_key(self.store, key)
                reordered = sorting.sort_stories(
                    self.snapshot.stories, key, self.snapshot.original_order
                )
            self._set_stories(reordered)
            self._refilter(immediate=True)
        self._notify()

    def _apply_sort(self) -> None:
        self._set_stories(
            sorting.sort_stories(
                self.snapshot.stories, self.snapshot.sort_key, self.snapshot.original_order
            )
        )

    def _set_stories(self, stories: List[Story]) -> None:
        if stories == self.snapshot.stories:
            return
        self.snapshot.stories = stories
        self._update_menu_title()
        save_stories(self.store, stories, self.snapshot.menu_title)

    def _update_menu_title(self) -> None:
        if not self.snapshot.stories:
            return
        title = self.snapshot.stories[0].title
        if title is None:
            return
        self.snapshot.menu_title = truncate_title(title) if title else HEADLINE_HIDDEN

    # --- headline ---
    def set_show_headline(self, value: bool) -> None:
        with self._lock:
            if value == self.snapshot.show_headline:
                return
            self.snapshot.show_headline = value
            self._update_menu_title()
            save_show_headline(self.store, value)
        self._notify()

    def toggle_show_headline(self) -> None:
        self.set_show_headline(not self.snapshot.show_headline)

    # --- filtering ---
    def set_filter(self, query: str, immediate: bool = False) -> None:
        """Filter the visible stories by ``query``.

        Keystroke-driven calls are debounced; only the newest query is ever
        published. ``immediate`` skips the debounce window.
        """
        immediate = immediate or self._filter.delay <= 0
        with self._lock:
            self.query = query
            self._refilter(immediate=immediate)
        if immediate:
            self._notify()

    def clear_filter(self) -> None:
        self.set_filter("", immediate=True)

    def _refilter(self, immediate: bool) -> None:
        if immediate:
            # Computed inline; the bumped sequence number voids any pending debounced run.
            self._filter.cancel()
            self.visible_stories = filter_stories(self.snapshot.stories, self.query)
        else:
            self._filter.submit(self.snapshot.stories, self.query)

    def _publish_filtered(self, seq: int, query: str, stories: List[Story]) -> None:
        with self._lock:
            if seq != self._filter.latest:
                return
            self.visible_stories = stories
        logger.debug("Filter %r matched %d stories", query, len(stories))
        self._notify()

    def close(self) -> None:
        self._filter.cancel()
        self.client.close()
