from __future__ import annotations

import logging
from typing import Any, List

import requests
from requests.adapters import HTTPAdapter

from .config import HTTP_TIMEOUT, ITEM_URL, MAX_WORKERS, REQUEST_HEADERS, TOP_STORIES_URL
from .datamodels import Story
from .errors import DecodeError, NetworkError

logger = logging.getLogger("hn_menu")


class HttpStoryClient:
    """Talks to the Hacker News Firebase API.

    Every call issues exactly one request. Failures surface as NetworkError or
    DecodeError; retry policy belongs to the caller.
    """

    def __init__(self, timeout: float = HTTP_TIMEOUT, pool_size: int = MAX_WORKERS):
        self.timeout = timeout
        self.session = self._create_session(pool_size)

    def _create_session(self, pool_size: int) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        # One pooled connection per fan-out worker, and no automatic retries.
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_size, max_retries=0)
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        return s

    def _get_json(self, url: str) -> Any:
        try:
            logger.debug("Fetching %s", url)
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"GET {url} failed: {e}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise DecodeError(f"GET {url} returned invalid JSON: {e}") from e

    def fetch_top_ids(self, limit: int) -> List[int]:
        data = self._get_json(TOP_STORIES_URL)
        if not isinstance(data, list):
            raise DecodeError(f"expected a list of story ids, got {type(data).__name__}")
        if not all(isinstance(i, int) and not isinstance(i, bool) for i in data):
            raise DecodeError("story id list contains non-integer entries")
        ids = data[:limit]
        logger.debug("Fetched %d top story ids (of %d)", len(ids), len(data))
        return ids

    def fetch_story(self, story_id: int) -> Story:
        data = self._get_json(ITEM_URL.format(id=story_id))
        if not isinstance(data, dict):
            # The API answers ``null`` for deleted or unknown items.
            raise DecodeError(f"item {story_id}: expected an object, got {type(data).__name__}")
        try:
            return Story.from_api(data)
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise DecodeError(f"item {story_id}: {e!r}") from e

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpStoryClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
