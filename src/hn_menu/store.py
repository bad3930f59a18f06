from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Any, List, Optional

from .datamodels import FeedSnapshot, SortKey, Story

logger = logging.getLogger("hn_menu")

POSTS_KEY = "Posts"
ORIGINAL_POST_IDS_KEY = "OriginalPostIDs"
TITLE_KEY = "Title"
SORT_KEY_KEY = "SortKey"
SHOW_HEADLINE_KEY = "ShowHeadline"


class KeyValueStore:
    """Stores one JSON document per key under ``state_dir``.

    Every ``set`` overwrites the whole value through a temporary file and an
    atomic rename, so a reader never sees a half-written document.
    """

    def __init__(self, state_dir: str):
        self.state_dir = state_dir
        os.makedirs(self.state_dir, exist_ok=True)

    def _get_path(self, key: str) -> str:
        return os.path.join(self.state_dir, f"{key}.json")

    def get(self, key: str, default: Any = None) -> Any:
        path = self._get_path(key)
        if not os.path.exists(path):
            return default

        try:
            with open(path, "r", encoding="utf-8") as f:
                value = json.load(f)
            logger.debug("Loaded %s from %s", key, path)
            return value
        except (IOError, json.JSONDecodeError) as e:
            logger.warning("Failed to read state file %s: %s", path, e)
            return default

    def set(self, key: str, value: Any) -> None:
        path = self._get_path(key)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.state_dir, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f, ensure_ascii=False)
                os.replace(tmp_path, path)
            except Exception:
                os.unlink(tmp_path)
                raise
            logger.debug("Stored %s", key)
        except (IOError, OSError, TypeError, ValueError) as e:
            logger.warning("Failed to write state file %s: %s", path, e)


def _load_stories(raw: Any) -> List[Story]:
    if not isinstance(raw, list):
        return []
    stories = []
    for item in raw:
        try:
            stories.append(Story.from_dict(item))
        except (AttributeError, KeyError, TypeError, ValueError, OverflowError) as e:
            logger.warning("Dropping unreadable stored story %r: %s", item, e)
    return stories


def _load_ids(raw: Any) -> List[int]:
    if not isinstance(raw, list):
        return []
    try:
        return [int(i) for i in raw]
    except (TypeError, ValueError):
        logger.warning("Ignoring unreadable stored story ids")
        return []


def _load_sort_key(raw: Any) -> SortKey:
    try:
        return SortKey(raw)
    except (TypeError, ValueError):
        return SortKey.ORIGINAL


def load_snapshot(store: KeyValueStore) -> FeedSnapshot:
    """Seed a FeedSnapshot from the store, using defaults for anything absent."""
    title = store.get(TITLE_KEY)
    show_headline = store.get(SHOW_HEADLINE_KEY, True)
    return FeedSnapshot(
        stories=_load_stories(store.get(POSTS_KEY)),
        original_order=_load_ids(store.get(ORIGINAL_POST_IDS_KEY)),
        sort_key=_load_sort_key(store.get(SORT_KEY_KEY)),
        show_headline=show_headline if isinstance(show_headline, bool) else True,
        menu_title=title if isinstance(title, str) else None,
    )


def save_stories(store: KeyValueStore, stories: List[Story], title: Optional[str]) -> None:
    store.set(POSTS_KEY, [s.to_dict() for s in stories])
    store.set(TITLE_KEY, title)


def save_original_order(store: KeyValueStore, ids: List[int]) -> None:
    store.set(ORIGINAL_POST_IDS_KEY, list(ids))


def save_sort_key(store: KeyValueStore, key: SortKey) -> None:
    store.set(SORT_KEY_KEY, key.value)


def save_show_headline(store: KeyValueStore, value: bool) -> None:
    store.set(SHOW_HEADLINE_KEY, value)
