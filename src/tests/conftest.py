from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional

import pytest

from hn_menu.datamodels import Story
from hn_menu.errors import DecodeError, NetworkError
from hn_menu.store import KeyValueStore


def build_story(story_id: int, **overrides) -> Story:
    fields = dict(
        id=story_id,
        author=f"user{story_id}",
        score=story_id * 10,
        time=1_700_000_000 + story_id,
        type="story",
        comment_count=story_id,
        title=f"Story {story_id}",
    )
    fields.update(overrides)
    return Story(**fields)


class FakeClient:
    """Stands in for HttpStoryClient; records calls and can block or fail on demand."""

    def __init__(
        self,
        ids: Optional[List[int]] = None,
        stories: Optional[Dict[int, Story]] = None,
        failing: Iterable[int] = (),
    ):
        self.ids = list(ids or [])
        self.stories = dict(stories or {})
        self.failing = set(failing)
        self.top_ids_error: Optional[Exception] = None
        self.top_ids_calls = 0
        self.story_calls = 0
        self.started = threading.Event()
        self.release = threading.Event()
        self.release.set()
        self.closed = False
        self._lock = threading.Lock()

    def fetch_top_ids(self, limit: int) -> List[int]:
        with self._lock:
            self.top_ids_calls += 1
        self.started.set()
        self.release.wait()
        if self.top_ids_error is not None:
            raise self.top_ids_error
        return self.ids[:limit]

    def fetch_story(self, story_id: int) -> Story:
        with self._lock:
            self.story_calls += 1
        if story_id in self.failing:
            raise NetworkError(f"boom {story_id}")
        if story_id not in self.stories:
            raise DecodeError(f"item {story_id}: null")
        return self.stories[story_id]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def story_factory():
    return build_story


@pytest.fixture
def store(tmp_path):
    return KeyValueStore(str(tmp_path / "state"))


@pytest.fixture
def fake_client():
    ids = [5, 3, 8, 1]
    client = FakeClient(ids=ids, stories={i: build_story(i) for i in ids})
    yield client
    # Unblock anything a test left waiting.
    client.release.set()
