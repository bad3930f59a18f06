from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import HN_ITEM_PAGE_URL


# --- Data models ---
@dataclass(frozen=True)
class Story:
    id: int
    author: str
    score: int
    time: int
    type: str
    comment_count: Optional[int] = None
    title: Optional[str] = None
    text: Optional[str] = None
    url: Optional[str] = None
    kids: Optional[List[int]] = None

    @property
    def hn_url(self) -> str:
        return HN_ITEM_PAGE_URL.format(id=self.id)

    @property
    def link(self) -> str:
        return self.url or self.hn_url

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Story":
        """Build a Story from an item payload of the Hacker News API.

        Raises KeyError, TypeError, ValueError or OverflowError when a field is
        missing or has the wrong type; callers turn those into DecodeError.
        """
        kids = data.get("kids")
        return cls(
            id=int(data["id"]),
            author=_str(data, "by"),
            score=int(data["score"]),
            time=int(data["time"]),
            type=_str(data, "type"),
            comment_count=_optional_int(data.get("descendants")),
            title=_optional_str(data, "title"),
            text=_optional_str(data, "text"),
            url=_optional_str(data, "url"),
            kids=[int(k) for k in kids] if kids is not None else None,
        )

    # Persisted stories use the API field names.
    from_dict = from_api

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "by": self.author,
            "score": self.score,
            "time": self.time,
            "type": self.type,
        }
        for key, value in (
            ("descendants", self.comment_count),
            ("kids", self.kids),
            ("title", self.title),
            ("text", self.text),
            ("url", self.url),
        ):
            if value is not None:
                data[key] = value
        return data


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _str(data: Dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key!r} must be a string, got {type(value).__name__}")
    return value


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    if data.get(key) is None:
        return None
    return _str(data, key)


class SortKey(Enum):
    ORIGINAL = 1
    TIME = 2
    SCORE = 3
    COMMENTS = 4
    TYPE = 5

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def shortcut(self) -> str:
        return str(self.value)

    @classmethod
    def from_name(cls, name: str) -> "SortKey":
        return cls[name.upper()]


@dataclass
class FeedSnapshot:
    stories: List[Story] = field(default_factory=list)
    original_order: List[int] = field(default_factory=list)
    sort_key: SortKey = SortKey.ORIGINAL
    show_headline: bool = True
    menu_title: Optional[str] = None
