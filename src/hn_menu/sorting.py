from __future__ import annotations

import math
from typing import Dict, List, Sequence

from .datamodels import SortKey, Story


def sort_stories(
    stories: Sequence[Story], key: SortKey, original_order: Sequence[int]
) -> List[Story]:
    """Return a new list of stories ordered by ``key``.

    All orderings are stable. For ORIGINAL, stories are ranked by their
    position in ``original_order``; ids missing from it go last in their
    current relative order.
    """
    if key is SortKey.ORIGINAL:
        rank: Dict[int, int] = {}
        for position, story_id in enumerate(original_order):
            rank.setdefault(story_id, position)
        return sorted(stories, key=lambda s: rank.get(s.id, math.inf))
    if key is SortKey.TIME:
        return sorted(stories, key=lambda s: s.time, reverse=True)
    if key is SortKey.SCORE:
        return sorted(stories, key=lambda s: s.score, reverse=True)
    if key is SortKey.COMMENTS:
        return sorted(stories, key=lambda s: s.comment_count or 0, reverse=True)
    if key is SortKey.TYPE:
        return sorted(stories, key=lambda s: s.type)
    raise ValueError(f"Unknown sort key: {key!r}")


def reverse_stories(stories: Sequence[Story], key: SortKey) -> List[Story]:
    """Flip the current order, except under ORIGINAL where the order is canonical."""
    if key is SortKey.ORIGINAL:
        return list(stories)
    return list(reversed(stories))


def apply(
    stories: Sequence[Story],
    key: SortKey,
    original_order: Sequence[int],
    reverse: bool = False,
) -> List[Story]:
    if reverse:
        return reverse_stories(stories, key)
    return sort_stories(stories, key, original_order)
