from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Sequence

from .config import MAX_WORKERS
from .datamodels import Story
from .errors import Cancelled, DecodeError, NetworkError
from .timeout import CancelToken

logger = logging.getLogger("hn_menu")


def fetch_ordered(
    ids: Sequence[int],
    fetch_one: Callable[[int], Story],
    token: Optional[CancelToken] = None,
    max_workers: int = MAX_WORKERS,
) -> List[Story]:
    """Fetch every id concurrently and return the successes in input order.

    Each task owns one slot of a pre-sized result list, so tasks never share
    state and completion order does not matter. Failed fetches leave their
    slot empty and are dropped from the result. Raises Cancelled if ``token``
    fires before all tasks are done.
    """
    if not ids:
        return []

    token = token or CancelToken()
    slots: List[Optional[Story]] = [None] * len(ids)

    def _fetch_into(index: int, story_id: int) -> None:
        token.raise_if_cancelled()
        try:
            story = fetch_one(story_id)
        except (NetworkError, DecodeError) as e:
            logger.debug("Dropping story %s: %s", story_id, e)
            return
        token.raise_if_cancelled()
        slots[index] = story

    executor = ThreadPoolExecutor(
        max_workers=min(max_workers, len(ids)), thread_name_prefix="hn_menu-fetch"
    )
    cancelled = False
    try:
        futures = [
            executor.submit(_fetch_into, index, story_id)
            for index, story_id in enumerate(ids)
        ]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        errors = [f.exception() for f in done if f.exception() is not None]
        cancelled = any(isinstance(e, Cancelled) for e in errors)
        if errors and not cancelled:
            raise errors[0]
    finally:
        # On cancellation, abandon in-flight requests instead of waiting on them.
        executor.shutdown(wait=not cancelled, cancel_futures=True)

    if cancelled or token.cancelled:
        logger.debug("Fan-out fetch of %d stories cancelled", len(ids))
        raise Cancelled()

    stories = [s for s in slots if s is not None]
    logger.debug("Fetched %d/%d stories", len(stories), len(ids))
    return stories
