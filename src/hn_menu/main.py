#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .app import HackerMenuApp
from .client import HttpStoryClient
from .config import STATE_DIR, Settings, load_config, setup_logging
from .coordinator import FeedCoordinator
from .datamodels import SortKey
from .sorting import sort_stories
from .store import KeyValueStore

logger = logging.getLogger("hn_menu")


def build_coordinator(settings: Settings, state_dir: str = STATE_DIR) -> FeedCoordinator:
    client = HttpStoryClient(pool_size=settings.max_workers)
    store = KeyValueStore(state_dir)
    return FeedCoordinator(
        client,
        store,
        num_posts=settings.num_posts,
        fetch_timeout=settings.fetch_timeout,
        filter_debounce=settings.filter_debounce,
        max_workers=settings.max_workers,
    )


def run_once(coordinator: FeedCoordinator, sort: Optional[SortKey] = None) -> int:
    """Reload once and print the feed, for use without a terminal UI."""
    coordinator.reload()
    stories = coordinator.stories
    if sort is not None and sort is not coordinator.sort_key:
        # Sorted for this printout only; the stored sort key stays as it is.
        stories = sort_stories(stories, sort, coordinator.snapshot.original_order)
    if not stories:
        print("No stories available.", file=sys.stderr)
        return 1
    for s in stories:
        print(f"[{s.score:4d}] {s.title or '(untitled)'}")
        print(f"       {s.link}")
    return 0


# --- Entrypoint ---
def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Hacker News top stories in the terminal")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--theme", type=str, help="Textual theme for this run")
    parser.add_argument("--limit", type=int, help="Number of top stories to fetch")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Fetch the feed once, print it and exit",
    )
    parser.add_argument(
        "--sort",
        choices=[key.name.lower() for key in SortKey],
        help="Sort key to apply with --once",
    )
    args = parser.parse_args(argv)

    debug_path = setup_logging(args.debug)
    if debug_path:
        print(f"Debug logging enabled: {debug_path}", file=sys.stderr)

    settings = Settings.from_config(load_config())
    if args.limit is not None:
        if args.limit <= 0:
            parser.error("--limit must be positive")
        settings = replace(settings, num_posts=args.limit)
    if args.theme:
        settings = replace(settings, theme=args.theme)

    coordinator = build_coordinator(settings)

    if args.once:
        sort = SortKey.from_name(args.sort) if args.sort else None
        try:
            return run_once(coordinator, sort)
        finally:
            coordinator.close()

    logger.info("Using theme: %s", settings.theme)
    try:
        app = HackerMenuApp(
            coordinator,
            reload_interval=settings.reload_interval,
            theme=settings.theme,
        )
        app.run()
    except Exception as e:
        logger.exception("Application crashed: %s", e)
        print(f"Application crashed: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
