from __future__ import annotations

import time
from typing import Optional

from bs4 import BeautifulSoup
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import ListItem, Static

from .datamodels import Story

PREVIEW_CHARS = 120


def format_age(timestamp: int, now: Optional[float] = None) -> str:
    """Render a unix timestamp as a short relative age, e.g. ``3h ago``."""
    now = time.time() if now is None else now
    seconds = max(0, int(now - timestamp))
    if seconds < 60:
        return "just now"
    for unit_seconds, suffix in ((86400, "d"), (3600, "h"), (60, "m")):
        if seconds >= unit_seconds:
            return f"{seconds // unit_seconds}{suffix} ago"
    return "just now"


def plain_text(html: Optional[str]) -> str:
    """Strip the HTML markup the API uses in self-post bodies."""
    if not html:
        return ""
    return BeautifulSoup(html, "lxml").get_text(" ", strip=True)


def story_meta(story: Story, now: Optional[float] = None) -> str:
    comments = story.comment_count or 0
    return (
        f"{story.score} points by {story.author} · {comments} comments · "
        f"{story.type} · {format_age(story.time, now)}"
    )


# --- UI Widgets ---
class StoryItem(ListItem):
    def __init__(self, story: Story):
        super().__init__()
        self.story = story

    def compose(self) -> ComposeResult:
        title = self.story.title or "(untitled)"
        with Horizontal(classes="story-container"):
            yield Static(str(self.story.score), classes="story-score")
            with Vertical(classes="story-body"):
                yield Static(title, classes="story-title")
                yield Static(story_meta(self.story), classes="story-meta")
                preview = plain_text(self.story.text)
                if preview:
                    if len(preview) > PREVIEW_CHARS:
                        preview = preview[: PREVIEW_CHARS - 1] + "…"
                    yield Static(preview, classes="story-preview")


class StatusBar(Static):
    loading_status = reactive("")
    sort_label = reactive("")
    keybinding_hint = reactive("")

    def on_mount(self) -> None:
        self.update_display()

    def set_keybindings(self, hint: str) -> None:
        """Set the keybinding hint text."""
        self.keybinding_hint = hint

    def update_display(self) -> None:
        """Update the status bar display."""
        status_items = []
        if self.loading_status:
            status_items.append(self.loading_status)

        if self.sort_label:
            status_items.append(f"Sort: {self.sort_label}")

        if self.keybinding_hint:
            status_items.append(self.keybinding_hint)

        self.update(" | ".join(status_items))

    def watch_loading_status(self, loading_status: str) -> None:
        self.update_display()

    def watch_sort_label(self, sort_label: str) -> None:
        self.update_display()

    def watch_keybinding_hint(self, keybinding_hint: str) -> None:
        self.update_display()


class EmptyMessage(Static):
    def __init__(self, message: str):
        super().__init__(Text(message, style="dim italic"))
