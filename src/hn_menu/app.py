from __future__ import annotations

import logging
import webbrowser
from datetime import datetime
from typing import Any, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Header, Input, ListItem, ListView

from .config import DEFAULT_THEME, RELOAD_INTERVAL
from .coordinator import FeedCoordinator
from .datamodels import SortKey, Story
from .messages import FeedChanged
from .scheduler import PeriodicReloader
from .widgets import EmptyMessage, StatusBar, StoryItem

logger = logging.getLogger("hn_menu")

KEYBINDING_HINT = "[b]r[/] reload  [b]1-5[/] sort  [b]/[/] filter  [b]h[/] headline  [b]q[/] quit"


class HackerMenuApp(App):
    TITLE = "Reading HN…"
    SUB_TITLE = "Hacker News top stories"

    CSS_PATH = "app.css"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "reload", "Reload"),
        Binding("h", "toggle_headline", "Headline"),
        Binding("/", "focus_filter", "Filter"),
        Binding("escape", "end_filter", "End filter", show=False),
        Binding("c", "open_comments", "Comments"),
    ] + [
        Binding(key.shortcut, f"sort({key.value})", key.label, show=False)
        for key in SortKey
    ]

    def __init__(
        self,
        coordinator: FeedCoordinator,
        reload_interval: float = RELOAD_INTERVAL,
        theme: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.coordinator = coordinator
        self._theme_name = theme or DEFAULT_THEME
        self.reloader = PeriodicReloader(self.coordinator.reload, interval=reload_interval)

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="main"):
            yield Input(placeholder="Filter stories...", id="story-filter")
            yield ListView(id="stories-list")
        yield StatusBar()

    def on_mount(self) -> None:
        try:
            self.theme = self._theme_name
        except Exception as e:
            logger.warning("Unknown theme %r, keeping default: %s", self._theme_name, e)

        self.query_one("#story-filter", Input).display = False
        self.query_one(StatusBar).set_keybindings(KEYBINDING_HINT)

        # Listeners fire on worker threads; post_message hands over to the UI loop.
        self.coordinator.add_listener(lambda _: self.post_message(FeedChanged()))
        self._refresh_view()
        self.reloader.start()
        self.query_one("#stories-list", ListView).focus()

    def on_unmount(self) -> None:
        self.reloader.stop(timeout=1.0)
        self.coordinator.close()

    def on_feed_changed(self, message: FeedChanged) -> None:
        self._refresh_view()

    def _refresh_view(self) -> None:
        coordinator = self.coordinator
        self.title = coordinator.display_title

        status = self.query_one(StatusBar)
        status.sort_label = coordinator.sort_key.label
        if coordinator.is_fetching:
            status.loading_status = "Reloading..."
        elif coordinator.last_refreshed:
            updated = datetime.fromtimestamp(coordinator.last_refreshed).strftime("%H:%M")
            status.loading_status = f"Updated {updated}"
        else:
            status.loading_status = ""

        stories_list = self.query_one("#stories-list", ListView)
        index = stories_list.index
        stories_list.clear()
        stories = coordinator.visible_stories
        if not stories:
            message = "No matching stories." if coordinator.query else "Waiting for stories..."
            stories_list.append(ListItem(EmptyMessage(message)))
            return
        for story in stories:
            stories_list.append(StoryItem(story))
        if index is not None:
            stories_list.index = min(index, len(stories) - 1)

    def _highlighted_story(self) -> Optional[Story]:
        item = self.query_one("#stories-list", ListView).highlighted_child
        if isinstance(item, StoryItem):
            return item.story
        return None

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, StoryItem):
            webbrowser.open(event.item.story.link)

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "story-filter":
            self.coordinator.set_filter(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "story-filter":
            self.query_one("#stories-list", ListView).focus()

    def action_reload(self) -> None:
        if self.coordinator.is_fetching:
            return
        self.run_worker(self.coordinator.reload, name="feed_reloader", thread=True)

    def action_sort(self, value: int) -> None:
        self.coordinator.select_sort_key(SortKey(value))

    def action_toggle_headline(self) -> None:
        self.coordinator.toggle_show_headline()

    def action_focus_filter(self) -> None:
        """Show and focus the filter input."""
        filter_input = self.query_one("#story-filter", Input)
        filter_input.display = True
        filter_input.focus()

    def action_end_filter(self) -> None:
        """Clear the filter and hide its input."""
        filter_input = self.query_one("#story-filter", Input)
        with filter_input.prevent(Input.Changed):
            filter_input.value = ""
        filter_input.display = False
        self.coordinator.clear_filter()
        self.query_one("#stories-list", ListView).focus()

    def action_open_comments(self) -> None:
        story = self._highlighted_story()
        if story is not None:
            webbrowser.open(story.hn_url)
