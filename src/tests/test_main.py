from __future__ import annotations

from unittest.mock import patch

from conftest import FakeClient, build_story
from hn_menu import main as main_module
from hn_menu.coordinator import FeedCoordinator
from hn_menu.datamodels import SortKey
from hn_menu.store import POSTS_KEY, SORT_KEY_KEY


def _coordinator(store, ids=(2, 1)):
    client = FakeClient(ids=list(ids), stories={i: build_story(i) for i in ids})
    return FeedCoordinator(client, store, filter_debounce=0)


def test_run_once_prints_feed(store, capsys):
    assert main_module.run_once(_coordinator(store)) == 0
    out = capsys.readouterr().out
    assert out.index("Story 2") < out.index("Story 1")
    assert "https://news.ycombinator.com/item?id=2" in out


def test_run_once_applies_sort(store, capsys):
    coordinator = _coordinator(store, ids=(1, 2))
    main_module.run_once(coordinator, SortKey.SCORE)
    out = capsys.readouterr().out
    assert out.index("Story 2") < out.index("Story 1")


def test_run_once_sort_is_not_persisted(store, capsys):
    coordinator = _coordinator(store, ids=(1, 2))
    main_module.run_once(coordinator, SortKey.SCORE)
    assert coordinator.sort_key is SortKey.ORIGINAL
    assert [s.id for s in coordinator.stories] == [1, 2]
    assert store.get(SORT_KEY_KEY) is None
    assert [p["id"] for p in store.get(POSTS_KEY)] == [1, 2]


def test_run_once_without_stories_fails(store, capsys):
    assert main_module.run_once(_coordinator(store, ids=())) == 1
    assert "No stories" in capsys.readouterr().err


def test_main_once_uses_cli_overrides(store, tmp_path):
    captured = {}

    def fake_build(settings):
        captured["settings"] = settings
        return _coordinator(store)

    with patch.object(main_module, "build_coordinator", side_effect=fake_build), patch.object(
        main_module, "load_config", return_value={"num_posts": 50}
    ):
        assert main_module.main(["--once", "--limit", "3", "--sort", "time"]) == 0

    assert captured["settings"].num_posts == 3
