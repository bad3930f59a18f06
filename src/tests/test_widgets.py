from __future__ import annotations

import pytest

from conftest import build_story
from hn_menu.widgets import format_age, plain_text, story_meta

NOW = 1_700_100_000


@pytest.mark.parametrize(
    "age, expected",
    [
        (0, "just now"),
        (59, "just now"),
        (60, "1m ago"),
        (3599, "59m ago"),
        (3600, "1h ago"),
        (86399, "23h ago"),
        (2 * 86400, "2d ago"),
        (-30, "just now"),
    ],
)
def test_format_age(age, expected):
    assert format_age(NOW - age, now=NOW) == expected


def test_plain_text_strips_markup():
    html = "Is it just me?<p>Ask HN: what&#x27;s <i>your</i> setup?"
    assert plain_text(html) == "Is it just me? Ask HN: what's your setup?"


def test_plain_text_empty():
    assert plain_text(None) == ""
    assert plain_text("") == ""


def test_story_meta():
    story = build_story(3, score=120, author="pg", comment_count=None, type="job", time=NOW - 7200)
    assert story_meta(story, now=NOW) == "120 points by pg · 0 comments · job · 2h ago"
