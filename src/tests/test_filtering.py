import threading
import time
import unittest

from conftest import build_story
from hn_menu.filtering import DebouncedFilter, filter_stories


class TestFilterStories(unittest.TestCase):
    def setUp(self):
        self.rust = build_story(1, title="Rust kernel", type="story")
        self.zig_link = build_story(2, title="Systems languages", url="https://ziglang.org/news")
        self.zig_text = build_story(3, title=None, text="Notes on Zig comptime", type="poll")
        self.job = build_story(4, title="We're hiring", type="job", url=None, text=None)
        self.stories = [self.rust, self.zig_link, self.zig_text, self.job]

    def test_match_is_case_insensitive(self):
        self.assertEqual(filter_stories(self.stories, "rUsT"), [self.rust])

    def test_query_not_present_excludes_story(self):
        self.assertNotIn(self.rust, filter_stories(self.stories, "zig"))

    def test_url_and_text_are_searched(self):
        self.assertEqual(filter_stories(self.stories, "zig"), [self.zig_link, self.zig_text])

    def test_type_is_searched(self):
        self.assertEqual(filter_stories(self.stories, "JOB"), [self.job])

    def test_missing_fields_do_not_exclude_story(self):
        # Title is None on this story but the text still matches.
        self.assertEqual(filter_stories(self.stories, "comptime"), [self.zig_text])

    def test_empty_query_keeps_input_order(self):
        shuffled = [self.job, self.rust, self.zig_text, self.zig_link]
        self.assertEqual(filter_stories(shuffled, ""), shuffled)
        self.assertEqual(filter_stories(shuffled, "   "), shuffled)

    def test_surrounding_whitespace_is_part_of_the_query(self):
        self.assertEqual(filter_stories(self.stories, " zig"), [self.zig_text])

    def test_filter_never_reorders(self):
        shuffled = [self.zig_text, self.rust, self.zig_link]
        self.assertEqual(filter_stories(shuffled, "s"), shuffled)


class TestDebouncedFilter(unittest.TestCase):
    def setUp(self):
        self.stories = [
            build_story(1, title="Rust kernel"),
            build_story(2, title="Zig release"),
            build_story(3, title="Rust async"),
        ]
        self.published = []
        self.event = threading.Event()

    def _publish(self, seq, query, result):
        self.published.append((query, [s.id for s in result]))
        self.event.set()

    def test_only_latest_query_is_published(self):
        debounced = DebouncedFilter(self._publish, delay=0.05)
        for query in ("r", "ru", "rus", "zig"):
            debounced.submit(self.stories, query)

        self.assertTrue(self.event.wait(1.0))
        time.sleep(0.15)
        self.assertEqual(self.published, [("zig", [2])])

    def test_immediate_publishes_synchronously(self):
        debounced = DebouncedFilter(self._publish, delay=10)
        debounced.submit(self.stories, "rust", immediate=True)
        self.assertEqual(self.published, [("rust", [1, 3])])

    def test_immediate_supersedes_pending_request(self):
        debounced = DebouncedFilter(self._publish, delay=0.05)
        debounced.submit(self.stories, "zig")
        debounced.submit(self.stories, "", immediate=True)
        time.sleep(0.15)
        self.assertEqual(self.published, [("", [1, 2, 3])])

    def test_cancel_drops_pending_request(self):
        debounced = DebouncedFilter(self._publish, delay=0.05)
        debounced.submit(self.stories, "zig")
        debounced.cancel()
        time.sleep(0.15)
        self.assertEqual(self.published, [])

    def test_sequence_numbers_increase(self):
        debounced = DebouncedFilter(self._publish, delay=10)
        first = debounced.submit(self.stories, "a")
        second = debounced.submit(self.stories, "b")
        self.assertGreater(second, first)
        self.assertEqual(debounced.latest, second)
        debounced.cancel()

    def test_stale_run_is_discarded(self):
        debounced = DebouncedFilter(self._publish, delay=10)
        stale = debounced.submit(self.stories, "rust")
        debounced.submit(self.stories, "zig")
        # Simulate the superseded timer firing anyway.
        debounced._run(stale, self.stories, "rust")
        self.assertEqual(self.published, [])
        debounced.cancel()


if __name__ == "__main__":
    unittest.main()
