from __future__ import annotations

import threading
import time

import pytest

from hn_menu.errors import Cancelled, TimeoutExceeded
from hn_menu.timeout import CancelToken, run_with_timeout


def test_fast_operation_returns_its_result():
    assert run_with_timeout(1.0, lambda token: 42) == 42


def test_fast_operation_token_is_never_cancelled():
    seen = []

    def op(token):
        seen.append(token)
        return "done"

    run_with_timeout(0.2, op)
    time.sleep(0.3)
    assert not seen[0].cancelled


def test_operation_errors_propagate():
    def op(token):
        raise ValueError("bad")

    with pytest.raises(ValueError):
        run_with_timeout(1.0, op)


def test_slow_operation_is_cancelled_and_abandoned():
    finished = threading.Event()
    tokens = []

    def op(token):
        tokens.append(token)
        # Polls like a fetch loop checking between requests.
        for _ in range(500):
            if token.cancelled:
                finished.set()
                return "stale"
            time.sleep(0.01)
        return "too late"

    start = time.monotonic()
    with pytest.raises(TimeoutExceeded):
        run_with_timeout(0.1, op)
    elapsed = time.monotonic() - start

    assert elapsed < 0.5
    assert tokens[0].cancelled
    assert finished.wait(1.0)


def test_timeout_does_not_wait_for_blocked_operation():
    release = threading.Event()
    try:
        start = time.monotonic()
        with pytest.raises(TimeoutExceeded):
            run_with_timeout(0.05, lambda token: release.wait(10))
        assert time.monotonic() - start < 1.0
    finally:
        release.set()


def test_cancel_token():
    token = CancelToken()
    token.raise_if_cancelled()
    token.cancel()
    assert token.cancelled
    with pytest.raises(Cancelled):
        token.raise_if_cancelled()
