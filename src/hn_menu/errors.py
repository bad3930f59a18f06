from __future__ import annotations


class HNMenuError(Exception):
    """Base class for errors raised by hn_menu."""


class NetworkError(HNMenuError):
    """A request could not be completed (transport failure or bad status)."""


class DecodeError(HNMenuError):
    """A response body was not valid JSON or did not match the expected shape."""


class TimeoutExceeded(HNMenuError):
    """An operation ran past its deadline and was cancelled."""


class Cancelled(HNMenuError):
    """Raised at a checkpoint once the operation's cancel token has fired."""
