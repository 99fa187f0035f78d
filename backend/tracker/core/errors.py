"""Error taxonomy for the tracker read paths."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for errors raised by tracker services."""


class InvalidInput(TrackerError):
    """A required request value is missing or unusable."""


class UpstreamReadFailure(TrackerError):
    """A store query failed; the composed response must be aborted."""

    def __init__(self, store: str, message: str = "Store read failed") -> None:
        super().__init__(f"{message}: {store}")
        self.store = store
