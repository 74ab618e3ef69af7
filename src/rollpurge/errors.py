from __future__ import annotations


class PurgeError(Exception):
    """Base error for the purger."""


class InvalidArgument(PurgeError, ValueError):
    """A caller passed a missing or out-of-range argument."""
