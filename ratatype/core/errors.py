"""Error types raised by the typing session core."""

from __future__ import annotations


class RatatypeError(Exception):
    """Base exception for all custom errors."""


class SessionConfigError(RatatypeError, ValueError):
    """Raised when a session cannot be built from the given configuration or text."""


class SessionStateError(RatatypeError, RuntimeError):
    """Raised when an event arrives in the wrong lifecycle state.

    This signals an integration bug in the caller's event loop, not a
    condition the user can trigger.
    """


class TextSourceError(RatatypeError):
    """Raised when a text source cannot produce any practice text."""
