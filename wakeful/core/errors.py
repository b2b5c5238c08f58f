from __future__ import annotations


class WakefulError(Exception):
    """Precondition violated or resource unavailable."""


class WakeLockUnavailable(WakefulError):
    pass


class WakeLockUnderLocked(WakefulError):
    """release() called with no acquisition outstanding."""
