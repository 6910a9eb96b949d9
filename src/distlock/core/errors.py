"""Exceptions raised by lock acquisition and lock handles."""

from __future__ import annotations


class LockError(Exception):
    """Base class for every lock failure."""


class LockNotObtainedError(LockError):
    """Another holder owns the key and the retry strategy gave up."""


class LockCancelledError(LockError, TimeoutError):
    """The acquisition deadline expired before the lock could be obtained."""


class LockNotHeldError(LockError):
    """The handle's token no longer matches the stored record."""


class LockStoreError(LockError):
    """The backing store failed to execute an operation."""
