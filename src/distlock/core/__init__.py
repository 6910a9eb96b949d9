"""Lock protocol primitives."""

from .client import LockClient, obtain
from .lock import Lock, LockStatus
from .store import InMemoryLockStore, LockStore

__all__ = [
    "InMemoryLockStore",
    "Lock",
    "LockClient",
    "LockStatus",
    "LockStore",
    "obtain",
]
