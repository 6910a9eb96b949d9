"""Distributed mutual-exclusion locks over a shared key-value store."""

from .core.client import LockClient, obtain
from .core.errors import (
    LockCancelledError,
    LockError,
    LockNotHeldError,
    LockNotObtainedError,
    LockStoreError,
)
from .core.lock import Lock, LockStatus
from .core.models import ObtainOptions, RefreshOptions
from .core.retry import (
    ExponentialBackoff,
    LimitRetry,
    LinearBackoff,
    NoRetry,
    exponential_backoff,
    limit_retry,
    linear_backoff,
    no_retry,
)

__all__ = [
    "__version__",
    "ExponentialBackoff",
    "LimitRetry",
    "LinearBackoff",
    "Lock",
    "LockCancelledError",
    "LockClient",
    "LockError",
    "LockNotHeldError",
    "LockNotObtainedError",
    "LockStatus",
    "LockStoreError",
    "NoRetry",
    "ObtainOptions",
    "RefreshOptions",
    "exponential_backoff",
    "limit_retry",
    "linear_backoff",
    "no_retry",
    "obtain",
]

__version__ = "0.1.0"
