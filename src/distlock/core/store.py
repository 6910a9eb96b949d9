"""Atomic key-value operations the lock protocol relies on."""

from __future__ import annotations

import abc
import asyncio
import datetime as dt
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

ZERO = dt.timedelta(0)


class LockStore(abc.ABC):
    """Backing store contract.

    Each operation must be evaluated by the store as a single indivisible step.
    """

    @abc.abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl: dt.timedelta) -> bool:  # pragma: no cover - interface
        """Create ``key`` holding ``value`` unless it already exists."""
        raise NotImplementedError

    @abc.abstractmethod
    async def compare_and_delete(self, key: str, value: str) -> bool:  # pragma: no cover - interface
        """Delete ``key`` only if it currently holds ``value``."""
        raise NotImplementedError

    @abc.abstractmethod
    async def compare_and_expire(self, key: str, value: str, ttl: dt.timedelta) -> bool:  # pragma: no cover - interface
        """Reset the expiry of ``key`` only if it currently holds ``value``."""
        raise NotImplementedError

    @abc.abstractmethod
    async def pttl(self, key: str) -> dt.timedelta:  # pragma: no cover - interface
        """Remaining time-to-live of ``key``; zero when missing or expired."""
        raise NotImplementedError

    @abc.abstractmethod
    async def compare_and_pttl(self, key: str, value: str) -> Optional[dt.timedelta]:  # pragma: no cover - interface
        """Remaining time-to-live of ``key`` if it holds ``value``.

        ``None`` when the key is missing or holds another value.
        """
        raise NotImplementedError

    async def close(self) -> None:
        return None


@dataclass(slots=True)
class _Record:
    value: str
    expires_at: float


class InMemoryLockStore(LockStore):
    """Process-local store guarded by an asyncio lock."""

    def __init__(self, *, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.monotonic
        self._records: Dict[str, _Record] = {}
        self._lock = asyncio.Lock()

    def _live(self, key: str) -> Optional[_Record]:
        record = self._records.get(key)
        if record is None:
            return None
        if record.expires_at <= self._clock():
            del self._records[key]
            return None
        return record

    async def set_if_absent(self, key: str, value: str, ttl: dt.timedelta) -> bool:
        async with self._lock:
            if self._live(key) is not None:
                return False
            self._records[key] = _Record(value, self._clock() + ttl.total_seconds())
            return True

    async def compare_and_delete(self, key: str, value: str) -> bool:
        async with self._lock:
            record = self._live(key)
            if record is None or record.value != value:
                return False
            del self._records[key]
            return True

    async def compare_and_expire(self, key: str, value: str, ttl: dt.timedelta) -> bool:
        async with self._lock:
            record = self._live(key)
            if record is None or record.value != value:
                return False
            record.expires_at = self._clock() + ttl.total_seconds()
            return True

    async def pttl(self, key: str) -> dt.timedelta:
        async with self._lock:
            record = self._live(key)
            if record is None:
                return ZERO
            remaining = record.expires_at - self._clock()
            return dt.timedelta(seconds=remaining) if remaining > 0 else ZERO

    async def compare_and_pttl(self, key: str, value: str) -> Optional[dt.timedelta]:
        async with self._lock:
            record = self._live(key)
            if record is None or record.value != value:
                return None
            remaining = record.expires_at - self._clock()
            return dt.timedelta(seconds=remaining) if remaining > 0 else ZERO
