"""Handle for a successfully obtained lock."""

from __future__ import annotations

import asyncio
import datetime as dt
from enum import Enum
from typing import Awaitable, Optional, TypeVar

from distlock.utils.logging import get_logger, short_token

from .errors import LockCancelledError, LockNotHeldError, LockStoreError
from .models import RefreshOptions
from .store import ZERO, LockStore

T = TypeVar("T")

logger = get_logger(__name__)


class LockStatus(str, Enum):
    LIVE = "live"
    RELEASED = "released"
    LOST = "lost"


def check_ttl(ttl: dt.timedelta) -> None:
    if not isinstance(ttl, dt.timedelta):
        raise TypeError(f"TTL must be a timedelta, got {type(ttl).__name__}")
    if ttl <= ZERO:
        raise ValueError(f"TTL must be positive, got {ttl!r}")


async def bounded(call: Awaitable[T], timeout: Optional[dt.timedelta], what: str) -> T:
    """Await ``call``, raising ``LockCancelledError`` if ``timeout`` elapses first."""
    if timeout is None:
        return await call
    try:
        return await asyncio.wait_for(call, timeout.total_seconds())
    except asyncio.TimeoutError as exc:
        raise LockCancelledError(f"{what} did not complete within {timeout}") from exc


class Lock:
    """One acquisition of ``key``.

    The handle tracks its own status so that repeated ``release`` or ``ttl``
    calls after the lock is gone do not touch the store again. Use it as an
    async context manager to release on exit::

        async with await client.obtain("jobs", dt.timedelta(seconds=5)):
            ...
    """

    def __init__(self, store: LockStore, key: str, token: str, metadata: str = "") -> None:
        self._store = store
        self._key = key
        self._token = token
        self._metadata = metadata
        self._status = LockStatus.LIVE

    def __repr__(self) -> str:
        return f"Lock(key={self._key!r}, token={short_token(self._token)!r}, status={self._status.value})"

    @property
    def key(self) -> str:
        return self._key

    @property
    def token(self) -> str:
        return self._token

    @property
    def metadata(self) -> str:
        return self._metadata

    @property
    def value(self) -> str:
        """The exact value stored under ``key`` while the lock is held."""
        return self._token + self._metadata

    @property
    def status(self) -> LockStatus:
        return self._status

    @property
    def is_live(self) -> bool:
        return self._status is LockStatus.LIVE

    async def release(self, *, timeout: Optional[dt.timedelta] = None) -> None:
        """Delete the record if this handle still owns it.

        A record that already expired or changed hands is not an error; the
        handle is marked lost and later calls are no-ops.
        """
        if self._status is not LockStatus.LIVE:
            return
        deleted = await bounded(
            self._store.compare_and_delete(self._key, self.value), timeout, f"release of {self._key!r}"
        )
        if deleted:
            self._status = LockStatus.RELEASED
            logger.info("Released lock %s", self._key)
        else:
            self._status = LockStatus.LOST
            logger.warning("Lock %s was already gone at release", self._key)

    async def refresh(self, ttl: dt.timedelta, options: Optional[RefreshOptions] = None) -> None:
        """Extend the expiry to ``ttl`` from now.

        Raises:
            LockNotHeldError: the record no longer carries this handle's token.
        """
        check_ttl(ttl)
        if self._status is not LockStatus.LIVE:
            raise LockNotHeldError(f"Lock {self._key!r} is {self._status.value}")
        timeout = options.timeout if options else None
        extended = await bounded(
            self._store.compare_and_expire(self._key, self.value, ttl), timeout, f"refresh of {self._key!r}"
        )
        if not extended:
            self._status = LockStatus.LOST
            logger.warning("Lock %s lost before refresh", self._key)
            raise LockNotHeldError(f"Lock {self._key!r} is no longer held")
        logger.debug("Refreshed lock %s for %s", self._key, ttl)

    async def ttl(self, *, timeout: Optional[dt.timedelta] = None) -> dt.timedelta:
        """Remaining time-to-live; zero once expired, released or lost.

        A key now holding another token counts as lost.

        Advisory only: time keeps passing between this call and any later
        refresh or release.
        """
        if self._status is not LockStatus.LIVE:
            return ZERO
        remaining = await bounded(
            self._store.compare_and_pttl(self._key, self.value), timeout, f"ttl of {self._key!r}"
        )
        if remaining is None or remaining <= ZERO:
            self._status = LockStatus.LOST
            return ZERO
        return remaining

    async def __aenter__(self) -> "Lock":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await self.release()
        except LockStoreError:
            if exc_type is None:
                raise
            # keep the exception raised inside the block
            logger.exception("Release of %s failed while handling %s", self._key, exc_type.__name__)
