"""Lock acquisition against a ``LockStore``."""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from distlock.utils.logging import get_logger, short_token

from .errors import LockNotObtainedError
from .lock import Lock, bounded, check_ttl
from .models import ObtainOptions
from .retry import NoRetry, RetryStrategy
from .store import LockStore
from .tokens import TokenGenerator

if TYPE_CHECKING:  # pragma: no cover
    from .settings import LockSettings


logger = get_logger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


class LockClient:
    """Obtain locks from ``store``.

    ``retry_strategy`` is the fallback used when a call's options do not name
    one; without either, acquisition is attempted once. ``default_ttl`` is
    used when ``obtain`` is called without a ttl.
    """

    def __init__(
        self,
        store: LockStore,
        *,
        token_generator: Optional[TokenGenerator] = None,
        retry_strategy: Optional[RetryStrategy] = None,
        default_ttl: Optional[dt.timedelta] = None,
        sleep: Optional[Sleeper] = None,
    ) -> None:
        self._store = store
        self._tokens = token_generator or TokenGenerator()
        self._retry_strategy = retry_strategy or NoRetry()
        if default_ttl is not None:
            check_ttl(default_ttl)
        self._default_ttl = default_ttl
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_settings(cls, settings: "LockSettings") -> "LockClient":
        from .store_redis import RedisLockStore

        return cls(
            RedisLockStore.from_settings(settings),
            retry_strategy=settings.retry.build_strategy(),
            default_ttl=settings.default_ttl,
        )

    @property
    def store(self) -> LockStore:
        return self._store

    @property
    def default_ttl(self) -> Optional[dt.timedelta]:
        return self._default_ttl

    async def obtain(
        self,
        key: str,
        ttl: Optional[dt.timedelta] = None,
        options: Optional[ObtainOptions] = None,
    ) -> Lock:
        """Try to obtain ``key`` for ``ttl``, or the client default when omitted.

        Raises:
            TypeError: ttl is not a timedelta.
            ValueError: empty key, non-positive ttl or no ttl at all; nothing is sent to the store.
            LockNotObtainedError: the key stayed held and the strategy stopped retrying.
            LockCancelledError: ``options.timeout`` elapsed first.
            LockStoreError: the store failed; never retried.
        """
        if not key:
            raise ValueError("Lock key must not be empty")
        if ttl is None:
            ttl = self._default_ttl
        if ttl is None:
            raise ValueError("No ttl given and the client has no default ttl")
        check_ttl(ttl)
        options = options or ObtainOptions()
        strategy = options.retry_strategy if options.retry_strategy is not None else self._retry_strategy
        token = self._tokens.resolve(options.token)
        return await bounded(
            self._acquire(key, ttl, token, options.metadata, strategy),
            options.timeout,
            f"obtain of {key!r}",
        )

    async def _acquire(
        self,
        key: str,
        ttl: dt.timedelta,
        token: str,
        metadata: str,
        strategy: RetryStrategy,
    ) -> Lock:
        value = token + metadata
        attempt = 0
        while True:
            if await self._store.set_if_absent(key, value, ttl):
                logger.info("Obtained lock %s (token %s) after %d attempt(s)", key, short_token(token), attempt + 1)
                return Lock(self._store, key, token, metadata)

            backoff = strategy.next_backoff(attempt)
            if not backoff.retry:
                logger.info("Lock %s not obtained after %d attempt(s)", key, attempt + 1)
                raise LockNotObtainedError(f"Lock {key!r} not obtained after {attempt + 1} attempt(s)")

            logger.debug("Lock %s busy, retrying in %s", key, backoff.wait)
            await self._sleep(max(backoff.wait.total_seconds(), 0.0))
            attempt += 1


async def obtain(
    store: LockStore,
    key: str,
    ttl: dt.timedelta,
    options: Optional[ObtainOptions] = None,
) -> Lock:
    """Shortcut for ``LockClient(store).obtain(key, ttl, options)``."""
    return await LockClient(store).obtain(key, ttl, options)
