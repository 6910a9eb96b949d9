"""Redis-backed lock store using SET NX PX and server-side Lua scripts."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from distlock.utils.logging import get_logger

from .errors import LockStoreError
from .store import ZERO, LockStore

if TYPE_CHECKING:  # pragma: no cover
    from .settings import LockSettings


logger = get_logger(__name__)

# delete only if the stored value still matches
_RELEASE_LUA = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
else
    return 0
end
"""

_REFRESH_LUA = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('pexpire', KEYS[1], ARGV[2])
else
    return 0
end
"""

# -3 when the key holds another value
_OWNED_PTTL_LUA = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('pttl', KEYS[1])
else
    return -3
end
"""


def _to_ms(ttl: dt.timedelta) -> int:
    ms = int(ttl.total_seconds() * 1000)
    if ms < 1:
        raise ValueError(f"TTL must be at least one millisecond, got {ttl!r}")
    return ms


class RedisLockStore(LockStore):
    def __init__(
        self,
        url: Optional[str] = None,
        *,
        redis: Optional[Redis] = None,
        key_prefix: str = "",
    ) -> None:
        if redis is None:
            redis = Redis.from_url(url or "redis://localhost:6379/0", decode_responses=True)
        self._redis = redis
        self._prefix = key_prefix
        self._release = redis.register_script(_RELEASE_LUA)
        self._refresh = redis.register_script(_REFRESH_LUA)
        self._owned_pttl = redis.register_script(_OWNED_PTTL_LUA)

    @classmethod
    def from_settings(cls, settings: "LockSettings") -> "RedisLockStore":
        return cls(settings.redis_url, key_prefix=settings.key_prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def set_if_absent(self, key: str, value: str, ttl: dt.timedelta) -> bool:
        try:
            return bool(await self._redis.set(self._key(key), value, px=_to_ms(ttl), nx=True))
        except RedisError as exc:
            raise LockStoreError(f"SET NX failed for {key!r}: {exc}") from exc

    async def compare_and_delete(self, key: str, value: str) -> bool:
        try:
            result = await self._release(keys=[self._key(key)], args=[value])
        except RedisError as exc:
            raise LockStoreError(f"Release script failed for {key!r}: {exc}") from exc
        return int(result) == 1

    async def compare_and_expire(self, key: str, value: str, ttl: dt.timedelta) -> bool:
        try:
            result = await self._refresh(keys=[self._key(key)], args=[value, _to_ms(ttl)])
        except RedisError as exc:
            raise LockStoreError(f"Refresh script failed for {key!r}: {exc}") from exc
        return int(result) == 1

    async def pttl(self, key: str) -> dt.timedelta:
        try:
            result = int(await self._redis.pttl(self._key(key)))
        except RedisError as exc:
            raise LockStoreError(f"PTTL failed for {key!r}: {exc}") from exc
        # -2 missing, -1 no expiry
        if result <= 0:
            return ZERO
        return dt.timedelta(milliseconds=result)

    async def compare_and_pttl(self, key: str, value: str) -> Optional[dt.timedelta]:
        try:
            result = int(await self._owned_pttl(keys=[self._key(key)], args=[value]))
        except RedisError as exc:
            raise LockStoreError(f"Owned PTTL script failed for {key!r}: {exc}") from exc
        if result == -3:
            return None
        if result <= 0:
            return ZERO
        return dt.timedelta(milliseconds=result)

    async def close(self) -> None:
        logger.debug("Closing redis lock store")
        await self._redis.aclose()
