"""Walk through the common lock usage patterns against a live Redis."""

from __future__ import annotations

import argparse
import asyncio
import datetime as dt
import logging
from pathlib import Path

from distlock import (
    LockClient,
    LockNotObtainedError,
    ObtainOptions,
    limit_retry,
    linear_backoff,
)
from distlock.core.settings import LockSettings
from distlock.core.store_redis import RedisLockStore
from distlock.utils.logging import get_logger


logger = get_logger("LockExample", logging.INFO)

MS = dt.timedelta(milliseconds=1)


async def basic(client: LockClient) -> None:
    lock = await client.obtain("example:basic", 100 * MS)
    async with lock:
        logger.info("I have a lock!")
        await asyncio.sleep(0.05)
        if await lock.ttl() > dt.timedelta(0):
            logger.info("Yay, I still have my lock!")

        await lock.refresh(100 * MS)
        await asyncio.sleep(0.1)
        if await lock.ttl() == dt.timedelta(0):
            logger.info("Now, my lock has expired!")


async def shared_secret(client: LockClient) -> None:
    options = ObtainOptions(token="example-secret")
    lock = await client.obtain("example:secret", 150 * MS, options)
    async with lock:
        try:
            await client.obtain("example:secret", 150 * MS, options)
        except LockNotObtainedError:
            logger.info("Same secret, still exclusive: could not obtain lock, but it's ok!")


async def retry(client: LockClient) -> None:
    # retry every 100ms, for up to 3x
    options = ObtainOptions(retry_strategy=limit_retry(linear_backoff(100 * MS), 3))
    async with await client.obtain("example:retry", dt.timedelta(seconds=1), options):
        logger.info("I have a lock after retrying!")


async def custom_deadline(client: LockClient) -> None:
    # retry every 500ms until the minute is up
    options = ObtainOptions(retry_strategy=linear_backoff(500 * MS), timeout=dt.timedelta(minutes=1))
    async with await client.obtain("example:deadline", dt.timedelta(seconds=1), options):
        logger.info("I have a lock before the deadline!")


async def main() -> None:
    parser = argparse.ArgumentParser(description="Run distlock usage examples.")
    parser.add_argument("--config", type=Path, default=None, help="Path to lock settings YAML")
    args = parser.parse_args()

    settings = LockSettings.from_file(args.config) if args.config else LockSettings.from_env()
    store = RedisLockStore.from_settings(settings)
    client = LockClient(store)
    try:
        for example in (basic, shared_secret, retry, custom_deadline):
            logger.info("Running %s", example.__name__)
            await example(client)
    finally:
        await store.close()


if __name__ == "__main__":
    asyncio.run(main())
