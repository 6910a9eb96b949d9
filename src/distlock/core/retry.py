"""Backoff strategies consulted between failed acquisition attempts.

Every strategy is a pure function of the attempt number: ``attempt`` is 0 after
the first failed attempt, 1 after the second, and so on. One instance can be
shared by any number of concurrent ``obtain`` calls.
"""

from __future__ import annotations

import datetime as dt
import random
from dataclasses import dataclass, field
from typing import Callable, NamedTuple, Optional, Protocol, runtime_checkable


class Backoff(NamedTuple):
    wait: dt.timedelta
    retry: bool


STOP = Backoff(dt.timedelta(0), False)


@runtime_checkable
class RetryStrategy(Protocol):
    def next_backoff(self, attempt: int) -> Backoff: ...


def _positive(value: dt.timedelta, name: str) -> None:
    if value <= dt.timedelta(0):
        raise ValueError(f"{name} must be positive, got {value!r}")


@dataclass(frozen=True)
class NoRetry:
    """Attempt acquisition exactly once."""

    def next_backoff(self, attempt: int) -> Backoff:
        return STOP


@dataclass(frozen=True)
class LinearBackoff:
    """Wait a constant ``base`` between attempts, forever."""

    base: dt.timedelta

    def __post_init__(self) -> None:
        _positive(self.base, "base")

    def next_backoff(self, attempt: int) -> Backoff:
        return Backoff(self.base, True)


@dataclass(frozen=True)
class ExponentialBackoff:
    """Wait ``min(base * 2**attempt, maximum)``, forever.

    With ``jitter`` enabled the wait is drawn uniformly from ``[0, computed]``.
    """

    base: dt.timedelta
    maximum: dt.timedelta
    jitter: bool = False
    rng: Optional[Callable[[], float]] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        _positive(self.base, "base")
        if self.maximum < self.base:
            raise ValueError("maximum must not be smaller than base")

    def next_backoff(self, attempt: int) -> Backoff:
        # cap the exponent so the multiplication cannot overflow timedelta
        exponent = min(max(attempt, 0), 62)
        ratio = self.maximum / self.base
        wait = self.maximum if 2**exponent >= ratio else self.base * (2**exponent)
        if self.jitter:
            draw = (self.rng or random.random)()
            wait = wait * draw
        return Backoff(wait, True)


@dataclass(frozen=True)
class LimitRetry:
    """Delegate to ``inner`` but stop after ``max_retries`` retries."""

    inner: RetryStrategy
    max_retries: int

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")

    def next_backoff(self, attempt: int) -> Backoff:
        if attempt >= self.max_retries:
            return STOP
        return self.inner.next_backoff(attempt)


def no_retry() -> RetryStrategy:
    return NoRetry()


def linear_backoff(base: dt.timedelta) -> RetryStrategy:
    return LinearBackoff(base)


def exponential_backoff(
    base: dt.timedelta,
    maximum: dt.timedelta,
    *,
    jitter: bool = False,
    rng: Optional[Callable[[], float]] = None,
) -> RetryStrategy:
    return ExponentialBackoff(base, maximum, jitter=jitter, rng=rng)


def limit_retry(inner: RetryStrategy, max_retries: int) -> RetryStrategy:
    return LimitRetry(inner, max_retries)
