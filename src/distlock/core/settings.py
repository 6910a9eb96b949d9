"""Settings loader for the Redis lock client."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from distlock.utils.env import get_bool_env, get_int_env, get_str_env

from .retry import (
    RetryStrategy,
    exponential_backoff,
    limit_retry,
    linear_backoff,
    no_retry,
)

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class RetryKind(str, Enum):
    NONE = "none"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


class RetrySettings(BaseModel):
    """Default retry policy applied when ``obtain`` is called without one."""

    kind: RetryKind = RetryKind.NONE
    base_ms: int = Field(default=100, gt=0)
    max_ms: int = Field(default=2000, gt=0)
    max_retries: Optional[int] = Field(default=None, ge=0)
    jitter: bool = False

    @model_validator(mode="after")
    def _check_bounds(self) -> "RetrySettings":
        if self.kind is RetryKind.EXPONENTIAL and self.max_ms < self.base_ms:
            raise ValueError("max_ms must not be smaller than base_ms")
        return self

    def build_strategy(self) -> RetryStrategy:
        base = dt.timedelta(milliseconds=self.base_ms)
        if self.kind is RetryKind.NONE:
            return no_retry()
        if self.kind is RetryKind.LINEAR:
            strategy = linear_backoff(base)
        else:
            strategy = exponential_backoff(base, dt.timedelta(milliseconds=self.max_ms), jitter=self.jitter)
        if self.max_retries is not None:
            strategy = limit_retry(strategy, self.max_retries)
        return strategy


class LockSettings(BaseModel):
    redis_url: str = DEFAULT_REDIS_URL
    key_prefix: str = ""
    default_ttl_ms: int = Field(default=30000, gt=0)
    retry: RetrySettings = Field(default_factory=RetrySettings)

    @property
    def default_ttl(self) -> dt.timedelta:
        return dt.timedelta(milliseconds=self.default_ttl_ms)

    @classmethod
    def from_file(cls, path: Path) -> "LockSettings":
        data = yaml.safe_load(path.read_text()) or {}
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid lock settings: {exc}") from exc

    @classmethod
    def from_env(cls) -> "LockSettings":
        """Build settings from ``REDIS_URL`` and ``DISTLOCK_*`` variables."""
        max_retries = get_int_env("DISTLOCK_RETRY_MAX_RETRIES", default=-1)
        data = {
            "redis_url": get_str_env("REDIS_URL", default=DEFAULT_REDIS_URL),
            "key_prefix": get_str_env("DISTLOCK_KEY_PREFIX"),
            "default_ttl_ms": get_int_env("DISTLOCK_DEFAULT_TTL_MS", default=30000),
            "retry": {
                "kind": get_str_env("DISTLOCK_RETRY", default=RetryKind.NONE.value).lower(),
                "base_ms": get_int_env("DISTLOCK_RETRY_BASE_MS", default=100),
                "max_ms": get_int_env("DISTLOCK_RETRY_MAX_MS", default=2000),
                "max_retries": max_retries if max_retries >= 0 else None,
                "jitter": get_bool_env("DISTLOCK_RETRY_JITTER"),
            },
        }
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid lock settings: {exc}") from exc
