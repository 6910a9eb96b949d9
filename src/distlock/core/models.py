"""Option models accepted by lock operations."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .retry import RetryStrategy


def _positive_or_none(value: Optional[dt.timedelta]) -> Optional[dt.timedelta]:
    if value is not None and value <= dt.timedelta(0):
        raise ValueError("timeout must be positive")
    return value


class ObtainOptions(BaseModel):
    """Options for a single ``obtain`` call."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    # falls back to the client default, which is a single attempt
    retry_strategy: Optional[RetryStrategy] = None
    # explicit token; when set, the random generator is bypassed
    token: Optional[str] = None
    metadata: str = ""
    # overall deadline for acquisition, independent of the record ttl
    timeout: Optional[dt.timedelta] = None

    @field_validator("token")
    @classmethod
    def _check_token(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value:
            raise ValueError("token must not be empty")
        return value

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: Optional[dt.timedelta]) -> Optional[dt.timedelta]:
        return _positive_or_none(value)


class RefreshOptions(BaseModel):
    """Options for ``Lock.refresh``."""

    model_config = ConfigDict(frozen=True)

    # deadline for the store round-trip
    timeout: Optional[dt.timedelta] = None

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: Optional[dt.timedelta]) -> Optional[dt.timedelta]:
        return _positive_or_none(value)
