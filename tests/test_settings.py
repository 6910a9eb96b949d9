from __future__ import annotations

import datetime as dt

import pytest

from distlock.core.retry import ExponentialBackoff, LimitRetry, LinearBackoff, NoRetry
from distlock.core.settings import LockSettings, RetryKind, RetrySettings
from distlock.utils.env import get_bool_env, get_int_env


def test_defaults():
    settings = LockSettings()
    assert settings.redis_url == "redis://localhost:6379/0"
    assert settings.default_ttl == dt.timedelta(seconds=30)
    assert isinstance(settings.retry.build_strategy(), NoRetry)


def test_from_file(tmp_path):
    path = tmp_path / "lock.yml"
    path.write_text(
        "redis_url: redis://cache:6379/1\n"
        "key_prefix: 'locks:'\n"
        "default_ttl_ms: 5000\n"
        "retry:\n"
        "  kind: linear\n"
        "  base_ms: 250\n"
        "  max_retries: 4\n"
    )
    settings = LockSettings.from_file(path)
    assert settings.key_prefix == "locks:"
    strategy = settings.retry.build_strategy()
    assert isinstance(strategy, LimitRetry)
    assert strategy.inner == LinearBackoff(dt.timedelta(milliseconds=250))
    assert strategy.max_retries == 4


def test_from_file_rejects_invalid(tmp_path):
    path = tmp_path / "lock.yml"
    path.write_text("default_ttl_ms: 0\n")
    with pytest.raises(ValueError, match="Invalid lock settings"):
        LockSettings.from_file(path)


def test_exponential_bounds_checked():
    with pytest.raises(ValueError):
        RetrySettings(kind=RetryKind.EXPONENTIAL, base_ms=500, max_ms=100)
    strategy = RetrySettings(kind="exponential", base_ms=10, max_ms=80, jitter=True).build_strategy()
    assert isinstance(strategy, ExponentialBackoff)
    assert strategy.jitter is True


def test_from_env(monkeypatch):
    monkeypatch.setenv("REDIS_URL", "redis://env:6379/2")
    monkeypatch.setenv("DISTLOCK_KEY_PREFIX", "svc:")
    monkeypatch.setenv("DISTLOCK_RETRY", "Exponential")
    monkeypatch.setenv("DISTLOCK_RETRY_MAX_RETRIES", "5")
    settings = LockSettings.from_env()
    assert settings.redis_url == "redis://env:6379/2"
    assert settings.key_prefix == "svc:"
    assert settings.retry.kind is RetryKind.EXPONENTIAL
    assert settings.retry.max_retries == 5


def test_from_env_rejects_garbage(monkeypatch):
    monkeypatch.setenv("DISTLOCK_DEFAULT_TTL_MS", "soon")
    with pytest.raises(ValueError):
        LockSettings.from_env()


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("FLAG", "off")
    monkeypatch.setenv("COUNT", " 7 ")
    assert get_bool_env("FLAG", default=True) is False
    assert get_bool_env("MISSING", default=True) is True
    assert get_int_env("COUNT", default=0) == 7
