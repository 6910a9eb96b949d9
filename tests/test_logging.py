from __future__ import annotations

import importlib.util
import logging
from pathlib import Path

from distlock.utils.logging import get_logger, short_token

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "lock_example.py"


def test_library_loggers_default_to_warning(monkeypatch):
    monkeypatch.delenv("DISTLOCK_LOG_LEVEL", raising=False)
    logger = get_logger("distlock.tests.quiet", rich=False)
    assert not logger.isEnabledFor(logging.INFO)
    assert logger.isEnabledFor(logging.WARNING)


def test_env_level_is_honoured(monkeypatch):
    monkeypatch.setenv("DISTLOCK_LOG_LEVEL", "debug")
    logger = get_logger("distlock.tests.verbose", rich=False)
    assert logger.isEnabledFor(logging.DEBUG)


def test_example_script_logs_at_info(monkeypatch):
    monkeypatch.delenv("DISTLOCK_LOG_LEVEL", raising=False)
    module_def = importlib.util.spec_from_file_location("lock_example", SCRIPT)
    module = importlib.util.module_from_spec(module_def)
    module_def.loader.exec_module(module)
    assert module.logger.isEnabledFor(logging.INFO)


def test_short_token_hides_most_of_the_token():
    assert short_token("abcdefghijkl") == "abcdef…"
    assert short_token("abc") == "abc"
