"""Logging helpers with consistent formatting."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from rich.logging import RichHandler

from .env import get_bool_env, get_str_env

_LEVEL_ENV = "DISTLOCK_LOG_LEVEL"
_RICH_ENV = "DISTLOCK_RICH_LOGS"


def _resolve_level(level: Optional[int]) -> int:
    if level is not None:
        return level
    name = get_str_env(_LEVEL_ENV, default="WARNING").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.WARNING


def get_logger(name: str, level: Optional[int] = None, *, rich: Optional[bool] = None) -> logging.Logger:
    """Configure and return a logger.

    Level and handler type default to ``DISTLOCK_LOG_LEVEL`` and ``DISTLOCK_RICH_LOGS``.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = _resolve_level(level)
    if rich is None:
        rich = get_bool_env(_RICH_ENV, default=True)
    logger.setLevel(level)

    if rich:
        handler: logging.Handler = RichHandler(
            level=level,
            markup=False,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(name)s %(levelname)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def short_token(token: str, size: int = 6) -> str:
    """Abbreviate a token for log output."""
    return f"{token[:size]}…" if len(token) > size else token
