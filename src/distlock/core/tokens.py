"""Ownership token generation."""

from __future__ import annotations

import base64
import secrets
from typing import Callable, Optional

TOKEN_BYTES = 16

RandomSource = Callable[[int], bytes]


class TokenGenerator:
    """Produce url-safe random tokens from a cryptographically secure source.

    ``random_bytes`` can be swapped for a deterministic callable in tests.
    """

    def __init__(self, random_bytes: Optional[RandomSource] = None, *, size: int = TOKEN_BYTES) -> None:
        if size < TOKEN_BYTES:
            raise ValueError(f"Token size must be at least {TOKEN_BYTES} bytes")
        self._random_bytes = random_bytes or secrets.token_bytes
        self._size = size

    @property
    def size(self) -> int:
        return self._size

    def new_token(self) -> str:
        raw = self._random_bytes(self._size)
        if len(raw) != self._size:
            raise ValueError(f"Random source returned {len(raw)} bytes, expected {self._size}")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    def resolve(self, token: Optional[str]) -> str:
        """Return ``token`` verbatim when supplied, otherwise a fresh one."""
        if token:
            return token
        return self.new_token()
