# src/jwt_auth/domain/value_objects.py

from __future__ import annotations

import hashlib
import string
from dataclasses import dataclass

TOKEN_HASH_LENGTH = 40

_HEX_DIGITS = frozenset(string.hexdigits.lower())


@dataclass(frozen=True, slots=True)
class TokenHash:
    """
    SHA-1 hex digest of a token's exact wire string.

    Used as the replay-tracking key. Two token strings that carry the same
    claims still hash differently, and are tracked independently.
    """
    value: str

    def __post_init__(self) -> None:
        if len(self.value) != TOKEN_HASH_LENGTH or not set(self.value) <= _HEX_DIGITS:
            raise ValueError(f"Invalid token hash: {self.value!r}")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def of(cls, token: str) -> TokenHash:
        return cls(hashlib.sha1(token.encode("utf-8")).hexdigest())
