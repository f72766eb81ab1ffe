from __future__ import annotations

import os
from typing import Optional

from ..domain.constants import DEFAULT_CACHE_PREFIX
from ..domain.entities import Options
from .settings import (
    STORAGE_MEMORY,
    STORAGE_REDIS,
    AuthSettings,
    RedisStorageSettings,
)

_STORAGE_NONE = "none"


def settings_from_env() -> AuthSettings:
    def _int(key: str, default: int) -> int:
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return default
        try:
            return int(raw)
        except ValueError as exc:
            raise RuntimeError(f"{key} must be an integer, got {raw!r}") from exc

    def _path(key: str) -> Optional[str]:
        raw = (os.getenv(key) or "").strip()
        return raw or None

    storage = (os.getenv("JWT_AUTH_STORAGE") or STORAGE_MEMORY).strip().lower()
    if storage not in {STORAGE_MEMORY, STORAGE_REDIS, _STORAGE_NONE}:
        raise RuntimeError(
            f"JWT_AUTH_STORAGE must be one of memory, redis, none; got {storage!r}"
        )

    defaults = Options()
    options = Options(
        token_expiration_in_seconds=_int(
            "JWT_AUTH_TOKEN_EXPIRATION", defaults.token_expiration_in_seconds
        ),
        refresh_token_expiration_in_seconds=_int(
            "JWT_AUTH_REFRESH_TOKEN_EXPIRATION",
            defaults.refresh_token_expiration_in_seconds,
        ),
    )

    return AuthSettings(
        private_key_path=_path("JWT_AUTH_PRIVATE_KEY_PATH"),
        public_key_path=_path("JWT_AUTH_PUBLIC_KEY_PATH"),
        options=options,
        storage=None if storage == _STORAGE_NONE else storage,
        redis=RedisStorageSettings(
            host=os.getenv("JWT_AUTH_REDIS_HOST") or "localhost",
            port=_int("JWT_AUTH_REDIS_PORT", 6379),
            db=_int("JWT_AUTH_REDIS_DB", 0),
            cache_prefix=os.getenv("JWT_AUTH_REDIS_PREFIX") or DEFAULT_CACHE_PREFIX,
        ),
    )
