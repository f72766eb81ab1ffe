from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..domain.constants import DEFAULT_CACHE_PREFIX
from ..domain.entities import Options

STORAGE_MEMORY = "memory"
STORAGE_REDIS = "redis"


@dataclass(slots=True)
class RedisStorageSettings:
    """
    Connection target for the shared used-token store.
    """
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    cache_prefix: str = DEFAULT_CACHE_PREFIX


@dataclass(slots=True)
class AuthSettings:
    """
    Everything needed to wire an AuthService.

    Host code decides how to construct this (env, config file, etc.).
    """
    private_key_path: Optional[str] = None
    public_key_path: Optional[str] = None
    options: Options = field(default_factory=Options)

    # "memory", "redis", or None for no replay tracking
    storage: Optional[str] = STORAGE_MEMORY
    redis: RedisStorageSettings = field(default_factory=RedisStorageSettings)
