from __future__ import annotations

from typing import Optional

from ...adapters.jwt.codec import PyJWTTokenCodec
from ...adapters.storage.memory_store import MemoryTokenStorageManager
from ...adapters.storage.redis_store import RedisTokenStorageManager
from ...application.auth_service import AuthService
from ...config.settings import STORAGE_MEMORY, STORAGE_REDIS, AuthSettings
from ...domain.ports import TokenStorageManager


def create_token_storage_manager(settings: AuthSettings) -> Optional[TokenStorageManager]:
    """
    Pick the used-token store named by `settings.storage`.

    Multi-process deployments must use "redis"; the memory store is only
    safe inside a single event loop.
    """
    if settings.storage is None:
        return None
    if settings.storage == STORAGE_MEMORY:
        return MemoryTokenStorageManager()
    if settings.storage == STORAGE_REDIS:
        return RedisTokenStorageManager.from_settings(settings.redis)
    raise ValueError(f"Unknown token storage backend: {settings.storage!r}")


async def create_auth_service(settings: AuthSettings) -> AuthService:
    """
    High-level factory: settings -> ready-to-use AuthService.

    - builds a PyJWTTokenCodec
    - wires the configured storage manager
    - loads whichever key paths are set
    """
    service = AuthService(
        codec=PyJWTTokenCodec(),
        storage=create_token_storage_manager(settings),
        options=settings.options,
    )
    await service.load_keys(settings.private_key_path, settings.public_key_path)
    return service
