from __future__ import annotations

import logging
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ...config.settings import RedisStorageSettings
from ...domain.constants import DEFAULT_CACHE_PREFIX, USED_TOKEN_TTL_SECONDS
from ...domain.exceptions import ReplayError, StorageUnavailableError
from ...domain.ports import TokenStorageManager

logger = logging.getLogger(__name__)


class RedisTokenStorageManager(TokenStorageManager):
    """
    Redis-backed used-token store, shared by every process on the same db.

    Each used hash is stored under ``{prefix}:{hash}`` with the hash as its
    value and a two-year TTL, so the keyspace stays bounded.

    :param r: An async Redis client. Build one with :meth:`from_settings`.
    """

    def __init__(
        self,
        r: Redis,
        cache_prefix: str = DEFAULT_CACHE_PREFIX,
        ttl_seconds: int = USED_TOKEN_TTL_SECONDS,
    ) -> None:
        self.r = r
        self._prefix = cache_prefix
        self._ttl = ttl_seconds

    @classmethod
    def from_settings(cls, settings: RedisStorageSettings) -> RedisTokenStorageManager:
        client = Redis(
            host=settings.host,
            port=settings.port,
            db=settings.db,
            decode_responses=True,
        )
        return cls(client, cache_prefix=settings.cache_prefix)

    async def close(self) -> None:
        await self.r.aclose()

    def _k(self, token_hash: str) -> str:
        return f"{self._prefix}:{token_hash}"

    # -------------------- API ------------------------

    async def is_token_used(self, token_hash: str) -> str:
        stored = await self._call("GET", self.r.get(self._k(token_hash)))
        if _as_str(stored) == token_hash:
            raise ReplayError()
        return token_hash

    async def mark_token_used(self, token_hash: str) -> None:
        """
        Record the hash with SET NX, so only the first writer across all
        processes succeeds.
        """
        await self.is_token_used(token_hash)
        created = await self._call(
            "SET",
            self.r.set(self._k(token_hash), token_hash, ex=self._ttl, nx=True),
        )
        if not created:
            raise ReplayError()

    # -------------------- helpers --------------------

    async def _call(self, op: str, awaitable):
        try:
            return await awaitable
        except RedisError as exc:
            logger.error("Used-token store %s failed: %s", op, exc)
            raise StorageUnavailableError(f"Token storage unavailable: {exc}") from exc


def _as_str(value: Optional[object]) -> Optional[str]:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value  # type: ignore[return-value]
