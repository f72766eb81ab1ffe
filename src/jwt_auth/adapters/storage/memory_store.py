from __future__ import annotations

from typing import Set

from ...domain.exceptions import ReplayError
from ...domain.ports import TokenStorageManager


class MemoryTokenStorageManager(TokenStorageManager):
    """
    In-process used-token store.

    Lost on restart and not shared between processes. Check and record run
    without yielding to the event loop, so marking is atomic per loop.
    """

    def __init__(self) -> None:
        self._used: Set[str] = set()

    async def is_token_used(self, token_hash: str) -> str:
        self._raise_if_used(token_hash)
        return token_hash

    async def mark_token_used(self, token_hash: str) -> None:
        self._raise_if_used(token_hash)
        self._used.add(token_hash)

    async def close(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self._used)

    def _raise_if_used(self, token_hash: str) -> None:
        if token_hash in self._used:
            raise ReplayError()
