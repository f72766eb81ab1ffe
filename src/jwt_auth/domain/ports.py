from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from .constants import ALGORITHM


class TokenCodec(Protocol):
    """
    Port for signing and verifying compact JWS tokens.

    Implementations live in the adapters layer (e.g. the PyJWT codec).
    """

    def sign(
            self,
            payload: Mapping[str, Any],
            private_key: Optional[bytes],
            algorithm: str = ALGORITHM,
    ) -> str:
        """
        Raises:
          - NotConfiguredError if no private key is given
          - SigningError if the key or payload is rejected
        """
        ...

    def verify(self, token: str, public_key: Optional[bytes]) -> Mapping[str, Any]:
        """
        Verify signature and expiry, and return the decoded claims.

        Raises:
          - NotConfiguredError if no public key is given
          - InvalidSignatureError, TokenExpiredError or MalformedTokenError
        """
        ...


class TokenStorageManager(Protocol):
    """
    Port for tracking which refresh-token hashes have been consumed.
    """

    async def is_token_used(self, token_hash: str) -> str:
        """
        Resolve with `token_hash` if it was never marked.

        Raises:
          - ReplayError if it was
          - StorageUnavailableError if the backing store fails
        """
        ...

    async def mark_token_used(self, token_hash: str) -> None:
        """
        Record `token_hash` as used. Check and record must be atomic, so a
        second mark of the same hash always raises ReplayError.
        """
        ...

    async def close(self) -> None:
        """Release connections held by the store."""
        ...
