from __future__ import annotations

import asyncio
import dataclasses
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from ..domain.constants import TokenType
from ..domain.entities import Options, RefreshResult, TokenClaims, TokenPair
from ..domain.exceptions import (
    MalformedTokenError,
    NotConfiguredError,
    ReplayError,
    WrongTokenTypeError,
)
from ..domain.ports import TokenCodec, TokenStorageManager
from ..domain.value_objects import TokenHash

logger = logging.getLogger(__name__)


class AuthService:
    """
    Issues, verifies and refreshes signed tokens.

    Construct one per process and hand it to request handlers. Key material
    and options are mutable; every token creation reads them at call time.

    Refresh tokens are single use: `execute_refresh_token` consumes the
    presented token through the storage manager before issuing a new one.
    Without a storage manager, replay checks always pass and marking is a
    no-op.
    """

    def __init__(
            self,
            codec: TokenCodec,
            storage: Optional[TokenStorageManager] = None,
            options: Optional[Options] = None,
    ) -> None:
        self._codec = codec
        self._storage = storage
        self._options = options or Options()
        self._private_key: Optional[bytes] = None
        self._public_key: Optional[bytes] = None

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    def init(self, options: Optional[Mapping[str, Any] | Options] = None, **overrides: Any) -> None:
        """
        Merge overrides into the current options.

        Raises:
            TypeError for unknown option names.
        """
        if isinstance(options, Options):
            changes = dataclasses.asdict(options)
        else:
            changes = dict(options or {})
        changes.update(overrides)
        self._options = dataclasses.replace(self._options, **changes)

    def get_options(self) -> Options:
        return self._options

    async def load_keys(
            self,
            private_key_path: str | Path | None = None,
            public_key_path: str | Path | None = None,
    ) -> bool:
        """
        Read PEM keys from disk, private first. A path left as None keeps
        the currently loaded key.

        Raises:
            OSError (e.g. FileNotFoundError) if a given path can't be read.
            A private key read before the failure stays loaded.
        """
        if private_key_path:
            self._private_key = await asyncio.to_thread(Path(private_key_path).read_bytes)
        if public_key_path:
            self._public_key = await asyncio.to_thread(Path(public_key_path).read_bytes)
        return True

    def get_private_key(self) -> Optional[bytes]:
        return self._private_key

    def get_public_key(self) -> Optional[bytes]:
        return self._public_key

    def set_token_storage_manager(self, manager: Optional[TokenStorageManager]) -> None:
        self._storage = manager

    async def close(self) -> None:
        """Release the storage manager's connections."""
        if self._storage is not None:
            await self._storage.close()

    # ------------------------------------------------------------------ #
    # Issuance & verification
    # ------------------------------------------------------------------ #

    async def create_token(self, payload: Mapping[str, Any], token_type: TokenType) -> str:
        """
        Sign `payload` with issuer, exp and token_type claims added.
        Caller fields with those names are overwritten.

        Raises:
            NotConfiguredError
            SigningError
        """
        if not self._private_key:
            raise NotConfiguredError("Private key wasn't loaded in load_keys call.")

        token_type = TokenType(token_type)
        claims = TokenClaims.issue(
            payload,
            token_type,
            self._options.lifetime(token_type),
        )
        token = self._codec.sign(claims.to_payload(), self._private_key)
        logger.debug("Issued %s token expiring at %s", token_type.name.lower(), claims.exp)
        return token

    async def create_access_token(self, payload: Mapping[str, Any]) -> str:
        return await self.create_token(payload, TokenType.ACCESS)

    async def create_refresh_token(self, payload: Mapping[str, Any]) -> str:
        return await self.create_token(payload, TokenType.REFRESH)

    async def create_token_pair(self, payload: Mapping[str, Any]) -> TokenPair:
        return TokenPair(
            access_token=await self.create_access_token(payload),
            refresh_token=await self.create_refresh_token(payload),
        )

    async def verify_token(self, token: str) -> TokenClaims:
        """
        Raises:
            NotConfiguredError
            InvalidSignatureError
            TokenExpiredError
            MalformedTokenError
        """
        if not self._public_key:
            raise NotConfiguredError("Public key wasn't loaded in load_keys call.")

        decoded = self._codec.verify(token, self._public_key)
        try:
            return TokenClaims.from_mapping(decoded)
        except ValueError as exc:
            raise MalformedTokenError(f"Invalid token: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Replay prevention
    # ------------------------------------------------------------------ #

    def get_token_hash(self, token: str) -> str:
        return str(TokenHash.of(token))

    async def check_if_refresh_token_used(self, token: str) -> str:
        """
        Return the token's hash if it was never consumed. Does not mark it.

        Raises:
            ReplayError
            StorageUnavailableError
        """
        token_hash = self.get_token_hash(token)
        if self._storage is None:
            return token_hash
        return await self._storage.is_token_used(token_hash)

    async def mark_refresh_token_used(self, token_hash: str) -> None:
        if self._storage is None:
            return
        await self._storage.mark_token_used(token_hash)

    async def execute_refresh_token(self, token: str) -> RefreshResult:
        """
        Consume a refresh token and issue its replacement.

        Steps, each failing fast:
          1. verify signature and expiry
          2. require token_type == REFRESH
          3. atomically check and mark the token hash as used
          4. re-sign the original payload with fresh reserved claims

        Raises:
            NotConfiguredError
            VerificationError (and subclasses)
            WrongTokenTypeError
            ReplayError
            StorageUnavailableError
            SigningError
        """
        claims = await self.verify_token(token)

        if claims.token_type is not TokenType.REFRESH:
            logger.warning("Refresh attempted with a %s token", claims.token_type.name.lower())
            raise WrongTokenTypeError(
                f"Expected a refresh token, got {claims.token_type.name.lower()}"
            )

        token_hash = self.get_token_hash(token)
        try:
            await self.mark_refresh_token_used(token_hash)
        except ReplayError:
            logger.warning("Refresh token replay rejected (hash %s)", token_hash)
            raise

        new_token = await self.create_token(claims.extra, claims.token_type)
        return RefreshResult(claims=claims, token=new_token)
