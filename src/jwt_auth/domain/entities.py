from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from uuid import uuid4

from .constants import ISSUER, TokenType

RESERVED_CLAIMS = ("issuer", "exp", "token_type", "jti")


@dataclass(slots=True)
class Options:
    """
    Process-wide token lifetimes, in seconds.

    Read at issuance time, so changes apply to the next token created.
    """
    token_expiration_in_seconds: int = 3600
    refresh_token_expiration_in_seconds: int = 30 * 24 * 3600

    def lifetime(self, token_type: TokenType) -> int:
        if token_type is TokenType.REFRESH:
            return self.refresh_token_expiration_in_seconds
        return self.token_expiration_in_seconds


@dataclass(slots=True)
class TokenClaims:
    """
    Claims carried by a token.

    Reserved claims are named fields; everything the caller supplied lives
    in `extra`. When serialised, reserved claims win over `extra` keys of
    the same name.
    """
    exp: int
    token_type: TokenType
    issuer: str = ISSUER
    # unique per issuance, so two tokens signed in the same second never share a hash
    jti: Optional[str] = field(default_factory=lambda: uuid4().hex)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def issue(
            cls,
            payload: Mapping[str, Any],
            token_type: TokenType,
            lifetime_seconds: int,
            now: Optional[float] = None,
    ) -> TokenClaims:
        issued_at = time.time() if now is None else now
        extra = {k: v for k, v in payload.items() if k not in RESERVED_CLAIMS}
        return cls(
            exp=int(issued_at) + lifetime_seconds,
            token_type=token_type,
            extra=extra,
        )

    @classmethod
    def from_mapping(cls, claims: Mapping[str, Any]) -> TokenClaims:
        """Build from a decoded payload. Raises ValueError on bad reserved claims."""
        try:
            token_type = TokenType(claims["token_type"])
            exp = int(claims["exp"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Missing or invalid reserved claim: {exc}") from exc

        return cls(
            exp=exp,
            token_type=token_type,
            issuer=str(claims.get("issuer", ISSUER)),
            jti=claims.get("jti"),
            extra={k: v for k, v in claims.items() if k not in RESERVED_CLAIMS},
        )

    def to_payload(self) -> Dict[str, Any]:
        payload = dict(self.extra)
        payload.update(
            issuer=self.issuer,
            exp=self.exp,
            token_type=int(self.token_type),
        )
        if self.jti is not None:
            payload["jti"] = self.jti
        return payload

    # --- Mapping-style shortcuts over the full claim set -----------------

    def __getitem__(self, key: str) -> Any:
        return self.to_payload()[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.to_payload().get(key, default)


@dataclass(frozen=True, slots=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class RefreshResult:
    """
    Outcome of a successful refresh: the consumed token's claims and the
    newly issued token.
    """
    claims: TokenClaims
    token: str
