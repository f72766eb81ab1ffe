import json
from typing import Any, Dict, Mapping, Optional

import jwt
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    InvalidKeyError,
    InvalidSignatureError as JWTInvalidSignatureError,
    PyJWTError,
)
from jwt.utils import base64url_decode

from ...domain.constants import ALGORITHM
from ...domain.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    NotConfiguredError,
    SigningError,
    TokenExpiredError,
)
from ...domain.ports import TokenCodec


class PyJWTTokenCodec(TokenCodec):
    """
    Adapter implementing the TokenCodec port with PyJWT.

    Infrastructure layer:
    - Knows about JWT structure, signing and verification.
    - Holds no key material; keys are passed on every call.
    """

    def __init__(self, leeway_seconds: int = 0) -> None:
        self._leeway = leeway_seconds

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def sign(
        self,
        payload: Mapping[str, Any],
        private_key: Optional[bytes],
        algorithm: str = ALGORITHM,
    ) -> str:
        if not private_key:
            raise SigningError("No private key to sign with")

        try:
            return jwt.encode(dict(payload), private_key, algorithm=algorithm)
        except (PyJWTError, ValueError, TypeError) as exc:
            raise SigningError(f"Unable to sign token: {exc}") from exc

    def verify(self, token: str, public_key: Optional[bytes]) -> Dict[str, Any]:
        """
        Decode and validate a JWT token.

        Returns:
            Dict of token claims.

        Raises:
            NotConfiguredError
            TokenExpiredError
            InvalidSignatureError
            MalformedTokenError
        """
        if not public_key:
            raise NotConfiguredError("Public key wasn't loaded in load_keys call.")

        try:
            return jwt.decode(
                token,
                public_key,
                algorithms=[ALGORITHM],
                options={"require": ["exp"]},
                leeway=self._leeway,
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("Token has expired") from exc
        except JWTInvalidSignatureError as exc:
            raise InvalidSignatureError(f"Invalid token: {exc}") from exc
        except (InvalidKeyError, ValueError) as exc:
            # unusable public key
            raise InvalidSignatureError(f"Invalid token: {exc}") from exc
        except DecodeError as exc:
            if _only_signature_unreadable(token):
                raise InvalidSignatureError(f"Invalid token: {exc}") from exc
            raise MalformedTokenError(f"Invalid token: {exc}") from exc
        except PyJWTError as exc:
            raise MalformedTokenError(f"Invalid token: {exc}") from exc


def _only_signature_unreadable(token: str) -> bool:
    """
    True when header and claims segments decode to JSON objects, so the
    DecodeError came from the signature segment (e.g. a non-canonical
    base64 tail or a character outside the base64url alphabet).
    """
    segments = token.split(".")
    if len(segments) != 3:
        return False
    try:
        header = json.loads(base64url_decode(segments[0]))
        claims = json.loads(base64url_decode(segments[1]))
    except (ValueError, TypeError):
        return False
    return isinstance(header, dict) and isinstance(claims, dict)
