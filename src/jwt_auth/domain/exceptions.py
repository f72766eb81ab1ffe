from enum import Enum


class JWTAuthError(Exception):
    """Base class for all jwt_auth errors."""
    pass


class NotConfiguredError(JWTAuthError):
    """Raised when the key needed for an operation was never loaded."""
    pass


class SigningError(JWTAuthError):
    """Raised when a token cannot be signed (e.g. malformed private key)."""
    pass


class VerificationReason(str, Enum):
    SIGNATURE_INVALID = "signature-invalid"
    EXPIRED = "expired"
    MALFORMED = "malformed"


class VerificationError(JWTAuthError):
    """Raised when a token fails verification. Check `reason` for the cause."""

    reason: VerificationReason = VerificationReason.MALFORMED

    def __init__(self, message: str, reason: VerificationReason | None = None) -> None:
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class InvalidSignatureError(VerificationError):
    """Raised when the token was altered or signed with another key."""
    reason = VerificationReason.SIGNATURE_INVALID


class TokenExpiredError(VerificationError):
    """Raised when token has expired."""
    reason = VerificationReason.EXPIRED


class MalformedTokenError(VerificationError):
    """Raised when token cannot be parsed."""
    reason = VerificationReason.MALFORMED


class WrongTokenTypeError(JWTAuthError):
    """Raised when an access token is used where a refresh token is required."""
    pass


class ReplayError(JWTAuthError):
    """Raised when a single-use refresh token has already been consumed."""

    def __init__(self, message: str = "Token Already Used") -> None:
        super().__init__(message)


class StorageUnavailableError(JWTAuthError):
    """Raised when the used-token store cannot be reached. Safe to retry."""
    pass
