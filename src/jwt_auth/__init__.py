"""
jwt_auth

RS256 token issuance, verification and refresh, with single-use refresh
tokens enforced through a pluggable used-token store (in-memory or Redis).
"""

__version__ = "0.1.0"

from .domain.constants import ISSUER, USED_TOKEN_TTL_SECONDS, TokenType
from .domain.entities import Options, RefreshResult, TokenClaims, TokenPair
from .domain.exceptions import (
    JWTAuthError,
    NotConfiguredError,
    SigningError,
    VerificationError,
    VerificationReason,
    InvalidSignatureError,
    TokenExpiredError,
    MalformedTokenError,
    WrongTokenTypeError,
    ReplayError,
    StorageUnavailableError,
)
from .domain.value_objects import TokenHash
from .domain.ports import TokenCodec, TokenStorageManager

from .application.auth_service import AuthService

from .adapters.jwt.codec import PyJWTTokenCodec
from .adapters.storage.memory_store import MemoryTokenStorageManager
from .adapters.storage.redis_store import RedisTokenStorageManager

from .config.settings import AuthSettings, RedisStorageSettings
from .config.env import settings_from_env
from .integrations.common.auth_factory import (
    create_auth_service,
    create_token_storage_manager,
)

__all__ = [
    "__version__",
    # domain core
    "ISSUER",
    "USED_TOKEN_TTL_SECONDS",
    "TokenType",
    "Options",
    "TokenClaims",
    "TokenPair",
    "RefreshResult",
    "TokenHash",
    "TokenCodec",
    "TokenStorageManager",
    # exceptions
    "JWTAuthError",
    "NotConfiguredError",
    "SigningError",
    "VerificationError",
    "VerificationReason",
    "InvalidSignatureError",
    "TokenExpiredError",
    "MalformedTokenError",
    "WrongTokenTypeError",
    "ReplayError",
    "StorageUnavailableError",
    # service
    "AuthService",
    # adapters
    "PyJWTTokenCodec",
    "MemoryTokenStorageManager",
    "RedisTokenStorageManager",
    # wiring
    "AuthSettings",
    "RedisStorageSettings",
    "settings_from_env",
    "create_auth_service",
    "create_token_storage_manager",
]
