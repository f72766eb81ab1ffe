from enum import IntEnum


ISSUER = "urn:auth"
ALGORITHM = "RS256"

# Used refresh-token markers are kept for two years (730 days).
USED_TOKEN_TTL_SECONDS = 63_072_000

DEFAULT_CACHE_PREFIX = "jwt-auth-token"


class TokenType(IntEnum):
    ACCESS = 0
    REFRESH = 1
