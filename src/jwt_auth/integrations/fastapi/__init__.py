from __future__ import annotations

from .deps import FastAPIAuthorization, RefreshRequest, RefreshResponse
from .security import bearer_scheme, extract_token_from_request
from ...application.auth_service import AuthService


def create_fastapi_auth(auth: AuthService) -> FastAPIAuthorization:
    """
    High-level helper for FastAPI apps:

        auth = await create_auth_service(settings_from_env())
        fastapi_auth = create_fastapi_auth(auth)

        app.include_router(fastapi_auth.create_refresh_router())

        @app.get("/me")
        async def me(claims: TokenClaims = Depends(fastapi_auth.get_current_claims)):
            return claims.extra
    """
    return FastAPIAuthorization(auth=auth)


__all__ = [
    "FastAPIAuthorization",
    "RefreshRequest",
    "RefreshResponse",
    "bearer_scheme",
    "create_fastapi_auth",
    "extract_token_from_request",
]
