from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel

from .security import REFRESH_COOKIE_NAME, bearer_scheme, extract_token_from_request
from ...application.auth_service import AuthService
from ...domain.constants import TokenType
from ...domain.entities import TokenClaims
from ...domain.exceptions import (
    NotConfiguredError,
    ReplayError,
    SigningError,
    StorageUnavailableError,
    TokenExpiredError,
    VerificationError,
    WrongTokenTypeError,
)

logger = logging.getLogger(__name__)


class RefreshRequest(BaseModel):
    refresh_token: str | None = None


class RefreshResponse(BaseModel):
    token: str
    access_token: str
    token_type: str = "refresh"


@dataclass(slots=True)
class FastAPIAuthorization:
    """
    FastAPI integration for jwt_auth.

    Exposes dependencies that accept ACCESS tokens only, and a router for
    the refresh-token exchange.
    """

    auth: AuthService

    # ------------------------------------------------------------------ #
    # Base dependencies
    # ------------------------------------------------------------------ #

    async def _access_claims(self, token: str) -> TokenClaims:
        claims = await self.auth.verify_token(token)
        if claims.token_type is not TokenType.ACCESS:
            raise WrongTokenTypeError("Access token required")
        return claims

    async def get_current_claims(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> TokenClaims:
        """Dependency: Require a valid access token."""
        token = extract_token_from_request(request, credentials)
        try:
            return await self._access_claims(token)
        except TokenExpiredError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token expired",
            ) from exc
        except (VerificationError, WrongTokenTypeError) as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(exc),
            ) from exc

    async def get_optional_claims(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> TokenClaims | None:
        """Dependency: Optional authentication."""
        try:
            token = extract_token_from_request(request, credentials)
        except HTTPException:
            return None

        try:
            return await self._access_claims(token)
        except (VerificationError, WrongTokenTypeError):
            # bad token -> treat as anonymous
            return None

    # ------------------------------------------------------------------ #
    # Refresh exchange
    # ------------------------------------------------------------------ #

    def create_refresh_router(self, path: str = "/token/refresh") -> APIRouter:
        """
        Router with a POST endpoint exchanging a refresh token for a new
        refresh token and a new access token. The refresh token is taken
        from the JSON body, then the refresh-token cookie, then the
        Authorization header.

        Replays and invalid tokens are 401; an unreachable used-token store
        is 503 so clients know the request may be retried.
        """
        router = APIRouter()

        @router.post(path, response_model=RefreshResponse)
        async def refresh(request: Request, body: RefreshRequest | None = None) -> RefreshResponse:
            token = body.refresh_token if body else None
            # cookie before the Authorization header, which holds the access token
            token = token or request.cookies.get(REFRESH_COOKIE_NAME)
            token = token or extract_token_from_request(
                request, cookie_name=REFRESH_COOKIE_NAME
            )
            try:
                result = await self.auth.execute_refresh_token(token)
                access_token = await self.auth.create_access_token(result.claims.extra)
            except StorageUnavailableError as exc:
                raise HTTPException(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    detail=str(exc),
                ) from exc
            except (ReplayError, VerificationError, WrongTokenTypeError) as exc:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail=str(exc),
                ) from exc
            except (NotConfiguredError, SigningError) as exc:
                logger.error("Refresh failed on server configuration: %s", exc)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Token service misconfigured",
                ) from exc

            return RefreshResponse(
                token=result.token,
                access_token=access_token,
                token_type=result.claims.token_type.name.lower(),
            )

        return router
