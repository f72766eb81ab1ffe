from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_COOKIE_NAME = "access_token"
REFRESH_COOKIE_NAME = "refresh_token"


def _bearer_value(header: Optional[str]) -> Optional[str]:
    if not header or not header.startswith("Bearer "):
        return None
    return header.removeprefix("Bearer ").strip() or None


def extract_token_from_request(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
    cookie_name: str = ACCESS_COOKIE_NAME,
) -> str:
    """
    Find the caller's token, in order of preference:

      1. credentials resolved by `bearer_scheme`
      2. a raw `Authorization: Bearer` header
      3. the `cookie_name` cookie

    Raises HTTPException(401) if none is present.
    """
    token = (credentials.credentials or "").strip() if credentials else ""
    token = token or _bearer_value(request.headers.get("Authorization"))
    token = token or request.cookies.get(cookie_name)
    if token:
        return token

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
    )
