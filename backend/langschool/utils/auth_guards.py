"""
Authentication Guards

Request dependencies that establish who is calling:
- Bearer header parsing and token verification
- Principal-must-match-email checks for self-scoped listings

Guards raise before any handler body runs, so a rejected request never
reaches the store.
"""

from typing import Optional

from fastapi import Depends, Header

from langschool.errors import Forbidden, Unauthenticated
from langschool.services.identity_service import Principal, get_principal_verifier

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Return the token part of an ``Authorization: Bearer <token>`` header.

    Raises:
        Unauthenticated: header missing, not Bearer-prefixed, or token empty
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise Unauthenticated()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthenticated()
    return token


def require_principal(
    authorization: Optional[str] = Header(default=None),
    verifier=Depends(get_principal_verifier),
) -> Principal:
    """FastAPI dependency: verified Principal or 401."""
    token = extract_bearer_token(authorization)
    return verifier.verify(token)


def require_self(principal: Principal, email: str) -> None:
    """
    Require that the caller is acting on their own email.

    Raises:
        Forbidden: the principal's email differs from ``email``
    """
    if principal.email != (email or "").strip():
        raise Forbidden()
