"""
JWT utilities for issuing and verifying access tokens, plus the FastAPI
dependency that turns a token into the authenticated user id.

Functions
---------
create_access_token(data: dict) -> str
    Creates a signed JWT access token with an expiration (`exp`) claim.
verify_token(token: str) -> str | None
    Verify a JWT's signature & expiration and return the subject (`sub`) if valid.
user_id_from_token(token: str | None) -> UUID | None
    `verify_token` plus conversion of the subject to a user id.
get_current_user_id(...) -> UUID
    Dependency reading the `token` cookie or an `Authorization: Bearer` header.

Environment contract (from `settings`)
--------------------------------------
SECRET_KEY : str
    HMAC signing key for JWTs.
ALGORITHM : str
    JWT signing algorithm (e.g., "HS256").
ACCESS_TOKEN_EXPIRE_MINUTES : int
    Token lifetime window in minutes.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import Cookie, Header
from jose import JWTError, jwt

from bartr.api.errors import AuthenticationRequired
from bartr.database.config.config import settings

logger = logging.getLogger(__name__)


def create_access_token(data: dict) -> str:
    """
    Create a signed JWT access token.

    Parameters
    ----------
    data : dict
        Claims to embed in the token; `sub` carries the user id.

    Returns
    -------
    str
        Encoded JWT string.

    Notes
    ----------
    - Adds an `exp` (expiration) claim calculated from ACCESS_TOKEN_EXPIRE_MINUTES.
    - Uses `settings.SECRET_KEY` and `settings.ALGORITHM` for signing.
    """
    encoding = data.copy()
    # exp is a NumericDate (seconds since epoch)
    expires = int(datetime.now(timezone.utc).timestamp()) + int(settings.ACCESS_TOKEN_EXPIRE_MINUTES) * 60
    encoding.update({"exp": expires})
    return jwt.encode(encoding, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[str]:
    """
    Verify a JWT and return its subject.

    Returns
    ----------
    str | None
        The `sub` claim if the token is valid; None on any JWTError
        (invalid signature, expired, malformed).
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload.get("sub")
    except JWTError as e:
        logger.info("Rejected token: %s", e)
        return None


def user_id_from_token(token: Optional[str]) -> Optional[UUID]:
    if not token:
        return None
    subject = verify_token(token)
    if subject is None:
        return None
    try:
        return UUID(subject)
    except ValueError:
        logger.info("Token subject is not a user id")
        return None


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


def get_current_user_id(
    token: Optional[str] = Cookie(None),
    authorization: Optional[str] = Header(None),
) -> UUID:
    """
    FastAPI dependency resolving the authenticated user.

    Raises
    ------
    AuthenticationRequired
        Missing, invalid or expired token.
    """
    raw = token or bearer_token(authorization)
    if not raw:
        raise AuthenticationRequired("Missing Token")
    user_id = user_id_from_token(raw)
    if user_id is None:
        raise AuthenticationRequired("Invalid or expired token")
    return user_id
