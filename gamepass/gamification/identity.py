"""
Identity Gate

Resolves the caller from a bearer token and answers whether a user is a
moderator. Moderator capability comes only from the moderators table; any
moderator flag a client puts in its token is ignored.
"""

import logging
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt

from gamepass.config import JWT_ALGORITHM, JWT_SECRET_KEY
from gamepass.db import queries
from gamepass.db.connection import db
from gamepass.exceptions import ConfigurationError, PermissionDeniedError, UnauthenticatedError
from gamepass.models.user import Identity
from gamepass.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)


def _signing_key() -> str:
    """Token secret; without one no token is issued or trusted"""
    if not JWT_SECRET_KEY:
        logger.error("No JWT_SECRET_KEY configured - rejecting bearer tokens")
        raise ConfigurationError("JWT_SECRET_KEY is required", config_key="JWT_SECRET_KEY")
    return JWT_SECRET_KEY


def create_access_token(
    user_id: str,
    email: Optional[str] = None,
    name: Optional[str] = None,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Issue a signed token for user_id (local development and tests)"""
    issued_at = now_utc()
    payload = {
        "sub": user_id,
        "iat": issued_at,
        "exp": issued_at + expires_in,
    }
    if email:
        payload["email"] = email
    if name:
        payload["name"] = name
    return jwt.encode(payload, _signing_key(), algorithm=JWT_ALGORITHM)


def current_identity(token: Optional[str]) -> Optional[Identity]:
    """
    Resolve the caller from a bearer token

    Returns:
        Identity, or None for a missing, invalid or expired token. Absence of
        identity is not an error; callers degrade to read-only mode.

    Raises:
        ConfigurationError: a token was presented but no secret is configured
    """
    if not token:
        return None

    try:
        payload = jwt.decode(token, _signing_key(), algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        return None

    user_id = str(payload.get("sub") or "").strip()
    if not user_id:
        logger.info("Rejected bearer token without subject")
        return None

    return Identity(user_id=user_id, email=payload.get("email"), name=payload.get("name"))


def require_identity(identity: Optional[Identity], operation: Optional[str] = None) -> Identity:
    if identity is None:
        raise UnauthenticatedError(operation=operation)
    return identity


async def is_moderator(conn, user_id: Optional[str]) -> bool:
    """Membership check against the moderators table"""
    if not user_id:
        return False
    return await queries.is_moderator(conn, user_id)


async def check_moderator(user_id: Optional[str]) -> bool:
    """is_moderator() on its own connection (UI gating only)"""
    if not user_id:
        return False
    async with db.connection() as conn:
        return await is_moderator(conn, user_id)


async def require_moderator(conn, user_id: Optional[str], operation: Optional[str] = None) -> str:
    """
    Authoritative moderator check

    Raises:
        UnauthenticatedError: no caller
        PermissionDeniedError: caller is not a moderator
    """
    if not user_id:
        raise UnauthenticatedError(operation=operation)
    if not await is_moderator(conn, user_id):
        raise PermissionDeniedError(
            message=f"User {user_id} is not a moderator",
            resource=operation or "moderation",
            user_id=user_id,
            operation=operation,
        )
    return user_id
