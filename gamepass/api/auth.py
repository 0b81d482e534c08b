"""API authentication using bearer JWTs"""
import logging
from typing import Optional
from fastapi import Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from gamepass.gamification.identity import current_identity
from gamepass.models.user import Identity

logger = logging.getLogger(__name__)

# Missing credentials are not an error: anonymous callers get read-only access
security = HTTPBearer(auto_error=False)


async def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Optional[Identity]:
    """
    Resolve the caller from the Authorization header

    Returns:
        Identity, or None for anonymous callers and unusable tokens
    """
    if credentials is None:
        return None

    identity = current_identity(credentials.credentials)
    if identity:
        logger.debug(f"Authenticated caller {identity.user_id}")
    return identity
