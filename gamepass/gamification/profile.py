"""
Player Profiles

Display name and bio editing, profile statistics, and display-name lookup
for views that list many players.
"""

import logging
from typing import Iterable, Optional

from gamepass.config import (
    BIO_MAX_LENGTH,
    DISPLAY_NAME_MAX_LENGTH,
    DISPLAY_NAME_MIN_LENGTH,
)
from gamepass.db import queries
from gamepass.db.connection import db
from gamepass.exceptions import InvalidArgumentError, UnauthenticatedError
from gamepass.gamification.claim_ledger import clip_text
from gamepass.gamification.xp_system import get_progress
from gamepass.models.claim import Claim, ClaimStatus
from gamepass.models.user import PlayerProfile, ProfileSummary

logger = logging.getLogger(__name__)

RECENT_CLAIMS_LIMIT = 10


class NameResolver:
    """
    Display-name cache scoped to one request

    Lookups are best-effort: when the profile table can't be read the
    names resolve to "" and the failure is logged.
    """

    def __init__(self):
        self._names: dict[str, str] = {}

    async def prefetch(self, conn, user_ids: Iterable[str]) -> None:
        missing = [uid for uid in dict.fromkeys(user_ids) if uid not in self._names]
        if not missing:
            return
        try:
            found = await queries.get_display_names(conn, missing)
        except Exception as e:
            logger.warning(f"Display name lookup failed for {len(missing)} users: {e}")
            found = {}
        for uid in missing:
            self._names[uid] = found.get(uid, "")

    def name(self, user_id: str) -> str:
        return self._names.get(user_id, "")


def validate_display_name(display_name: Optional[str], user_id: Optional[str] = None) -> str:
    name = (display_name or "").strip()
    if not DISPLAY_NAME_MIN_LENGTH <= len(name) <= DISPLAY_NAME_MAX_LENGTH:
        raise InvalidArgumentError(
            message=(
                f"Display name must be {DISPLAY_NAME_MIN_LENGTH}-"
                f"{DISPLAY_NAME_MAX_LENGTH} characters"
            ),
            field="display_name",
            value=name,
            user_id=user_id,
            operation="update_profile"
        )
    return name


async def update_profile(
    user_id: Optional[str],
    display_name: Optional[str],
    bio: Optional[str] = "",
    email: Optional[str] = None
) -> PlayerProfile:
    """
    Create or update the caller's profile

    Raises:
        UnauthenticatedError: no caller
        InvalidArgumentError: display name out of bounds
    """
    if not user_id:
        raise UnauthenticatedError(operation="update_profile")

    name = validate_display_name(display_name, user_id)

    async with db.connection() as conn:
        row = await queries.upsert_profile(
            conn,
            user_id=user_id,
            display_name=name,
            bio=clip_text(bio, BIO_MAX_LENGTH),
            email=email,
        )

    logger.info(f"Updated profile for user {user_id}")
    return PlayerProfile.model_validate(row)


async def get_profile_summary(user_id: Optional[str]) -> ProfileSummary:
    """Profile, earned count, recent claims and current progress"""
    if not user_id:
        raise UnauthenticatedError(operation="get_profile_summary")

    async with db.connection() as conn:
        row = await queries.get_profile(conn, user_id)
        earned_count = await queries.count_earned(conn, user_id)
        claim_rows = await queries.list_user_claims(conn, user_id, RECENT_CLAIMS_LIMIT)

    profile = PlayerProfile.model_validate(row) if row else PlayerProfile(user_id=user_id)
    claims = [Claim.model_validate(r) for r in claim_rows]

    return ProfileSummary(
        profile=profile,
        earned_count=earned_count,
        recent_claims=claims,
        pending_count=sum(1 for c in claims if c.status == ClaimStatus.PENDING),
        approved_count=sum(1 for c in claims if c.status == ClaimStatus.APPROVED),
        progress=await get_progress(user_id),
    )
