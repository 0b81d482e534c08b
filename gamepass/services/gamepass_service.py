"""
GamePassService - Game Pass Business Logic

Entry point used by the API layer. Resolves the caller's identity into the
user ids the gamification modules work with, and applies the per-endpoint
access rules (own data, self-or-moderator, moderator only).
"""

import logging
from typing import Any, Dict, List, Optional

from gamepass import gamification
from gamepass.exceptions import PermissionDeniedError
from gamepass.gamification.identity import check_moderator, require_identity
from gamepass.models.achievement import CatalogEntry
from gamepass.models.claim import Claim, ReviewResult
from gamepass.models.progress import DailyBonusResult, ProgressView, SeasonReport
from gamepass.models.user import Identity, PlayerProfile, ProfileSummary

logger = logging.getLogger(__name__)


class GamePassService:
    """
    Service for the Game Pass.

    Responsibilities:
    - Claim submission and listing
    - Moderation queue and reviews
    - Seasonal progress, daily bonus and tier unlocks
    - Season report and player profiles
    """

    def __init__(self, db_connection):
        """
        Initialize GamePassService.

        Args:
            db_connection: Database connection instance
        """
        self.db = db_connection
        logger.debug("GamePassService initialized")

    @staticmethod
    def _user_id(identity: Optional[Identity]) -> Optional[str]:
        return identity.user_id if identity else None

    async def whoami(self, identity: Optional[Identity]) -> Dict[str, Any]:
        """Caller id and moderator flag, for UI gating only"""
        if identity is None:
            return {"user_id": None, "is_moderator": False}
        return {
            "user_id": identity.user_id,
            "is_moderator": await check_moderator(identity.user_id),
        }

    async def catalog(self, identity: Optional[Identity]) -> List[CatalogEntry]:
        return await gamification.list_catalog(self._user_id(identity))

    async def submit_claim(
        self,
        identity: Optional[Identity],
        achievement_id: str,
        evidence_text: str = "",
        evidence_url: str = ""
    ) -> Claim:
        return await gamification.submit_claim(
            self._user_id(identity), achievement_id, evidence_text, evidence_url
        )

    async def my_claims(self, identity: Optional[Identity], limit: Optional[int] = 50) -> List[Claim]:
        caller = require_identity(identity, operation="list_claims")
        return await gamification.list_claims(caller.user_id, limit)

    async def user_claims(
        self,
        identity: Optional[Identity],
        user_id: str,
        limit: Optional[int] = 50
    ) -> List[Claim]:
        """Claims of user_id; visible to that user and to moderators"""
        caller = require_identity(identity, operation="list_claims")
        if caller.user_id != user_id and not await check_moderator(caller.user_id):
            raise PermissionDeniedError(
                message=f"User {caller.user_id} may not read claims of {user_id}",
                resource="claims",
                user_id=caller.user_id,
                operation="list_claims"
            )
        return await gamification.list_claims(user_id, limit)

    async def moderation_queue(self, identity: Optional[Identity], limit: Optional[int] = 100) -> List[Claim]:
        return await gamification.list_pending_claims(self._user_id(identity), limit)

    async def review(
        self,
        identity: Optional[Identity],
        claim_id: str,
        action: str,
        note: str = ""
    ) -> ReviewResult:
        return await gamification.review(self._user_id(identity), claim_id, action, note)

    async def claim_daily(self, identity: Optional[Identity]) -> DailyBonusResult:
        return await gamification.claim_daily(self._user_id(identity))

    async def my_progress(self, identity: Optional[Identity]) -> ProgressView:
        """Caller's progress; also records any newly reached tiers"""
        caller = require_identity(identity, operation="get_progress")
        return await gamification.get_progress(caller.user_id, unlock_tiers=True)

    async def user_progress(self, user_id: str) -> ProgressView:
        return await gamification.get_progress(user_id)

    async def season_report(
        self,
        identity: Optional[Identity],
        season: Optional[int] = None,
        limit: Optional[int] = None
    ) -> SeasonReport:
        return await gamification.get_season_report(self._user_id(identity), season, limit)

    async def profile(self, identity: Optional[Identity]) -> ProfileSummary:
        return await gamification.get_profile_summary(self._user_id(identity))

    async def update_profile(
        self,
        identity: Optional[Identity],
        display_name: str,
        bio: str = ""
    ) -> PlayerProfile:
        email = identity.email if identity else None
        return await gamification.update_profile(self._user_id(identity), display_name, bio, email)
