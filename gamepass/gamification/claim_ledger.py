"""
Claim Ledger

Users submit claims ("requests") for achievements together with evidence;
moderators later review them (see moderation.py).

Submission rules:
- The achievement must exist and be active
- The user must not have earned it already
- The user must not have another pending claim for it

The duplicate-pending check is a plain read before the insert, so two
simultaneous submissions can both land. That is tolerated: approving the
second one fails because the achievement is already earned.
"""

import logging
from typing import Optional

from gamepass.config import EVIDENCE_MAX_LENGTH, MAX_LIST_LIMIT
from gamepass.db import queries
from gamepass.db.connection import db
from gamepass.exceptions import (
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
    UnauthenticatedError,
)
from gamepass.gamification.achievement_system import achievement_from_row
from gamepass.gamification.identity import require_moderator
from gamepass.models.claim import Claim

logger = logging.getLogger(__name__)


def clip_text(value: Optional[str], max_length: int) -> str:
    """Strip and truncate free text to max_length characters"""
    return str(value or "").strip()[:max_length]


def clamp_limit(limit: Optional[int], default: int) -> int:
    if limit is None:
        return default
    return max(1, min(int(limit), MAX_LIST_LIMIT))


async def submit_claim(
    user_id: Optional[str],
    achievement_id: Optional[str],
    evidence_text: str = "",
    evidence_url: str = ""
) -> Claim:
    """
    Create a pending claim

    Args:
        user_id: Submitting user (None if not logged in)
        achievement_id: Claimed achievement
        evidence_text: Free-text evidence (truncated to EVIDENCE_MAX_LENGTH)
        evidence_url: Optional link (truncated to EVIDENCE_MAX_LENGTH)

    Returns:
        The new pending claim

    Raises:
        UnauthenticatedError, InvalidArgumentError, NotFoundError,
        FailedPreconditionError
    """
    if not user_id:
        raise UnauthenticatedError(operation="submit_claim")

    achievement_id = (achievement_id or "").strip()
    if not achievement_id:
        raise InvalidArgumentError(
            message="achievement id is required",
            field="achievement_id",
            value=achievement_id,
            user_id=user_id,
            operation="submit_claim"
        )

    async with db.connection() as conn:
        row = await queries.get_achievement(conn, achievement_id)
        if not row:
            raise NotFoundError(
                message=f"Achievement {achievement_id} does not exist",
                record_type="Achievement",
                record_id=achievement_id,
                user_id=user_id,
                operation="submit_claim"
            )

        achievement = achievement_from_row(row)
        if not achievement.active:
            raise FailedPreconditionError(
                message=f"Achievement {achievement_id} is not active",
                reason="achievement_inactive",
                user_id=user_id,
                operation="submit_claim"
            )

        if await queries.has_earned(conn, user_id, achievement_id):
            raise FailedPreconditionError(
                message=f"Achievement {achievement_id} already earned",
                reason="already_earned",
                user_id=user_id,
                operation="submit_claim"
            )

        if await queries.has_pending_claim(conn, user_id, achievement_id):
            raise FailedPreconditionError(
                message=f"A claim for {achievement_id} is already under review",
                reason="duplicate_pending",
                user_id=user_id,
                operation="submit_claim"
            )

        claim_row = await queries.insert_claim(
            conn,
            user_id=user_id,
            achievement_id=achievement_id,
            achievement_title=achievement.display_title,
            evidence_text=clip_text(evidence_text, EVIDENCE_MAX_LENGTH),
            evidence_url=clip_text(evidence_url, EVIDENCE_MAX_LENGTH),
        )

    claim = Claim.model_validate(claim_row)
    logger.info(f"User {user_id} submitted claim {claim.id} for {achievement_id}")
    return claim


async def list_claims(user_id: str, limit: Optional[int] = 50) -> list[Claim]:
    """A user's claims, newest first"""
    async with db.connection() as conn:
        rows = await queries.list_user_claims(conn, user_id, clamp_limit(limit, 50))
    return [Claim.model_validate(row) for row in rows]


async def list_pending_claims(reviewer_id: Optional[str], limit: Optional[int] = 100) -> list[Claim]:
    """
    Moderation queue, newest first

    Raises:
        UnauthenticatedError, PermissionDeniedError: caller is not a moderator
    """
    async with db.connection() as conn:
        await require_moderator(conn, reviewer_id, operation="list_pending_claims")
        rows = await queries.list_pending_claims(conn, clamp_limit(limit, 100))
    return [Claim.model_validate(row) for row in rows]
