"""
Moderation

Moderators approve or reject pending claims. Approving a claim:
- records the achievement as earned
- grants the achievement's points as seasonal XP
- hands out the achievement's item reward, if any
- marks the claim approved

All of it happens in a single transaction with the claim row locked, so a
review either applies completely or not at all, and two moderators racing
on the same claim cannot both succeed.
"""

import logging
import uuid
from typing import Optional, Union

from gamepass.config import NOTE_MAX_LENGTH
from gamepass.db import queries
from gamepass.db.connection import db
from gamepass.exceptions import (
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
)
from gamepass.gamification.achievement_system import achievement_from_row
from gamepass.gamification.claim_ledger import clip_text
from gamepass.gamification.identity import require_moderator
from gamepass.gamification.xp_system import grant_season_points
from gamepass.models.claim import ClaimStatus, ReviewAction, ReviewResult

logger = logging.getLogger(__name__)


def parse_action(action: Union[ReviewAction, str, None]) -> ReviewAction:
    try:
        return ReviewAction(action)
    except ValueError:
        raise InvalidArgumentError(
            message=f"Unknown review action: {action!r}",
            field="action",
            value=action,
            operation="review"
        )


def parse_claim_id(claim_id: Optional[str]) -> str:
    """Normalise a claim id; claim ids are UUIDs"""
    try:
        return str(uuid.UUID(str(claim_id or "").strip()))
    except ValueError:
        raise InvalidArgumentError(
            message=f"Malformed claim id: {claim_id!r}",
            field="claim_id",
            value=claim_id,
            operation="review"
        )


async def _approve(conn, reviewer_id: str, claim: dict, note: str) -> ReviewResult:
    user_id = claim["user_id"]
    achievement_id = claim["achievement_id"]

    row = await queries.get_achievement(conn, achievement_id)
    if not row:
        raise FailedPreconditionError(
            message=f"Achievement {achievement_id} no longer exists",
            reason="achievement_missing",
            user_id=reviewer_id,
            operation="review"
        )

    achievement = achievement_from_row(row)
    if not achievement.active:
        raise FailedPreconditionError(
            message=f"Achievement {achievement_id} is not active",
            reason="achievement_inactive",
            user_id=reviewer_id,
            operation="review"
        )

    if achievement.prerequisites:
        earned = await queries.get_earned_ids(conn, user_id, achievement.prerequisites)
        missing = achievement.missing_prerequisites(earned)
        if missing:
            raise FailedPreconditionError(
                message=f"Missing prerequisite: {missing[0]}",
                reason="missing_prerequisite",
                context={"missing": missing},
                user_id=reviewer_id,
                operation="review"
            )

    if await queries.has_earned(conn, user_id, achievement_id):
        raise FailedPreconditionError(
            message=f"User {user_id} already earned {achievement_id}",
            reason="already_earned",
            user_id=reviewer_id,
            operation="review"
        )

    await queries.upsert_earned(conn, user_id, achievement_id, approved_by=reviewer_id)
    progress = await grant_season_points(conn, user_id, achievement.points)

    item = achievement.item_reward
    if item is not None:
        await queries.add_inventory_item(conn, user_id, item.item_id, item.qty)

    await queries.mark_claim_reviewed(
        conn, claim["id"], ClaimStatus.APPROVED.value, note, reviewer_id
    )

    return ReviewResult(
        claim_id=claim["id"],
        user_id=user_id,
        achievement_id=achievement_id,
        status=ClaimStatus.APPROVED,
        points_granted=achievement.points,
        season=progress["season"],
        season_points=progress["points"],
        item_id=item.item_id if item else None,
        item_qty=item.qty if item else 0,
    )


async def review(
    reviewer_id: Optional[str],
    claim_id: Optional[str],
    action: Union[ReviewAction, str, None],
    note: Optional[str] = ""
) -> ReviewResult:
    """
    Approve or reject a pending claim

    Args:
        reviewer_id: Calling moderator
        claim_id: Claim to review
        action: "approve" or "reject"
        note: Optional moderator note (truncated to NOTE_MAX_LENGTH)

    Returns:
        ReviewResult describing what was applied

    Raises:
        InvalidArgumentError: unknown action or malformed claim id
        UnauthenticatedError, PermissionDeniedError: caller is not a moderator
        NotFoundError: no such claim
        FailedPreconditionError: claim not pending, achievement missing or
            inactive, prerequisite missing, achievement already earned
    """
    action = parse_action(action)
    claim_id = parse_claim_id(claim_id)
    note = clip_text(note, NOTE_MAX_LENGTH)

    async with db.transaction() as conn:
        await require_moderator(conn, reviewer_id, operation="review")

        claim = await queries.get_claim_for_update(conn, claim_id)
        if not claim:
            raise NotFoundError(
                message=f"Claim {claim_id} does not exist",
                record_type="Claim",
                record_id=claim_id,
                user_id=reviewer_id,
                operation="review"
            )

        if claim["status"] != ClaimStatus.PENDING.value:
            raise FailedPreconditionError(
                message=f"Claim {claim_id} is already {claim['status']}",
                reason="not_pending",
                context={"status": claim["status"]},
                user_id=reviewer_id,
                operation="review"
            )

        if action == ReviewAction.REJECT:
            await queries.mark_claim_reviewed(
                conn, claim_id, ClaimStatus.REJECTED.value, note, reviewer_id
            )
            result = ReviewResult(
                claim_id=claim_id,
                user_id=claim["user_id"],
                achievement_id=claim["achievement_id"],
                status=ClaimStatus.REJECTED,
            )
        else:
            result = await _approve(conn, reviewer_id, claim, note)

    logger.info(
        f"Moderator {reviewer_id} {result.status.value} claim {claim_id} "
        f"({result.achievement_id} for user {result.user_id}, +{result.points_granted} XP)"
    )
    return result
