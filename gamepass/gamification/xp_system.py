"""
Seasonal XP System

Manages the current season, per-user seasonal XP and the two XP-granting
entry points (moderator approvals and the daily bonus).

Season Rules:
- A progress row whose stored season differs from the current season is
  stale: it reads as 0 XP, and the next XP grant overwrites it with
  (current season, granted points) instead of incrementing
- Stale rows are never deleted; they stay behind as history

XP Award Rules:
- Achievement approval: the achievement's points (moderation.py)
- Daily bonus: DAILY_BONUS_XP, at most once per DAILY_COOLDOWN_HOURS

Both grants run as a locked read-modify-write inside one transaction.
"""

from typing import Iterable, Optional, Union
from datetime import datetime, timedelta
import logging

from gamepass.config import DAILY_BONUS_XP, DAILY_COOLDOWN_HOURS, DEFAULT_SEASON
from gamepass.db import queries
from gamepass.db.connection import db
from gamepass.exceptions import FailedPreconditionError, UnauthenticatedError
from gamepass.gamification.rewards import format_reward_label
from gamepass.gamification.tier_ladder import TierLadder
from gamepass.models.progress import DailyBonusResult, Progress, ProgressView
from gamepass.utils.datetime_helpers import ensure_utc, format_remaining, now_utc

logger = logging.getLogger(__name__)

ProgressLike = Union[Progress, dict, None]


def _progress_fields(progress: ProgressLike) -> tuple[int, int]:
    if progress is None:
        return 0, 0
    if isinstance(progress, Progress):
        return progress.season, progress.points
    return int(progress.get("season") or 0), int(progress.get("points") or 0)


def resolve_season(configured: Optional[int]) -> int:
    """Configured season, or DEFAULT_SEASON when missing or not positive"""
    if configured is None or configured < 1:
        return DEFAULT_SEASON
    return configured


async def get_current_season(conn, for_share: bool = False) -> int:
    return resolve_season(await queries.get_current_season(conn, for_share=for_share))


def effective_xp(progress: ProgressLike, season: int) -> int:
    """XP that counts in `season`: 0 for missing or stale progress"""
    stored_season, points = _progress_fields(progress)
    if progress is None or stored_season != season:
        return 0
    return max(0, points)


def apply_season_points(progress: ProgressLike, season: int, delta: int) -> tuple[int, int]:
    """
    Compute the progress after granting `delta` XP in `season`

    Returns:
        (season, points): an increment when the stored season is current,
        otherwise a re-initialisation to `delta`
    """
    stored_season, points = _progress_fields(progress)
    if progress is None or stored_season != season:
        return season, delta
    return season, points + delta


async def grant_season_points(conn, user_id: str, points: int) -> dict:
    """
    Grant XP inside the caller's transaction

    Locks the user's progress row (creating it if needed) so concurrent
    grants serialise, then writes the season-aware result.

    Returns:
        Updated progress row
    """
    season = await get_current_season(conn, for_share=True)
    progress = await queries.lock_progress(conn, user_id)
    new_season, new_points = apply_season_points(progress, season, points)

    if progress.get("season") != season:
        logger.info(
            f"Season reset for user {user_id}: stored season {progress.get('season')} "
            f"-> {season}, points {progress.get('points')} -> {new_points}"
        )

    return await queries.update_progress(conn, user_id, new_season, new_points)


def daily_cooldown() -> timedelta:
    return timedelta(hours=DAILY_COOLDOWN_HOURS)


def next_daily_at(last_daily_at: Optional[datetime]) -> Optional[datetime]:
    """When the daily bonus becomes available again (None: available now)"""
    last = ensure_utc(last_daily_at)
    return last + daily_cooldown() if last is not None else None


def is_daily_available(last_daily_at: Optional[datetime], now: datetime) -> bool:
    available_at = next_daily_at(last_daily_at)
    return available_at is None or ensure_utc(now) >= available_at


async def claim_daily(user_id: Optional[str], now: Optional[datetime] = None) -> DailyBonusResult:
    """
    Grant the daily bonus

    The cooldown check and the XP write happen under the progress row lock
    in one transaction, so two simultaneous claims cannot both succeed.

    Raises:
        UnauthenticatedError: no caller
        FailedPreconditionError: cooldown not elapsed
    """
    if not user_id:
        raise UnauthenticatedError(operation="claim_daily")

    now = ensure_utc(now) or now_utc()

    async with db.transaction() as conn:
        season = await get_current_season(conn, for_share=True)
        progress = await queries.lock_progress(conn, user_id)

        if not is_daily_available(progress.get("last_daily_at"), now):
            available_at = next_daily_at(progress.get("last_daily_at"))
            raise FailedPreconditionError(
                message=f"Daily bonus already claimed, available again in {format_remaining(available_at - now)}",
                reason="daily_cooldown",
                context={"next_available_at": available_at.isoformat()},
                user_id=user_id,
                operation="claim_daily"
            )

        new_season, new_points = apply_season_points(progress, season, DAILY_BONUS_XP)
        updated = await queries.update_progress(
            conn, user_id, new_season, new_points, last_daily_at=now
        )

    logger.info(
        f"Awarded daily bonus of {DAILY_BONUS_XP} XP to user {user_id}. "
        f"Season {updated['season']} total: {updated['points']} XP"
    )

    return DailyBonusResult(
        user_id=user_id,
        season=updated["season"],
        xp_awarded=DAILY_BONUS_XP,
        points=updated["points"],
        claimed_at=now,
        next_available_at=now + daily_cooldown(),
    )


async def auto_unlock(
    user_id: str,
    xp: int,
    ladder: TierLadder,
    unlocked_ids: Optional[Iterable[str]] = None
) -> list[str]:
    """
    Record every reached tier that has no unlock record yet

    Best-effort: a failed write is logged and skipped, never raised.

    Returns:
        Ids of tiers recorded by this call
    """
    known = set(unlocked_ids or ())
    recorded = []

    for tier in ladder.reached(xp):
        if tier.id in known:
            continue
        try:
            async with db.connection() as conn:
                created = await queries.insert_tier_unlock(
                    conn,
                    user_id=user_id,
                    tier_id=tier.id,
                    points_at_unlock=xp,
                    required_points=tier.required_points,
                    reward_label=format_reward_label(tier),
                )
        except Exception as e:
            logger.warning(f"Auto-unlock of tier {tier.id} failed for user {user_id}: {e}")
            continue

        if created:
            recorded.append(tier.id)
            logger.info(f"User {user_id} unlocked tier {tier.id} at {xp} XP")

    return recorded


def build_progress_view(
    user_id: str,
    season: int,
    xp: int,
    ladder: TierLadder,
    unlocked_ids: Iterable[str] = ()
) -> ProgressView:
    return ProgressView(
        user_id=user_id,
        season=season,
        xp=xp,
        tier_index=ladder.tier_index(xp),
        total_tiers=len(ladder),
        next_tier=ladder.next_tier(xp),
        next_threshold=ladder.next_threshold(xp),
        xp_missing=ladder.xp_missing(xp),
        progress_fraction=ladder.progress_fraction(xp),
        completed=ladder.is_complete(xp),
        configured=ladder.configured,
        unlocked_tier_ids=sorted(set(unlocked_ids)),
    )


async def get_progress(user_id: str, unlock_tiers: bool = False) -> ProgressView:
    """
    Get a user's effective progress in the current season

    Args:
        user_id: User to look up
        unlock_tiers: Also run the auto-unlock pass (only for the user's own view)

    Returns:
        ProgressView; with no tiers configured it reports configured=False
        and zero progress rather than failing
    """
    async with db.connection() as conn:
        season = await get_current_season(conn)
        progress = await queries.get_progress(conn, user_id)
        ladder = TierLadder.from_rows(await queries.get_tiers(conn))
        unlocked_ids = await queries.get_unlocked_tier_ids(conn, user_id)

    xp = effective_xp(progress, season)

    if unlock_tiers:
        unlocked_ids |= set(await auto_unlock(user_id, xp, ladder, unlocked_ids))

    return build_progress_view(user_id, season, xp, ladder, unlocked_ids)
