"""
Season Report

Moderator view of a season's standings: every player whose progress row
belongs to the season, ranked by XP, with their tier and a status chip.
"""

import logging
from typing import Optional

from gamepass.config import SEASON_REPORT_LIMIT
from gamepass.db import queries
from gamepass.db.connection import db
from gamepass.exceptions import InvalidArgumentError
from gamepass.gamification.identity import require_moderator
from gamepass.gamification.profile import NameResolver
from gamepass.gamification.tier_ladder import TierLadder
from gamepass.gamification.xp_system import get_current_season
from gamepass.models.progress import SeasonReport, SeasonReportRow

logger = logging.getLogger(__name__)


def build_report_rows(
    progress_rows: list[dict],
    ladder: TierLadder,
    names: NameResolver
) -> list[SeasonReportRow]:
    """Rank rows by points (desc), ties by user id"""
    ordered = sorted(progress_rows, key=lambda r: (-int(r.get("points") or 0), r["user_id"]))

    rows = []
    for rank, row in enumerate(ordered, start=1):
        xp = max(0, int(row.get("points") or 0))
        rows.append(SeasonReportRow(
            rank=rank,
            user_id=row["user_id"],
            display_name=names.name(row["user_id"]),
            xp=xp,
            tier_index=ladder.tier_index(xp),
            next_threshold=ladder.next_threshold(xp),
            status=ladder.report_status(xp),
        ))
    return rows


async def get_season_report(
    reviewer_id: Optional[str],
    season: Optional[int] = None,
    limit: Optional[int] = None
) -> SeasonReport:
    """
    Build the standings of one season

    Args:
        reviewer_id: Calling moderator
        season: Season to report (default: current season)
        limit: Maximum number of players (default SEASON_REPORT_LIMIT)

    Raises:
        UnauthenticatedError, PermissionDeniedError: caller is not a moderator
        InvalidArgumentError: season is not positive
    """
    if season is not None and season < 1:
        raise InvalidArgumentError(
            message="season must be a positive integer",
            field="season",
            value=season,
            user_id=reviewer_id,
            operation="get_season_report"
        )

    limit = max(1, min(int(limit or SEASON_REPORT_LIMIT), SEASON_REPORT_LIMIT))
    names = NameResolver()

    async with db.connection() as conn:
        await require_moderator(conn, reviewer_id, operation="get_season_report")

        if season is None:
            season = await get_current_season(conn)

        ladder = TierLadder.from_rows(await queries.get_tiers(conn))
        progress_rows = await queries.list_season_progress(conn, season, limit)
        await names.prefetch(conn, (r["user_id"] for r in progress_rows))

    rows = build_report_rows(progress_rows, ladder, names)

    logger.info(f"Season {season} report for moderator {reviewer_id}: {len(rows)} players")

    return SeasonReport(
        season=season,
        players=len(rows),
        max_xp=max((r.xp for r in rows), default=0),
        max_tier_index=max((r.tier_index for r in rows), default=0),
        total_tiers=len(ladder),
        rows=rows,
    )
