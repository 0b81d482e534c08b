"""
Achievement Catalog

Read-only view over achievement definitions. Definitions are maintained by
site admins; the core only reads them and reports, per user, whether each
one is earned, locked behind prerequisites, or claimable.
"""

import logging
from typing import Optional

from gamepass.db import queries
from gamepass.db.connection import db
from gamepass.models.achievement import (
    AchievementDef,
    CatalogEntry,
    CatalogState,
    ItemGrant,
)

logger = logging.getLogger(__name__)


def achievement_from_row(row: dict) -> AchievementDef:
    """Build an AchievementDef from an achievements row"""
    item_reward = None
    if row.get("reward_item_id") and (row.get("reward_qty") or 0) > 0:
        item_reward = ItemGrant(item_id=row["reward_item_id"], qty=int(row["reward_qty"]))

    return AchievementDef(
        id=row["id"],
        title=row.get("title") or "",
        description=row.get("description") or "",
        points=int(row.get("points") or 0),
        prerequisites=list(row.get("prerequisites") or []),
        active=row.get("active") is not False,
        item_reward=item_reward,
    )


def catalog_state(achievement: AchievementDef, earned_ids: set[str]) -> CatalogEntry:
    if achievement.id in earned_ids:
        return CatalogEntry(achievement=achievement, state=CatalogState.EARNED)

    missing = achievement.missing_prerequisites(earned_ids)
    if missing:
        return CatalogEntry(
            achievement=achievement,
            state=CatalogState.LOCKED,
            missing_prerequisites=missing,
        )
    return CatalogEntry(achievement=achievement, state=CatalogState.CLAIMABLE)


async def list_catalog(user_id: Optional[str] = None) -> list[CatalogEntry]:
    """
    Active achievements with the caller's state

    Args:
        user_id: Caller, or None for anonymous browsing (nothing earned)

    Returns:
        Catalog entries ordered by achievement id
    """
    async with db.connection() as conn:
        rows = await queries.list_achievements(conn, active_only=True)
        earned_ids = await queries.get_earned_ids(conn, user_id) if user_id else set()

    entries = [catalog_state(achievement_from_row(row), earned_ids) for row in rows]
    logger.debug(f"Catalog for {user_id or 'anonymous'}: {len(entries)} achievements")
    return entries
