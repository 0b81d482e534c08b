"""Catalog, season configuration and moderator membership queries"""
import logging
from typing import Optional

logger = logging.getLogger(__name__)


# ==========================================
# Achievements
# ==========================================

_ACHIEVEMENT_COLUMNS = """
    id, title, description, points, prerequisites, active, reward_item_id, reward_qty
"""


async def get_achievement(conn, achievement_id: str) -> Optional[dict]:
    """
    Get one achievement definition

    Returns:
        Achievement row dict, or None if it doesn't exist
    """
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            SELECT {_ACHIEVEMENT_COLUMNS}
            FROM achievements
            WHERE id = %s
            """,
            (achievement_id,)
        )
        row = await cur.fetchone()
        return dict(row) if row else None


async def list_achievements(conn, active_only: bool = True) -> list[dict]:
    """List achievement definitions ordered by id"""
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            SELECT {_ACHIEVEMENT_COLUMNS}
            FROM achievements
            WHERE active OR NOT %s
            ORDER BY id
            """,
            (active_only,)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


# ==========================================
# Tiers
# ==========================================

async def get_tiers(conn) -> list[dict]:
    """
    Get all tier definitions (active and inactive)

    The ladder is filtered and sorted by the caller.
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT id, title, required_points, active, reward, rarity, sort_order
            FROM gamepass_tiers
            ORDER BY required_points, id
            """
        )
        rows = await cur.fetchall()

    return [dict(row) for row in rows]


# ==========================================
# Season configuration
# ==========================================

async def get_current_season(conn, for_share: bool = False) -> Optional[int]:
    """
    Read the configured season number

    Args:
        conn: Open connection
        for_share: Take a shared row lock (inside a transaction) so a concurrent
            season rollover waits for the caller to commit

    Returns:
        Season number, or None if the config row doesn't exist
    """
    lock = " FOR SHARE" if for_share else ""
    async with conn.cursor() as cur:
        await cur.execute(f"SELECT season FROM gamepass_config WHERE id = 1{lock}")
        row = await cur.fetchone()
        return int(row["season"]) if row else None


async def set_current_season(conn, season: int) -> None:
    """Set the current season (admin tooling)"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO gamepass_config (id, season, updated_at)
            VALUES (1, %s, CURRENT_TIMESTAMP)
            ON CONFLICT (id) DO UPDATE
            SET season = EXCLUDED.season, updated_at = CURRENT_TIMESTAMP
            """,
            (season,)
        )
    logger.info(f"Season set to {season}")


# ==========================================
# Moderators
# ==========================================

async def is_moderator(conn, user_id: str) -> bool:
    """Check moderator membership"""
    async with conn.cursor() as cur:
        await cur.execute(
            "SELECT 1 FROM moderators WHERE user_id = %s",
            (user_id,)
        )
        return await cur.fetchone() is not None
