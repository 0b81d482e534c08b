"""Earned records, seasonal progress, tier unlocks and inventory queries"""
import logging
from datetime import datetime
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


# ==========================================
# Earned achievements
# ==========================================

async def has_earned(conn, user_id: str, achievement_id: str) -> bool:
    """Check whether an Earned record exists"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT 1 FROM earned_achievements
            WHERE user_id = %s AND achievement_id = %s
            """,
            (user_id, achievement_id)
        )
        return await cur.fetchone() is not None


async def get_earned_ids(
    conn,
    user_id: str,
    achievement_ids: Optional[Iterable[str]] = None
) -> set[str]:
    """
    Get the ids of achievements a user has earned

    Args:
        conn: Open connection
        user_id: User id
        achievement_ids: Restrict the lookup to these ids (e.g. prerequisites)
    """
    async with conn.cursor() as cur:
        if achievement_ids is None:
            await cur.execute(
                "SELECT achievement_id FROM earned_achievements WHERE user_id = %s",
                (user_id,)
            )
        else:
            await cur.execute(
                """
                SELECT achievement_id FROM earned_achievements
                WHERE user_id = %s AND achievement_id = ANY(%s)
                """,
                (user_id, list(achievement_ids))
            )
        rows = await cur.fetchall()
        return {row["achievement_id"] for row in rows}


async def upsert_earned(conn, user_id: str, achievement_id: str, approved_by: str) -> bool:
    """
    Record an earned achievement; repeating the call is a no-op

    Returns:
        True if a new record was written
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO earned_achievements (user_id, achievement_id, approved_by)
            VALUES (%s, %s, %s)
            ON CONFLICT (user_id, achievement_id) DO NOTHING
            """,
            (user_id, achievement_id, approved_by)
        )
        return cur.rowcount == 1


async def count_earned(conn, user_id: str) -> int:
    async with conn.cursor() as cur:
        await cur.execute(
            "SELECT COUNT(*) AS total FROM earned_achievements WHERE user_id = %s",
            (user_id,)
        )
        row = await cur.fetchone()
        return int(row["total"]) if row else 0


# ==========================================
# Seasonal progress
# ==========================================

_PROGRESS_COLUMNS = "user_id, season, points, last_daily_at, updated_at"


async def get_progress(conn, user_id: str) -> Optional[dict]:
    """Get the stored progress row (season may be stale)"""
    async with conn.cursor() as cur:
        await cur.execute(
            f"SELECT {_PROGRESS_COLUMNS} FROM gamepass_progress WHERE user_id = %s",
            (user_id,)
        )
        row = await cur.fetchone()
        return dict(row) if row else None


async def lock_progress(conn, user_id: str) -> dict:
    """
    Load the progress row with a row lock, creating it first if needed

    A created row starts at season 0, which never matches a configured
    season, so the first XP write re-initialises it. Must run inside a
    transaction; concurrent writers on the same user queue behind the lock.
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO gamepass_progress (user_id, season, points)
            VALUES (%s, 0, 0)
            ON CONFLICT (user_id) DO NOTHING
            """,
            (user_id,)
        )
        await cur.execute(
            f"SELECT {_PROGRESS_COLUMNS} FROM gamepass_progress WHERE user_id = %s FOR UPDATE",
            (user_id,)
        )
        row = await cur.fetchone()
        return dict(row)


async def update_progress(
    conn,
    user_id: str,
    season: int,
    points: int,
    last_daily_at: Optional[datetime] = None
) -> dict:
    """
    Write season and points (and optionally the daily bonus timestamp)

    Returns:
        Updated progress row
    """
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            UPDATE gamepass_progress
            SET season = %s,
                points = %s,
                last_daily_at = COALESCE(%s::timestamptz, last_daily_at),
                updated_at = CURRENT_TIMESTAMP
            WHERE user_id = %s
            RETURNING {_PROGRESS_COLUMNS}
            """,
            (season, points, last_daily_at, user_id)
        )
        row = await cur.fetchone()
        return dict(row)


async def list_season_progress(conn, season: int, limit: int = 2000) -> list[dict]:
    """
    Get progress rows of one season ranked by points

    Returns:
        Rows ordered by points DESC, user_id
    """
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            SELECT {_PROGRESS_COLUMNS}
            FROM gamepass_progress
            WHERE season = %s
            ORDER BY points DESC, user_id
            LIMIT %s
            """,
            (season, limit)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


# ==========================================
# Tier unlock records
# ==========================================

async def get_unlocked_tier_ids(conn, user_id: str) -> set[str]:
    async with conn.cursor() as cur:
        await cur.execute(
            "SELECT tier_id FROM tier_unlocks WHERE user_id = %s",
            (user_id,)
        )
        rows = await cur.fetchall()
        return {row["tier_id"] for row in rows}


async def insert_tier_unlock(
    conn,
    user_id: str,
    tier_id: str,
    points_at_unlock: int,
    required_points: int,
    reward_label: str
) -> bool:
    """
    Record that a user reached a tier; the first record wins

    Returns:
        True if a new record was written
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO tier_unlocks (user_id, tier_id, points_at_unlock, required_points, reward_label)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (user_id, tier_id) DO NOTHING
            """,
            (user_id, tier_id, points_at_unlock, required_points, reward_label)
        )
        return cur.rowcount == 1


# ==========================================
# Inventory
# ==========================================

async def add_inventory_item(conn, user_id: str, item_id: str, qty: int) -> int:
    """
    Increment an inventory quantity (absent rows count as 0)

    Returns:
        New quantity
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO inventory_items (user_id, item_id, qty)
            VALUES (%s, %s, %s)
            ON CONFLICT (user_id, item_id) DO UPDATE
            SET qty = inventory_items.qty + EXCLUDED.qty,
                updated_at = CURRENT_TIMESTAMP
            RETURNING qty
            """,
            (user_id, item_id, qty)
        )
        row = await cur.fetchone()
        return int(row["qty"])
