"""Player profile and moderator administration queries"""
import logging
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


async def get_profile(conn, user_id: str) -> Optional[dict]:
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT user_id, display_name, bio, email, updated_at
            FROM player_profiles
            WHERE user_id = %s
            """,
            (user_id,)
        )
        row = await cur.fetchone()
        return dict(row) if row else None


async def upsert_profile(
    conn,
    user_id: str,
    display_name: str,
    bio: str,
    email: Optional[str] = None
) -> dict:
    """
    Create or update a profile; a missing email keeps the stored one

    Returns:
        Profile row after the write
    """
    async with conn.cursor() as cur:
        await cur.execute(
            """
            INSERT INTO player_profiles (user_id, display_name, bio, email)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (user_id) DO UPDATE
            SET display_name = EXCLUDED.display_name,
                bio = EXCLUDED.bio,
                email = COALESCE(EXCLUDED.email, player_profiles.email),
                updated_at = CURRENT_TIMESTAMP
            RETURNING user_id, display_name, bio, email, updated_at
            """,
            (user_id, display_name, bio, email)
        )
        row = await cur.fetchone()
        return dict(row)


async def get_display_names(conn, user_ids: Iterable[str]) -> dict[str, str]:
    """Map user ids to display names (users without a profile are omitted)"""
    ids = list(user_ids)
    if not ids:
        return {}
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT user_id, display_name
            FROM player_profiles
            WHERE user_id = ANY(%s)
            """,
            (ids,)
        )
        rows = await cur.fetchall()
        return {row["user_id"]: row["display_name"] for row in rows}


async def add_moderator(conn, user_id: str) -> bool:
    """Grant moderator capability (admin tooling)"""
    async with conn.cursor() as cur:
        await cur.execute(
            "INSERT INTO moderators (user_id) VALUES (%s) ON CONFLICT (user_id) DO NOTHING",
            (user_id,)
        )
        return cur.rowcount == 1


async def remove_moderator(conn, user_id: str) -> bool:
    async with conn.cursor() as cur:
        await cur.execute("DELETE FROM moderators WHERE user_id = %s", (user_id,))
        return cur.rowcount == 1
