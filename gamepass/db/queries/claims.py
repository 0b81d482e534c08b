"""Claim ("request") queries"""
import logging
from typing import Optional

logger = logging.getLogger(__name__)

_CLAIM_COLUMNS = """
    id::text AS id, user_id, achievement_id, achievement_title, status,
    evidence_text, evidence_url, created_at, reviewed_at, reviewed_by, note
"""


async def insert_claim(
    conn,
    user_id: str,
    achievement_id: str,
    achievement_title: str,
    evidence_text: str,
    evidence_url: str
) -> dict:
    """
    Create a pending claim; created_at is assigned by the database

    Returns:
        The new claim row
    """
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            INSERT INTO gamepass_requests
                (user_id, achievement_id, achievement_title, status, evidence_text, evidence_url)
            VALUES (%s, %s, %s, 'pending', %s, %s)
            RETURNING {_CLAIM_COLUMNS}
            """,
            (user_id, achievement_id, achievement_title, evidence_text, evidence_url)
        )
        row = await cur.fetchone()
        return dict(row)


async def has_pending_claim(conn, user_id: str, achievement_id: str) -> bool:
    """Check for an existing pending claim on (user, achievement)"""
    async with conn.cursor() as cur:
        await cur.execute(
            """
            SELECT 1
            FROM gamepass_requests
            WHERE user_id = %s AND achievement_id = %s AND status = 'pending'
            LIMIT 1
            """,
            (user_id, achievement_id)
        )
        return await cur.fetchone() is not None


async def get_claim_for_update(conn, claim_id: str) -> Optional[dict]:
    """
    Load a claim and lock its row until the surrounding transaction ends

    A second reviewer of the same claim blocks here and then sees the
    committed status.
    """
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            SELECT {_CLAIM_COLUMNS}
            FROM gamepass_requests
            WHERE id = %s
            FOR UPDATE
            """,
            (claim_id,)
        )
        row = await cur.fetchone()
        return dict(row) if row else None


async def mark_claim_reviewed(
    conn,
    claim_id: str,
    status: str,
    note: str,
    reviewer_id: str
) -> Optional[dict]:
    """
    Move a pending claim to its terminal status

    Returns:
        Updated claim row, or None if the claim was no longer pending
    """
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            UPDATE gamepass_requests
            SET status = %s,
                note = %s,
                reviewed_by = %s,
                reviewed_at = CURRENT_TIMESTAMP
            WHERE id = %s AND status = 'pending'
            RETURNING {_CLAIM_COLUMNS}
            """,
            (status, note, reviewer_id, claim_id)
        )
        row = await cur.fetchone()
        return dict(row) if row else None


async def list_user_claims(conn, user_id: str, limit: int = 50) -> list[dict]:
    """
    Get a user's claims

    Returns:
        Claims ordered by created_at DESC
    """
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            SELECT {_CLAIM_COLUMNS}
            FROM gamepass_requests
            WHERE user_id = %s
            ORDER BY created_at DESC
            LIMIT %s
            """,
            (user_id, limit)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]


async def list_pending_claims(conn, limit: int = 100) -> list[dict]:
    """Global moderation queue, newest first"""
    async with conn.cursor() as cur:
        await cur.execute(
            f"""
            SELECT {_CLAIM_COLUMNS}
            FROM gamepass_requests
            WHERE status = 'pending'
            ORDER BY created_at DESC
            LIMIT %s
            """,
            (limit,)
        )
        rows = await cur.fetchall()
        return [dict(row) for row in rows]
