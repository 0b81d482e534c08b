"""Unit tests for seasonal XP (gamepass/gamification/xp_system.py)"""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from gamepass.exceptions import FailedPreconditionError, UnauthenticatedError
from gamepass.gamification.tier_ladder import TierLadder
from gamepass.gamification.xp_system import (
    apply_season_points,
    auto_unlock,
    claim_daily,
    effective_xp,
    get_progress,
    is_daily_available,
    resolve_season,
)
from gamepass.models.progress import Progress
from gamepass.models.tier import TierDef

NOW = datetime(2025, 3, 10, 9, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# Season arithmetic
# ============================================================================

def test_resolve_season_defaults_to_one():
    assert resolve_season(None) == 1
    assert resolve_season(0) == 1
    assert resolve_season(4) == 4


def test_effective_xp_counts_only_current_season():
    assert effective_xp(None, 2) == 0
    assert effective_xp({"season": 1, "points": 900}, 2) == 0
    assert effective_xp({"season": 2, "points": 40}, 2) == 40
    assert effective_xp(Progress(user_id="u", season=2, points=75), 2) == 75


def test_apply_season_points_increments_current_season():
    assert apply_season_points({"season": 2, "points": 40}, 2, 50) == (2, 90)


def test_apply_season_points_reinitialises_stale_season():
    """Stored season 1 with 900 points, current season 2, +50"""
    assert apply_season_points({"season": 1, "points": 900}, 2, 50) == (2, 50)


def test_apply_season_points_without_progress():
    assert apply_season_points(None, 3, 10) == (3, 10)


def test_daily_availability_window():
    assert is_daily_available(None, NOW)
    assert not is_daily_available(NOW - timedelta(hours=23, minutes=59), NOW)
    assert is_daily_available(NOW - timedelta(hours=24), NOW)


# ============================================================================
# Daily bonus
# ============================================================================

@pytest.mark.asyncio
async def test_claim_daily_first_time(store, fake_db, test_user_id):
    result = await claim_daily(test_user_id, now=NOW)

    assert result.xp_awarded == 100
    assert result.points == 100
    assert result.season == 1
    assert result.next_available_at == NOW + timedelta(hours=24)
    assert store.progress[test_user_id]["last_daily_at"] == NOW
    assert fake_db.commits == 1


@pytest.mark.asyncio
async def test_claim_daily_twice_within_cooldown(store, fake_db, test_user_id):
    await claim_daily(test_user_id, now=NOW)

    with pytest.raises(FailedPreconditionError) as exc_info:
        await claim_daily(test_user_id, now=NOW + timedelta(hours=3))

    assert exc_info.value.reason == "daily_cooldown"
    assert "21h 00m" in exc_info.value.message
    assert store.progress[test_user_id]["points"] == 100
    assert fake_db.rollbacks == 1


@pytest.mark.asyncio
async def test_claim_daily_after_cooldown(store, fake_db, test_user_id):
    await claim_daily(test_user_id, now=NOW)
    result = await claim_daily(test_user_id, now=NOW + timedelta(hours=24))

    assert result.points == 200
    assert store.progress[test_user_id]["last_daily_at"] == NOW + timedelta(hours=24)


@pytest.mark.asyncio
async def test_claim_daily_resets_stale_season(store, fake_db, test_user_id):
    store.season = 2
    store.progress[test_user_id] = {
        "user_id": test_user_id, "season": 1, "points": 900,
        "last_daily_at": None, "updated_at": None,
    }

    result = await claim_daily(test_user_id, now=NOW)

    assert (result.season, result.points) == (2, 100)


@pytest.mark.asyncio
async def test_claim_daily_without_config_uses_season_one(store, fake_db, test_user_id):
    store.season = None

    result = await claim_daily(test_user_id, now=NOW)

    assert result.season == 1


@pytest.mark.asyncio
async def test_claim_daily_requires_login(store, fake_db):
    with pytest.raises(UnauthenticatedError):
        await claim_daily(None, now=NOW)

    assert store.progress == {}


# ============================================================================
# Progress view and auto-unlock
# ============================================================================

@pytest.mark.asyncio
async def test_progress_without_tiers_is_not_configured(store, fake_db, test_user_id):
    view = await get_progress(test_user_id)

    assert not view.configured
    assert view.xp == 0
    assert view.tier_index == 0
    assert view.progress_fraction == 0.0


@pytest.mark.asyncio
async def test_progress_of_stale_season_reads_zero(store, fake_db, test_user_id):
    store.season = 2
    store.add_tier("t1", 100)
    store.progress[test_user_id] = {
        "user_id": test_user_id, "season": 1, "points": 900,
        "last_daily_at": None, "updated_at": None,
    }

    view = await get_progress(test_user_id)

    assert view.season == 2
    assert view.xp == 0
    assert view.tier_index == 0
    assert store.progress[test_user_id]["points"] == 900


@pytest.mark.asyncio
async def test_progress_with_unlock_records_reached_tiers(store, fake_db, test_user_id):
    store.add_tier("t1", 100, reward={"kind": "card", "overall": 87})
    store.add_tier("t2", 250)
    store.add_tier("t3", 500)
    store.progress[test_user_id] = {
        "user_id": test_user_id, "season": 1, "points": 260,
        "last_daily_at": None, "updated_at": None,
    }

    view = await get_progress(test_user_id, unlock_tiers=True)

    assert view.tier_index == 2
    assert view.next_threshold == 500
    assert view.xp_missing == 240
    assert view.progress_fraction == pytest.approx(0.04)
    assert view.unlocked_tier_ids == ["t1", "t2"]
    assert store.unlocks[(test_user_id, "t1")]["reward_label"] == "Card overall 87"
    assert store.unlocks[(test_user_id, "t1")]["points_at_unlock"] == 260


@pytest.mark.asyncio
async def test_auto_unlock_is_idempotent(store, fake_db, test_user_id):
    ladder = TierLadder([TierDef(id="t1", required_points=100)])

    first = await auto_unlock(test_user_id, 150, ladder)
    second = await auto_unlock(test_user_id, 150, ladder)

    assert first == ["t1"]
    assert second == []
    assert len(store.unlocks) == 1


@pytest.mark.asyncio
async def test_auto_unlock_skips_known_tiers(store, fake_db, test_user_id):
    ladder = TierLadder([TierDef(id="t1", required_points=100), TierDef(id="t2", required_points=200)])

    written = await auto_unlock(test_user_id, 300, ladder, unlocked_ids={"t1"})

    assert written == ["t2"]


@pytest.mark.asyncio
async def test_auto_unlock_failure_does_not_stop_other_tiers(store, fake_db, test_user_id):
    ladder = TierLadder([TierDef(id="t1", required_points=100), TierDef(id="t2", required_points=200)])
    real_insert = store.insert_tier_unlock

    async def flaky_insert(conn, user_id, tier_id, **kwargs):
        if tier_id == "t1":
            raise RuntimeError("connection reset")
        return await real_insert(conn, user_id, tier_id, **kwargs)

    with patch("gamepass.db.queries.insert_tier_unlock", flaky_insert):
        written = await auto_unlock(test_user_id, 300, ladder)

    assert written == ["t2"]
    assert (test_user_id, "t1") not in store.unlocks
