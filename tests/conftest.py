"""Global test fixtures and utilities for Game Pass tests"""
import copy
import os
import uuid
import pytest
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

# Must be set before gamepass.config is imported
os.environ["JWT_SECRET_KEY"] = "test-secret-key"

from gamepass.db.connection import db
from gamepass.gamification.identity import create_access_token


# ============================================================================
# In-memory persistence
# ============================================================================

QUERY_FUNCTIONS = [
    "get_achievement", "list_achievements", "get_tiers",
    "get_current_season", "set_current_season", "is_moderator",
    "insert_claim", "has_pending_claim", "get_claim_for_update",
    "mark_claim_reviewed", "list_user_claims", "list_pending_claims",
    "has_earned", "get_earned_ids", "upsert_earned", "count_earned",
    "get_progress", "lock_progress", "update_progress", "list_season_progress",
    "get_unlocked_tier_ids", "insert_tier_unlock", "add_inventory_item",
    "get_profile", "upsert_profile", "get_display_names",
    "add_moderator", "remove_moderator",
]

BASE_TIME = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class InMemoryStore:
    """
    Dict-backed stand-in for gamepass.db.queries

    Same function names and signatures as the query modules; the `conn`
    argument is accepted and ignored.
    """

    def __init__(self):
        self.season = 1
        self.moderators = set()
        self.achievements = {}
        self.claims = {}
        self.earned = {}
        self.progress = {}
        self.tiers = []
        self.unlocks = {}
        self.inventory = {}
        self.profiles = {}
        self.write_log = []

    # -- snapshots (used by FakeDatabase.transaction) --

    def snapshot(self) -> dict:
        return copy.deepcopy(self.__dict__)

    def restore(self, state: dict) -> None:
        self.__dict__.update(copy.deepcopy(state))

    # -- seeding helpers --

    def add_achievement(self, achievement_id, points=0, prerequisites=(), active=True,
                        title=None, reward_item_id=None, reward_qty=0):
        self.achievements[achievement_id] = {
            "id": achievement_id,
            "title": title if title is not None else achievement_id.replace("_", " ").title(),
            "description": "",
            "points": points,
            "prerequisites": list(prerequisites),
            "active": active,
            "reward_item_id": reward_item_id,
            "reward_qty": reward_qty,
        }

    def add_tier(self, tier_id, required_points, active=True, reward=None, sort_order=None, title=""):
        self.tiers.append({
            "id": tier_id,
            "title": title,
            "required_points": required_points,
            "active": active,
            "reward": reward,
            "rarity": None,
            "sort_order": sort_order,
        })

    def add_pending_claim(self, user_id, achievement_id) -> str:
        claim_id = str(uuid.uuid4())
        self.claims[claim_id] = {
            "id": claim_id,
            "user_id": user_id,
            "achievement_id": achievement_id,
            "achievement_title": achievement_id,
            "status": "pending",
            "evidence_text": "",
            "evidence_url": "",
            "created_at": BASE_TIME + timedelta(seconds=len(self.claims)),
            "reviewed_at": None,
            "reviewed_by": None,
            "note": None,
        }
        return claim_id

    # -- catalog --

    async def get_achievement(self, conn, achievement_id):
        row = self.achievements.get(achievement_id)
        return dict(row) if row else None

    async def list_achievements(self, conn, active_only=True):
        rows = sorted(self.achievements.values(), key=lambda r: r["id"])
        return [dict(r) for r in rows if r["active"] or not active_only]

    async def get_tiers(self, conn):
        return [dict(t) for t in self.tiers]

    async def get_current_season(self, conn, for_share=False):
        return self.season

    async def set_current_season(self, conn, season):
        self.season = season

    async def is_moderator(self, conn, user_id):
        return user_id in self.moderators

    # -- claims --

    async def insert_claim(self, conn, user_id, achievement_id, achievement_title,
                           evidence_text, evidence_url):
        claim_id = self.add_pending_claim(user_id, achievement_id)
        self.claims[claim_id].update(
            achievement_title=achievement_title,
            evidence_text=evidence_text,
            evidence_url=evidence_url,
        )
        self.write_log.append(("insert_claim", claim_id))
        return dict(self.claims[claim_id])

    async def has_pending_claim(self, conn, user_id, achievement_id):
        return any(
            c["user_id"] == user_id and c["achievement_id"] == achievement_id and c["status"] == "pending"
            for c in self.claims.values()
        )

    async def get_claim_for_update(self, conn, claim_id):
        row = self.claims.get(claim_id)
        return dict(row) if row else None

    async def mark_claim_reviewed(self, conn, claim_id, status, note, reviewer_id):
        row = self.claims.get(claim_id)
        if not row or row["status"] != "pending":
            return None
        row.update(status=status, note=note, reviewed_by=reviewer_id, reviewed_at=BASE_TIME)
        self.write_log.append(("mark_claim_reviewed", claim_id, status))
        return dict(row)

    async def list_user_claims(self, conn, user_id, limit=50):
        rows = [c for c in self.claims.values() if c["user_id"] == user_id]
        rows.sort(key=lambda c: c["created_at"], reverse=True)
        return [dict(c) for c in rows[:limit]]

    async def list_pending_claims(self, conn, limit=100):
        rows = [c for c in self.claims.values() if c["status"] == "pending"]
        rows.sort(key=lambda c: c["created_at"], reverse=True)
        return [dict(c) for c in rows[:limit]]

    # -- earned --

    async def has_earned(self, conn, user_id, achievement_id):
        return (user_id, achievement_id) in self.earned

    async def get_earned_ids(self, conn, user_id, achievement_ids=None):
        ids = {aid for (uid, aid) in self.earned if uid == user_id}
        if achievement_ids is not None:
            ids &= set(achievement_ids)
        return ids

    async def upsert_earned(self, conn, user_id, achievement_id, approved_by):
        key = (user_id, achievement_id)
        if key in self.earned:
            return False
        self.earned[key] = approved_by
        self.write_log.append(("upsert_earned", key))
        return True

    async def count_earned(self, conn, user_id):
        return sum(1 for (uid, _) in self.earned if uid == user_id)

    # -- progress --

    async def get_progress(self, conn, user_id):
        row = self.progress.get(user_id)
        return dict(row) if row else None

    async def lock_progress(self, conn, user_id):
        self.progress.setdefault(user_id, {
            "user_id": user_id,
            "season": 0,
            "points": 0,
            "last_daily_at": None,
            "updated_at": None,
        })
        return dict(self.progress[user_id])

    async def update_progress(self, conn, user_id, season, points, last_daily_at=None):
        row = self.progress[user_id]
        row.update(season=season, points=points, updated_at=BASE_TIME)
        if last_daily_at is not None:
            row["last_daily_at"] = last_daily_at
        self.write_log.append(("update_progress", user_id, season, points))
        return dict(row)

    async def list_season_progress(self, conn, season, limit=2000):
        rows = [p for p in self.progress.values() if p["season"] == season]
        rows.sort(key=lambda p: (-p["points"], p["user_id"]))
        return [dict(p) for p in rows[:limit]]

    # -- tier unlocks --

    async def get_unlocked_tier_ids(self, conn, user_id):
        return {tid for (uid, tid) in self.unlocks if uid == user_id}

    async def insert_tier_unlock(self, conn, user_id, tier_id, points_at_unlock,
                                 required_points, reward_label):
        key = (user_id, tier_id)
        if key in self.unlocks:
            return False
        self.unlocks[key] = {
            "points_at_unlock": points_at_unlock,
            "required_points": required_points,
            "reward_label": reward_label,
        }
        return True

    # -- inventory --

    async def add_inventory_item(self, conn, user_id, item_id, qty):
        key = (user_id, item_id)
        self.inventory[key] = self.inventory.get(key, 0) + qty
        self.write_log.append(("add_inventory_item", key, qty))
        return self.inventory[key]

    # -- profiles and moderators --

    async def get_profile(self, conn, user_id):
        row = self.profiles.get(user_id)
        return dict(row) if row else None

    async def upsert_profile(self, conn, user_id, display_name, bio, email=None):
        current = self.profiles.get(user_id, {})
        self.profiles[user_id] = {
            "user_id": user_id,
            "display_name": display_name,
            "bio": bio,
            "email": email if email is not None else current.get("email"),
            "updated_at": BASE_TIME,
        }
        return dict(self.profiles[user_id])

    async def get_display_names(self, conn, user_ids):
        return {
            uid: self.profiles[uid]["display_name"]
            for uid in user_ids if uid in self.profiles
        }

    async def add_moderator(self, conn, user_id):
        added = user_id not in self.moderators
        self.moderators.add(user_id)
        return added

    async def remove_moderator(self, conn, user_id):
        removed = user_id in self.moderators
        self.moderators.discard(user_id)
        return removed


class FakeDatabase:
    """
    Stand-in for the global Database

    transaction() snapshots the store and restores it when the block
    raises, mirroring a PostgreSQL rollback.
    """

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.conn = MagicMock(name="conn")
        self.commits = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def connection(self):
        yield self.conn

    @asynccontextmanager
    async def transaction(self):
        state = self.store.snapshot()
        try:
            yield self.conn
        except BaseException:
            self.store.restore(state)
            self.rollbacks += 1
            raise
        self.commits += 1


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def store():
    """In-memory store patched in for every query function"""
    memory = InMemoryStore()
    patches = {name: getattr(memory, name) for name in QUERY_FUNCTIONS}
    with patch.multiple("gamepass.db.queries", **patches):
        yield memory


@pytest.fixture
def fake_db(store):
    """Global db replaced by a FakeDatabase over the store"""
    fake = FakeDatabase(store)
    with patch.object(db, "connection", fake.connection), \
            patch.object(db, "transaction", fake.transaction):
        yield fake


# ============================================================================
# User & Auth Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "player-1"


@pytest.fixture
def moderator_id(store):
    """A user registered in the moderators table"""
    store.moderators.add("mod-1")
    return "mod-1"


@pytest.fixture
def auth_headers(test_user_id):
    """Authorization header for the standard test user"""
    return {"Authorization": f"Bearer {create_access_token(test_user_id, email='player@example.com')}"}


@pytest.fixture
def moderator_headers():
    return {"Authorization": f"Bearer {create_access_token('mod-1')}"}
