"""
Database queries - Re-export all functions.

Every function takes an open connection as its first argument so several
calls can share one transaction (see Database.transaction()).

Module organization:
- catalog.py: Achievements, tiers, season configuration, moderator membership
- claims.py: Claim ("request") ledger
- progress.py: Earned records, seasonal progress, tier unlocks, inventory
- profile.py: Player profiles, moderator administration
"""

# Catalog operations
from gamepass.db.queries.catalog import (
    get_achievement,
    list_achievements,
    get_tiers,
    get_current_season,
    set_current_season,
    is_moderator,
)

# Claim operations
from gamepass.db.queries.claims import (
    insert_claim,
    has_pending_claim,
    get_claim_for_update,
    mark_claim_reviewed,
    list_user_claims,
    list_pending_claims,
)

# Progress operations
from gamepass.db.queries.progress import (
    has_earned,
    get_earned_ids,
    upsert_earned,
    count_earned,
    get_progress,
    lock_progress,
    update_progress,
    list_season_progress,
    get_unlocked_tier_ids,
    insert_tier_unlock,
    add_inventory_item,
)

# Profile operations
from gamepass.db.queries.profile import (
    get_profile,
    upsert_profile,
    get_display_names,
    add_moderator,
    remove_moderator,
)

# Re-export for 'from gamepass.db import queries' pattern
__all__ = [
    # Catalog (6 functions)
    "get_achievement",
    "list_achievements",
    "get_tiers",
    "get_current_season",
    "set_current_season",
    "is_moderator",

    # Claims (6 functions)
    "insert_claim",
    "has_pending_claim",
    "get_claim_for_update",
    "mark_claim_reviewed",
    "list_user_claims",
    "list_pending_claims",

    # Progress (11 functions)
    "has_earned",
    "get_earned_ids",
    "upsert_earned",
    "count_earned",
    "get_progress",
    "lock_progress",
    "update_progress",
    "list_season_progress",
    "get_unlocked_tier_ids",
    "insert_tier_unlock",
    "add_inventory_item",

    # Profile (5 functions)
    "get_profile",
    "upsert_profile",
    "get_display_names",
    "add_moderator",
    "remove_moderator",
]
