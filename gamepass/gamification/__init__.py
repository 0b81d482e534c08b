"""
Game Pass core

Seasonal progression and moderation:
- Claim ledger (users submit achievement claims with evidence)
- Moderation (approve/reject, granting XP and items atomically)
- Seasonal XP, daily bonus and tier ladder
- Season report and player profiles
"""

from gamepass.gamification.achievement_system import list_catalog
from gamepass.gamification.claim_ledger import submit_claim, list_claims, list_pending_claims
from gamepass.gamification.moderation import review
from gamepass.gamification.xp_system import claim_daily, get_progress, auto_unlock
from gamepass.gamification.dashboards import get_season_report
from gamepass.gamification.profile import update_profile, get_profile_summary, NameResolver

__all__ = [
    "list_catalog",
    "submit_claim",
    "list_claims",
    "list_pending_claims",
    "review",
    "claim_daily",
    "get_progress",
    "auto_unlock",
    "get_season_report",
    "update_profile",
    "get_profile_summary",
    "NameResolver",
]
