"""Season progress models"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from gamepass.models.tier import TierDef


class Progress(BaseModel):
    """Stored per-user seasonal XP (may belong to a past season)"""
    user_id: str
    season: int = 0
    points: int = Field(default=0, ge=0)
    last_daily_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProgressView(BaseModel):
    """Effective progress of one user in the current season"""
    user_id: str
    season: int
    xp: int
    tier_index: int
    total_tiers: int
    next_tier: Optional[TierDef] = None
    next_threshold: Optional[int] = None
    xp_missing: int = 0
    progress_fraction: float = 0.0
    completed: bool = False
    configured: bool = False
    unlocked_tier_ids: list[str] = Field(default_factory=list)


class DailyBonusResult(BaseModel):
    """Outcome of a successful daily bonus claim"""
    user_id: str
    season: int
    xp_awarded: int
    points: int
    claimed_at: datetime
    next_available_at: datetime


class ReportStatus(str, Enum):
    """Season report chip"""
    COMPLETE = "complete"
    IN_PROGRESS = "in_progress"
    START = "start"
    NOT_CONFIGURED = "not_configured"


class SeasonReportRow(BaseModel):
    rank: int
    user_id: str
    display_name: str = ""
    xp: int
    tier_index: int
    next_threshold: Optional[int] = None
    status: ReportStatus


class SeasonReport(BaseModel):
    """Ranked standings of one season"""
    season: int
    players: int
    max_xp: int
    max_tier_index: int
    total_tiers: int
    rows: list[SeasonReportRow] = Field(default_factory=list)
