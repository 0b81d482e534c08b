"""User-related Pydantic models"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from gamepass.models.claim import Claim
from gamepass.models.progress import ProgressView


class Identity(BaseModel):
    """Authenticated caller"""
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None


class PlayerProfile(BaseModel):
    """Public profile information"""
    user_id: str
    display_name: str = ""
    bio: str = ""
    email: Optional[str] = None
    updated_at: Optional[datetime] = None


class ProfileSummary(BaseModel):
    """Profile page data: profile, counters, recent claims and progress"""
    profile: PlayerProfile
    earned_count: int = 0
    recent_claims: list[Claim] = Field(default_factory=list)
    pending_count: int = 0
    approved_count: int = 0
    progress: ProgressView
