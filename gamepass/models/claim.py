"""Claim ("request") models"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class ClaimStatus(str, Enum):
    """Claim lifecycle: pending -> approved | rejected, both terminal"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewAction(str, Enum):
    """Moderator decision"""
    APPROVE = "approve"
    REJECT = "reject"


class Claim(BaseModel):
    """A user's submitted assertion of having met an achievement"""
    id: str
    user_id: str
    achievement_id: str
    achievement_title: str = ""
    status: ClaimStatus = ClaimStatus.PENDING
    evidence_text: str = ""
    evidence_url: str = ""
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    note: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ClaimStatus.PENDING


class ReviewResult(BaseModel):
    """Outcome of a moderator review"""
    claim_id: str
    user_id: str
    achievement_id: str
    status: ClaimStatus
    points_granted: int = 0
    season: Optional[int] = None
    season_points: Optional[int] = None
    item_id: Optional[str] = None
    item_qty: int = 0
