"""Pydantic models for API request/response validation"""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime

from gamepass.models.claim import Claim


class ClaimRequest(BaseModel):
    """Request to submit an achievement claim"""
    achievement_id: str = Field(..., description="Claimed achievement")
    evidence_text: str = Field(default="", description="Free-text evidence")
    evidence_url: str = Field(default="", description="Link to evidence (screenshot, video)")


class ClaimListResponse(BaseModel):
    """List of claims, newest first"""
    claims: List[Claim]
    count: int


class ReviewRequest(BaseModel):
    """Moderator decision on a pending claim"""
    action: str = Field(..., description="approve or reject")
    note: str = Field(default="", description="Optional note shown to the player")


class ProfileUpdateRequest(BaseModel):
    """Request to update the caller's profile"""
    display_name: str = Field(..., description="Display name (2-24 characters)")
    bio: str = Field(default="", description="Short bio (truncated to 280 characters)")


class MeResponse(BaseModel):
    """Caller identity, for hiding moderator actions in the UI"""
    user_id: Optional[str] = None
    is_moderator: bool = False


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str
    timestamp: datetime
    database: str
    version: str = "1.0.0"


class ErrorResponse(BaseModel):
    """Error response (GamePassError.to_dict())"""
    error: str
    code: str
    message: str
    user_message: str
    timestamp: str
    request_id: str
    context: Optional[Dict[str, Any]] = None
