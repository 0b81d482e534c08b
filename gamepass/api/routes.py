"""API routes for the Game Pass"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status

from gamepass.api.models import (
    ClaimRequest, ClaimListResponse,
    ReviewRequest, ProfileUpdateRequest,
    MeResponse, HealthCheckResponse
)
from gamepass.api.auth import get_identity
from gamepass.api.middleware import limiter
from gamepass.config import SEASON_REPORT_LIMIT
from gamepass.db.connection import db
from gamepass.models.achievement import CatalogEntry
from gamepass.models.claim import Claim, ReviewResult
from gamepass.models.progress import DailyBonusResult, ProgressView, SeasonReport
from gamepass.models.user import Identity, PlayerProfile, ProfileSummary
from gamepass.services import GamePassService, get_container
from gamepass.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)

router = APIRouter()


def get_gamepass_service() -> GamePassService:
    return get_container().gamepass_service


# ==========================================
# Identity and catalog
# ==========================================

@router.get("/api/v1/me", response_model=MeResponse)
@limiter.limit("60/minute")
async def whoami(
    request: Request,
    identity: Optional[Identity] = Depends(get_identity),
    service: GamePassService = Depends(get_gamepass_service)
):
    """Caller id and moderator flag (Rate limit: 60/minute)"""
    return MeResponse(**await service.whoami(identity))


@router.get("/api/v1/achievements", response_model=List[CatalogEntry])
@limiter.limit("60/minute")
async def list_achievements(
    request: Request,
    identity: Optional[Identity] = Depends(get_identity),
    service: GamePassService = Depends(get_gamepass_service)
):
    """Active achievements with the caller's state (Rate limit: 60/minute)"""
    return await service.catalog(identity)


# ==========================================
# Claims
# ==========================================

@router.post("/api/v1/claims", response_model=Claim, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
async def submit_claim(
    request: Request,
    payload: ClaimRequest,
    identity: Optional[Identity] = Depends(get_identity),
    service: GamePassService = Depends(get_gamepass_service)
):
    """Submit an achievement claim (Rate limit: 20/minute)"""
    return await service.submit_claim(
        identity,
        payload.achievement_id,
        payload.evidence_text,
        payload.evidence_url
    )


@router.get("/api/v1/claims", response_model=ClaimListResponse)
@limiter.limit("60/minute")
async def list_my_claims(
    request: Request,
    limit: int = Query(50, ge=1),
    identity: Optional[Identity] = Depends(get_identity),
    service: GamePassService = Depends(get_gamepass_service)
):
    """Caller's claims, newest first (Rate limit: 60/minute)"""
    claims = await service.my_claims(identity, limit)
    return ClaimListResponse(claims=claims, count=len(claims))


@router.get("/api/v1/users/{user_id}/claims", response_model=ClaimListResponse)
@limiter.limit("60/minute")
async def list_user_claims(
    request: Request,
    user_id: str,
    limit: int = Query(50, ge=1),
    identity: Optional[Identity] = Depends(get_identity),
    service: GamePassService = Depends(get_gamepass_service)
):
    """A user's claims; self or moderator (Rate limit: 60/minute)"""
    claims = await service.user_claims(identity, user_id, limit)
    return ClaimListResponse(claims=claims, count=len(claims))


# ==========================================
# Moderation
# ==========================================

@router.get("/api/v1/moderation/queue", response_model=ClaimListResponse)
@limiter.limit("60/minute")
async def moderation_queue(
    request: Request,
    limit: int = Query(100, ge=1),
    identity: Optional[Identity] = Depends(get_identity),
    service: GamePassService = Depends(get_gamepass_service)
):
    """Pending claims, newest first; moderators only (Rate limit: 60/minute)"""
    claims = await service.moderation_queue(identity, limit)
    return ClaimListResponse(claims=claims, count=len(claims))


@router.post("/api/v1/moderation/claims/{claim_id}/review", response_model=ReviewResult)
@limiter.limit("30/minute")
async def review_claim(
    request: Request,
    claim_id: str,
    payload: ReviewRequest,
    identity: Optional[Identity] = Depends(get_identity),
    service: GamePassService = Depends(get_gamepass_service)
):
    """Approve or reject a pending claim; moderators only (Rate limit: 30/minute)"""
    return await service.review(identity, claim_id, payload.action, payload.note)


# ==========================================
# Progress
# ==========================================

@router.post("/api/v1/me/daily", response_model=DailyBonusResult)
@limiter.limit("10/minute")
async def claim_daily(
    request: Request,
    identity: Optional[Identity] = Depends(get_identity),
    service: GamePassService = Depends(get_gamepass_service)
):
    """Claim the daily XP bonus (Rate limit: 10/minute)"""
    return await service.claim_daily(identity)


@router.get("/api/v1/me/progress", response_model=ProgressView)
@limiter.limit("60/minute")
async def my_progress(
    request: Request,
    identity: Optional[Identity] = Depends(get_identity),
    service: GamePassService = Depends(get_gamepass_service)
):
    """Caller's season progress; records newly reached tiers (Rate limit: 60/minute)"""
    return await service.my_progress(identity)


@router.get("/api/v1/users/{user_id}/progress", response_model=ProgressView)
@limiter.limit("60/minute")
async def user_progress(
    request: Request,
    user_id: str,
    service: GamePassService = Depends(get_gamepass_service)
):
    """A user's season progress (Rate limit: 60/minute)"""
    return await service.user_progress(user_id)


@router.get("/api/v1/reports/season", response_model=SeasonReport)
@limiter.limit("10/minute")
async def season_report(
    request: Request,
    season: Optional[int] = Query(None),
    limit: int = Query(SEASON_REPORT_LIMIT, ge=1),
    identity: Optional[Identity] = Depends(get_identity),
    service: GamePassService = Depends(get_gamepass_service)
):
    """Season standings; moderators only (Rate limit: 10/minute)"""
    return await service.season_report(identity, season, limit)


# ==========================================
# Profile
# ==========================================

@router.get("/api/v1/me/profile", response_model=ProfileSummary)
@limiter.limit("60/minute")
async def get_profile(
    request: Request,
    identity: Optional[Identity] = Depends(get_identity),
    service: GamePassService = Depends(get_gamepass_service)
):
    """Caller's profile page data (Rate limit: 60/minute)"""
    return await service.profile(identity)


@router.patch("/api/v1/me/profile", response_model=PlayerProfile)
@limiter.limit("20/minute")
async def update_profile(
    request: Request,
    payload: ProfileUpdateRequest,
    identity: Optional[Identity] = Depends(get_identity),
    service: GamePassService = Depends(get_gamepass_service)
):
    """Update display name and bio (Rate limit: 20/minute)"""
    return await service.update_profile(identity, payload.display_name, payload.bio)


# ==========================================
# Health
# ==========================================

@router.get("/api/v1/health", response_model=HealthCheckResponse)
@limiter.limit("60/minute")
async def health_check(request: Request):
    """Health check endpoint (Rate limit: 60/minute for monitoring systems)"""
    try:
        async with db.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1")
                await cur.fetchone()

        db_status = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "disconnected"

    return HealthCheckResponse(
        status="healthy" if db_status == "connected" else "degraded",
        timestamp=now_utc(),
        database=db_status
    )
