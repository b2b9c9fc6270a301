# =============================================================================
# app/routers/daily_challenges.py - Daily Challenge Endpoints
# =============================================================================
# Per-day challenges: at most 4 per couple and day, 5 stars in total.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status

from app.auth import get_couple_member, CoupleMember
from core.models.daily_challenge import (
    DailyChallengeCreate,
    DailyChallengeEnvelope,
    DailyChallengeList,
)
from core.services.daily_challenge_service import DailyChallengeService

router = APIRouter(prefix="/home/daily-challenges")


@router.get("", response_model=DailyChallengeList)
async def list_daily_challenges(
    date: str | None = Query(default=None, description="Day as YYYY-MM-DD (default: today, UTC)"),
    member: CoupleMember = Depends(get_couple_member),
) -> DailyChallengeList:
    """List a day's daily challenges, oldest first."""
    items = DailyChallengeService.list_daily_challenges(member.couple_id, date)
    return DailyChallengeList(items=items)


@router.post("", response_model=DailyChallengeEnvelope, status_code=status.HTTP_201_CREATED)
async def create_daily_challenge(
    request: DailyChallengeCreate,
    member: CoupleMember = Depends(get_couple_member),
) -> DailyChallengeEnvelope:
    """
    Create a daily challenge for today.

    Returns 409 when the day already has 4 challenges or the stars would
    push the day's total past 5.
    """
    challenge = DailyChallengeService.create_daily_challenge(
        member.couple_id, member.id, title=request.title, stars=request.stars
    )
    return DailyChallengeEnvelope(challenge=challenge)


@router.post("/{challenge_id}/complete", response_model=DailyChallengeEnvelope)
async def complete_daily_challenge(
    challenge_id: Annotated[UUID, Path(description="Daily challenge ID")],
    member: CoupleMember = Depends(get_couple_member),
) -> DailyChallengeEnvelope:
    """Complete one of today's daily challenges (once)."""
    challenge = DailyChallengeService.complete_daily_challenge(
        member.couple_id, str(challenge_id), member.id
    )
    return DailyChallengeEnvelope(challenge=challenge)
