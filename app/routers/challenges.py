# =============================================================================
# app/routers/challenges.py - Challenge Endpoints
# =============================================================================
# Challenges one partner proposes to the other, and their transitions:
#   POST /home/challenges/{id}/accept   pending -> accepted
#   POST /home/challenges/{id}/report   accepted -> reported_accomplishment
#   POST /home/challenges/{id}/approve  reported_accomplishment -> completed
#   POST /home/challenges/{id}/reject   reported_accomplishment -> accepted
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status

from app.auth import get_couple_member, CoupleMember
from core.models.challenge import ChallengeCreate, ChallengeEnvelope, ChallengeList
from core.services.challenge_service import ChallengeService

router = APIRouter(prefix="/home/challenges")


@router.get("", response_model=ChallengeList)
async def list_challenges(
    member: CoupleMember = Depends(get_couple_member),
) -> ChallengeList:
    """List the couple's challenges, newest first."""
    return ChallengeList(items=ChallengeService.list_challenges(member.couple_id))


@router.post("", response_model=ChallengeEnvelope, status_code=status.HTTP_201_CREATED)
async def create_challenge(
    request: ChallengeCreate,
    member: CoupleMember = Depends(get_couple_member),
) -> ChallengeEnvelope:
    """
    Propose a challenge to the partner.

    Stars are clamped to 1-5 (default 1). The partner gets a push
    notification.
    """
    challenge = ChallengeService.create_challenge(
        member.couple_id,
        member.id,
        title=request.title,
        description=request.description,
        stars=request.stars,
    )
    return ChallengeEnvelope(challenge=challenge)


@router.post("/{challenge_id}/accept", response_model=ChallengeEnvelope)
async def accept_challenge(
    challenge_id: Annotated[UUID, Path(description="Challenge ID")],
    member: CoupleMember = Depends(get_couple_member),
) -> ChallengeEnvelope:
    """Accept a pending challenge proposed by the partner."""
    challenge = ChallengeService.accept(member.couple_id, str(challenge_id), member.id)
    return ChallengeEnvelope(challenge=challenge)


@router.post("/{challenge_id}/report", response_model=ChallengeEnvelope)
async def report_challenge(
    challenge_id: Annotated[UUID, Path(description="Challenge ID")],
    member: CoupleMember = Depends(get_couple_member),
) -> ChallengeEnvelope:
    """Report an accepted challenge as accomplished (acceptor only)."""
    challenge = ChallengeService.report(member.couple_id, str(challenge_id), member.id)
    return ChallengeEnvelope(challenge=challenge)


@router.post("/{challenge_id}/approve", response_model=ChallengeEnvelope)
async def approve_challenge(
    challenge_id: Annotated[UUID, Path(description="Challenge ID")],
    member: CoupleMember = Depends(get_couple_member),
) -> ChallengeEnvelope:
    """
    Approve a reported challenge (creator only).

    Awards the challenge's stars to the reporter and XP to the couple.
    """
    challenge = ChallengeService.approve(member.couple_id, str(challenge_id), member.id)
    return ChallengeEnvelope(challenge=challenge)


@router.post("/{challenge_id}/reject", response_model=ChallengeEnvelope)
async def reject_challenge(
    challenge_id: Annotated[UUID, Path(description="Challenge ID")],
    member: CoupleMember = Depends(get_couple_member),
) -> ChallengeEnvelope:
    """Reject a reported challenge back to accepted (creator only)."""
    challenge = ChallengeService.reject(member.couple_id, str(challenge_id), member.id)
    return ChallengeEnvelope(challenge=challenge)
