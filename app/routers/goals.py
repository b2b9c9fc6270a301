# =============================================================================
# app/routers/goals.py - Level and Reward Endpoints
# =============================================================================
# The couple's level, the rewards catalog and the caller's star balance.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status

from app.auth import get_couple_member, CoupleMember
from core.models.level import CoupleLevelResponse
from core.models.reward import RewardCreate, RewardEnvelope, RewardList, RewardUpdate
from core.services.level_service import LevelService
from core.services.reward_service import RewardService

router = APIRouter(prefix="/goals")


@router.get("/level", response_model=CoupleLevelResponse)
async def get_level(
    member: CoupleMember = Depends(get_couple_member),
) -> CoupleLevelResponse:
    """Get the couple's level, XP and the XP needed to level up."""
    return CoupleLevelResponse(**LevelService.get_level(member.couple_id))


@router.get("/rewards", response_model=RewardList)
async def list_rewards(
    member: CoupleMember = Depends(get_couple_member),
) -> RewardList:
    """List rewards (newest first) with the caller's star balance."""
    return RewardList(**RewardService.list_rewards(member.couple_id, member.id))


@router.post("/rewards", response_model=RewardEnvelope, status_code=status.HTTP_201_CREATED)
async def create_reward(
    request: RewardCreate,
    member: CoupleMember = Depends(get_couple_member),
) -> RewardEnvelope:
    """Create a reward the partner can redeem with stars."""
    reward = RewardService.create_reward(
        member.couple_id,
        member.id,
        title=request.title,
        stars_required=request.stars_required,
        description=request.description,
    )
    return RewardEnvelope(reward=reward)


@router.patch("/rewards/{reward_id}", response_model=RewardEnvelope)
async def update_reward(
    request: RewardUpdate,
    reward_id: Annotated[UUID, Path(description="Reward ID")],
    member: CoupleMember = Depends(get_couple_member),
) -> RewardEnvelope:
    """Edit one of your own rewards until it is redeemed."""
    changes = request.model_dump(include=request.model_fields_set)
    reward = RewardService.update_reward(member.couple_id, str(reward_id), member.id, changes)
    return RewardEnvelope(reward=reward)


@router.post("/rewards/{reward_id}/redeem", response_model=RewardEnvelope)
async def redeem_reward(
    reward_id: Annotated[UUID, Path(description="Reward ID")],
    member: CoupleMember = Depends(get_couple_member),
) -> RewardEnvelope:
    """
    Redeem a reward created by your partner.

    Spends stars_required from your balance. Fails with 409 if the balance
    is too low or the reward was already redeemed.
    """
    reward = RewardService.redeem_reward(member.couple_id, str(reward_id), member.id)
    return RewardEnvelope(reward=reward)
