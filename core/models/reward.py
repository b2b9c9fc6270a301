# =============================================================================
# core/models/reward.py - Reward Schemas
# =============================================================================
# These models define the API contract for rewards ("beneficios"):
# - RewardCreate / RewardUpdate: Input from the mobile client, which sends
#   camelCase (starsRequired); snake_case is accepted too
# - RewardResponse: A stored reward
# - RewardList: Rewards plus the caller's current star balance
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RewardCreate(BaseModel):
    """
    Schema for creating a reward the partner can redeem.

    Example:
        {
            "title": "Desayuno en la cama",
            "description": "El domingo",
            "starsRequired": 5
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Reward title"
    )

    description: str | None = Field(
        default=None,
        max_length=2000,
        description="Optional details"
    )

    # Floored and clamped to >= 0 by the service
    stars_required: float = Field(
        ...,
        alias="starsRequired",
        description="Stars the partner must spend to redeem it"
    )


class RewardUpdate(BaseModel):
    """
    Partial update of an unredeemed reward.

    Only fields that are present in the body are changed.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    stars_required: float | None = Field(default=None, alias="starsRequired")


class RewardResponse(BaseModel):
    """A stored reward row."""

    id: str
    couple_id: str
    title: str
    description: str | None = None
    stars_required: int = Field(..., ge=0)
    created_by: str
    redeemed_at: datetime | None = None
    redeemed_by: str | None = None
    created_at: datetime | None = None


class RewardEnvelope(BaseModel):
    reward: RewardResponse


class RewardList(BaseModel):
    """Response for GET /goals/rewards."""

    items: list[RewardResponse] = Field(default_factory=list)
    balance: int = Field(..., description="Caller's star balance, derived from the ledger")
