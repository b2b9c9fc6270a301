# =============================================================================
# core/models/daily_challenge.py - Daily Challenge Schemas
# =============================================================================
# Daily challenges belong to one UTC calendar day. A couple may create at
# most four per day and distribute at most five stars across them.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field


class DailyChallengeCreate(BaseModel):
    """
    Schema for creating today's daily challenge.

    Example:
        {"title": "Llamarse al mediodia", "stars": 2}
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Short challenge title"
    )

    # Truncated and clamped to 1..5 before the budget check
    stars: float = Field(
        ...,
        description="Stars for this challenge (1-5)"
    )


class DailyChallengeResponse(BaseModel):
    """A stored daily challenge row."""

    id: str
    couple_id: str
    day_date: str
    created_by: str
    title: str
    stars: int = Field(..., ge=1, le=5)
    completed_by: str | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None


class DailyChallengeEnvelope(BaseModel):
    challenge: DailyChallengeResponse


class DailyChallengeList(BaseModel):
    items: list[DailyChallengeResponse] = Field(default_factory=list)
