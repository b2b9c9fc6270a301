# =============================================================================
# core/models/challenge.py - Challenge Schemas
# =============================================================================
# These models define the API contract for challenge operations:
# - ChallengeStatus: The four lifecycle states
# - ChallengeCreate: Input for proposing a challenge to the partner
# - ChallengeResponse: A stored challenge
#
# A challenge moves pending -> accepted -> reported_accomplishment ->
# completed, with reported_accomplishment -> accepted on rejection.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ChallengeStatus(str, Enum):
    """
    Possible states for a challenge.

    - pending: Proposed, waiting for the partner to accept
    - accepted: The partner took it on
    - reported_accomplishment: The partner says it's done
    - completed: The creator approved it and stars were awarded

    Flow: pending -> accepted -> reported_accomplishment -> completed
          reported_accomplishment -> accepted (rejected)
    """
    PENDING = "pending"
    ACCEPTED = "accepted"
    REPORTED_ACCOMPLISHMENT = "reported_accomplishment"
    COMPLETED = "completed"


class ChallengeCreate(BaseModel):
    """
    Schema for creating a new challenge.

    Example:
        {
            "title": "Cocinar juntos",
            "description": "Una receta nueva",
            "stars": 3
        }
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Short challenge title"
    )

    description: str | None = Field(
        default=None,
        max_length=2000,
        description="Optional details"
    )

    # Clamped to 1..5 by the service; missing or zero means 1
    stars: float | None = Field(
        default=None,
        description="Stars awarded on approval (1-5)"
    )


class ChallengeResponse(BaseModel):
    """A stored challenge row."""

    id: str
    couple_id: str
    created_by: str
    title: str
    description: str | None = None
    stars: int = Field(..., ge=1, le=5)
    status: ChallengeStatus
    accepted_by: str | None = None
    reported_by: str | None = None
    reported_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None


class ChallengeEnvelope(BaseModel):
    challenge: ChallengeResponse


class ChallengeList(BaseModel):
    items: list[ChallengeResponse] = Field(default_factory=list)
