# =============================================================================
# core/models/level.py - Couple Level Schemas
# =============================================================================

from pydantic import BaseModel, Field


class CoupleLevelResponse(BaseModel):
    """
    Couple-wide progression, returned by GET /goals/level.

    Example:
        {"level": 2, "xp": 3, "threshold": 20}
    """

    level: int = Field(..., ge=1, description="Current couple level")
    xp: int = Field(..., ge=0, description="XP accumulated towards the next level")
    threshold: int = Field(..., ge=1, description="XP needed to level up")
