# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str | None = None


class CoupleMember(BaseModel):
    """
    Authenticated user who belongs to a couple.

    Every couple-scoped route depends on this; all queries are filtered by
    couple_id.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    email: str | None = None
    couple_id: str


class ProfileResponse(BaseModel):
    """Profile of the current user, returned by GET /auth/me."""
    user_id: str
    email: str | None = None
    alias: str | None = None
    couple_id: str | None = None
