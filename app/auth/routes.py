# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for authentication-related operations.
#
# Note: Actual signup/login is handled by Supabase Auth client-side.
# These routes are for getting user info after authentication.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, ProfileResponse
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/me", response_model=ProfileResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> ProfileResponse:
    """
    Get the current authenticated user's profile.

    Returns:
        ProfileResponse: user_id, email, alias and couple_id

    Raises:
        401: If not authenticated
    """
    try:
        profile = SupabaseClient.fetch_profile(user.id)
        if profile:
            return ProfileResponse(
                user_id=str(profile.get("user_id") or user.id),
                email=profile.get("email") or user.email,
                alias=profile.get("alias"),
                couple_id=profile.get("couple_id"),
            )
    except SupabaseClientError as e:
        logger.warning(f"Could not fetch user profile: {e.message}")

    # User exists in auth but has no profile row yet
    return ProfileResponse(user_id=str(user.id), email=user.email)


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Useful for checking if a stored token is still valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
