# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT-based authentication using Supabase Auth.
#
# Usage:
#   from app.auth import get_couple_member, CoupleMember
#
#   @router.get("/goals/level")
#   async def level(member: CoupleMember = Depends(get_couple_member)):
#       return {"couple_id": member.couple_id}
# =============================================================================

from app.auth.dependencies import get_couple_member, get_current_user
from app.auth.models import AuthUser, CoupleMember, ProfileResponse

__all__ = [
    "get_couple_member",
    "get_current_user",
    "AuthUser",
    "CoupleMember",
    "ProfileResponse",
]
