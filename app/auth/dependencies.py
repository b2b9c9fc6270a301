# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# Supports both:
# - ES256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret) as fallback
#
# On top of the token check, get_couple_member loads the caller's profile
# and requires them to be paired with a partner.
#
# Usage:
#   from app.auth import get_couple_member, CoupleMember
#
#   @router.get("/home/notifications")
#   async def feed(member: CoupleMember = Depends(get_couple_member)):
#       return {"couple_id": member.couple_id}
# =============================================================================

import logging
from typing import Any
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.dependencies import get_jwks_cache
from app.exceptions import CoupleRequiredError, StoreError
from app.auth.models import AuthUser, CoupleMember
from lib.cache import TTLCache
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer()


def _get_jwks_url() -> str:
    """Get the JWKS URL from Supabase URL."""
    # Format: https://<project-ref>.supabase.co
    supabase_url = settings.SUPABASE_URL.rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


def _fetch_jwks(cache: TTLCache) -> dict[str, Any]:
    """Fetch JWKS from Supabase, served from cache while fresh."""
    jwks_url = _get_jwks_url()

    cached = cache.get(jwks_url)
    if cached is not None:
        return cached

    try:
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        jwks = response.json()
        cache.set(jwks_url, jwks)
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return jwks
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Return cached even if expired, as fallback
        return cache.get_stale(jwks_url) or {"keys": []}


def _get_signing_key(token: str, cache: TTLCache) -> tuple[Any, str]:
    """
    Get the appropriate signing key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification
    """
    # Decode header without verification to get algorithm and key ID
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        # Fall back to HS256 if we can't read the header
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    # If HS256, use the legacy secret
    if alg == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    # For ES256 or other algorithms, use JWKS
    if kid:
        jwks = _fetch_jwks(cache)
        for key in jwks.get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    jwks_cache: TTLCache = Depends(get_jwks_cache),
) -> AuthUser:
    """
    Extract and validate user from Supabase JWT token.

    This dependency:
    1. Extracts the Bearer token from the Authorization header
    2. Verifies the JWT signature (supports ES256 and HS256)
    3. Validates the token hasn't expired
    4. Returns an AuthUser with the user's ID and email

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    token = credentials.credentials

    try:
        signing_key, algorithm = _get_signing_key(token, jwks_cache)

        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience="authenticated"
        )

    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")

    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    logger.debug(f"Authenticated user: {user_id}")
    return AuthUser(id=user_uuid, email=payload.get("email"))


async def get_couple_member(
    user: AuthUser = Depends(get_current_user),
) -> CoupleMember:
    """
    Resolve the authenticated user's couple.

    Raises:
        HTTPException: 401 if the user has no profile
        CoupleRequiredError: 409 if the user isn't paired yet
        StoreError: If the profile lookup fails
    """
    try:
        profile = SupabaseClient.fetch_profile(user.id)
    except SupabaseClientError as e:
        raise StoreError(e) from e

    if not profile:
        raise _unauthorized("Perfil no encontrado.")

    couple_id = profile.get("couple_id")
    if not couple_id:
        raise CoupleRequiredError(str(user.id))

    return CoupleMember(
        id=str(user.id),
        email=profile.get("email") or user.email,
        couple_id=str(couple_id),
    )
