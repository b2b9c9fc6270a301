# =============================================================================
# core/services/level_service.py - Couple Leveling
# =============================================================================
# XP is a couple-wide counter, separate from stars. Reaching the threshold
# bumps the level and resets XP to zero; XP beyond the threshold is
# discarded, not carried into the next level.
#
# Writes are a compare-and-swap on the (level, xp) pair that was read, so two
# grants racing each other are both applied, one after the other.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import utc_now
from app.config import settings
from app.exceptions import ContentionError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_LEVEL = 1
DEFAULT_XP = 0


def apply_xp(level: int, xp: int, amount: int, threshold: int) -> tuple[int, int]:
    """
    Compute the (level, xp) pair after granting amount XP.

    Example:
        apply_xp(1, 18, 5, 20)  # (2, 0) - the 3 extra XP are dropped
        apply_xp(1, 10, 5, 20)  # (1, 15)

    Raises:
        ValidationError: If amount is negative
    """
    if amount < 0:
        raise ValidationError(
            "XP amount must be non-negative.",
            code="INVALID_XP_AMOUNT",
            details={"amount": amount}
        )

    next_xp = xp + amount
    if next_xp >= threshold:
        return level + 1, 0
    return level, next_xp


class LevelService:
    """
    Service for reading and growing a couple's level.
    """

    @staticmethod
    def get_level(couple_id: str | UUID) -> dict[str, Any]:
        """
        Get the couple's level.

        A couple that never earned XP has no row yet and reads as level 1.

        Returns:
            Dict with level, xp and threshold
        """
        row = SupabaseClient.fetch_couple_level(couple_id)
        return {
            "level": int(row.get("level") or DEFAULT_LEVEL) if row else DEFAULT_LEVEL,
            "xp": int(row.get("xp") or DEFAULT_XP) if row else DEFAULT_XP,
            "threshold": settings.COUPLE_LEVEL_XP_THRESHOLD,
        }

    @staticmethod
    def add_xp(couple_id: str | UUID, amount: int) -> dict[str, Any]:
        """
        Grant XP to a couple, leveling up when the threshold is reached.

        Args:
            couple_id: The couple UUID
            amount: Non-negative XP to add

        Returns:
            Dict with the new level, xp and threshold

        Raises:
            ValidationError: If amount is negative
            ContentionError: If every attempt lost to a concurrent grant
            SupabaseClientError: If the store fails
        """
        threshold = settings.COUPLE_LEVEL_XP_THRESHOLD
        attempts = settings.STORE_MAX_RETRIES

        # Validate before touching the store
        apply_xp(DEFAULT_LEVEL, DEFAULT_XP, amount, threshold)

        for attempt in range(1, attempts + 1):
            row = SupabaseClient.fetch_couple_level(couple_id)

            if row is None:
                level, xp = apply_xp(DEFAULT_LEVEL, DEFAULT_XP, amount, threshold)
                if SupabaseClient.insert_couple_level(couple_id, level, xp):
                    logger.info(f"Created level row for couple {couple_id}: level={level} xp={xp}")
                    return {"level": level, "xp": xp, "threshold": threshold}
                # Someone else created the row first; read it and retry
                continue

            current_level = int(row.get("level") or DEFAULT_LEVEL)
            current_xp = int(row.get("xp") or DEFAULT_XP)
            level, xp = apply_xp(current_level, current_xp, amount, threshold)

            updated = SupabaseClient.update_couple_level_if_unchanged(
                couple_id,
                expected_level=current_level,
                expected_xp=current_xp,
                updates={"level": level, "xp": xp, "updated_at": utc_now().isoformat()},
            )
            if updated:
                if level > current_level:
                    logger.info(f"Couple {couple_id} reached level {level}")
                return {"level": level, "xp": xp, "threshold": threshold}

            logger.debug(f"Level CAS lost for couple {couple_id} (attempt {attempt}/{attempts})")

        raise ContentionError("couple_level", attempts)
