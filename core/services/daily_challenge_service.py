# =============================================================================
# core/services/daily_challenge_service.py - Daily Challenges
# =============================================================================
# Daily challenges are small, star-budgeted tasks for one UTC day. Per
# couple and day there are at most DAILY_CHALLENGE_MAX_ITEMS rows carrying
# at most DAILY_CHALLENGE_STAR_BUDGET stars in total.
#
# Creation checks the caps, inserts, then checks again against the rows
# committed before the new one (ordered by created_at, id). If the re-check
# fails, a concurrent create got in first and the new row is deleted. Every
# reader agrees on that order, so both partners creating at once can never
# push the day over its caps.
# =============================================================================

import logging
import math
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_date_key, today_key_utc, utc_now
from app.config import settings
from app.exceptions import (
    DailyChallengeAlreadyCompletedError,
    DailyChallengeLimitError,
    DailyChallengeNotFoundError,
    DailyStarBudgetError,
    LuckyLoveException,
    ValidationError,
)
from core.services.compensation import compensate
from core.services.level_service import LevelService

logger = logging.getLogger(__name__)

MIN_STARS = 1
MAX_STARS = 5


def clamp_daily_stars(value: Any) -> int:
    """
    Truncate requested stars to an integer and clamp to 1..5.

    Example:
        clamp_daily_stars(2.9)  # 2
        clamp_daily_stars(0)    # 1
        clamp_daily_stars(12)   # 5

    Raises:
        ValidationError: If value is not a finite number
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number):
        raise ValidationError("stars requerido.", code="INVALID_STARS", details={"stars": str(value)})
    return min(max(math.floor(number), MIN_STARS), MAX_STARS)


def check_daily_caps(rows: list[dict[str, Any]], stars: int) -> None:
    """
    Check that one more challenge worth `stars` fits next to `rows`.

    Raises:
        DailyChallengeLimitError: If the day already has the maximum rows
        DailyStarBudgetError: If the star budget would be exceeded
    """
    max_items = settings.DAILY_CHALLENGE_MAX_ITEMS
    budget = settings.DAILY_CHALLENGE_STAR_BUDGET

    if len(rows) >= max_items:
        raise DailyChallengeLimitError(max_items)

    used = sum(int(row.get("stars") or 0) for row in rows)
    if used + stars > budget:
        raise DailyStarBudgetError(budget, used, stars)


class DailyChallengeService:
    """
    Service for per-day, star-budgeted challenges.
    """

    @staticmethod
    def list_daily_challenges(
        couple_id: str | UUID,
        day_date: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        List one day's daily challenges, oldest first.

        Args:
            day_date: YYYY-MM-DD; anything else means today (UTC)
        """
        return SupabaseClient.fetch_daily_challenges(couple_id, normalize_date_key(day_date))

    @staticmethod
    def create_daily_challenge(
        couple_id: str | UUID,
        user_id: str,
        title: str,
        stars: Any,
    ) -> dict[str, Any]:
        """
        Create a daily challenge for today (UTC).

        Returns:
            Created daily challenge dict

        Raises:
            ValidationError: If stars is not a finite number
            DailyChallengeLimitError: 409 when the day is full
            DailyStarBudgetError: 409 when the stars don't fit the budget
        """
        clamped = clamp_daily_stars(stars)
        day_date = today_key_utc()

        existing = SupabaseClient.fetch_daily_challenges(couple_id, day_date)
        check_daily_caps(existing, clamped)

        created = SupabaseClient.insert_daily_challenge({
            "couple_id": str(couple_id),
            "created_by": user_id,
            "title": title,
            "stars": clamped,
            "day_date": day_date,
        })
        created_id = str(created["id"])
        undo = [("delete daily challenge", lambda: SupabaseClient.delete_daily_challenge(created_id))]

        try:
            committed = SupabaseClient.fetch_daily_challenges(couple_id, day_date)
        except SupabaseClientError as e:
            compensate("create_daily_challenge", e, undo)

        earlier = []
        for row in committed:
            if str(row.get("id")) == created_id:
                break
            earlier.append(row)

        try:
            check_daily_caps(earlier, clamped)
        except LuckyLoveException as e:
            logger.info(f"Daily challenge {created_id} lost the budget race for couple {couple_id}")
            compensate("create_daily_challenge", e, undo)

        logger.info(f"Created daily challenge: {created_id} ({clamped} stars) for {day_date}")
        return created

    @staticmethod
    def complete_daily_challenge(
        couple_id: str | UUID,
        challenge_id: str,
        user_id: str,
    ) -> dict[str, Any]:
        """
        Mark one of today's daily challenges as completed.

        Grants DAILY_CHALLENGE_XP_REWARD XP; if that fails the completion is
        reverted.

        Raises:
            DailyChallengeNotFoundError: 404 if missing or not from today
            DailyChallengeAlreadyCompletedError: 409, also for a lost race
        """
        day_date = today_key_utc()

        challenge = SupabaseClient.fetch_daily_challenge(couple_id, challenge_id, day_date)
        if not challenge:
            raise DailyChallengeNotFoundError(str(challenge_id))

        if challenge.get("completed_at"):
            raise DailyChallengeAlreadyCompletedError(str(challenge_id))

        completed = SupabaseClient.update_daily_challenge_completion(
            couple_id,
            challenge_id,
            completed=False,
            updates={"completed_by": user_id, "completed_at": utc_now().isoformat()},
        )
        if completed is None:
            raise DailyChallengeAlreadyCompletedError(str(challenge_id))

        def revert_completion() -> None:
            reverted = SupabaseClient.update_daily_challenge_completion(
                couple_id,
                challenge_id,
                completed=True,
                updates={"completed_by": None, "completed_at": None},
            )
            if reverted is None:
                raise RuntimeError("daily challenge is no longer completed")

        try:
            LevelService.add_xp(couple_id, settings.DAILY_CHALLENGE_XP_REWARD)
        except (SupabaseClientError, LuckyLoveException) as e:
            compensate("complete_daily_challenge", e, [("revert completion", revert_completion)])

        logger.info(f"Daily challenge {challenge_id} completed by {user_id}")
        return completed
