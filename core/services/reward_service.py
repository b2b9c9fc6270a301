# =============================================================================
# core/services/reward_service.py - Rewards and Star Balance
# =============================================================================
# Stars live in an append-only ledger (couple_star_events): approved
# challenges add positive entries, redeemed rewards add negative ones. A
# user's balance is always the sum of their entries, recomputed on every
# read; it is never stored.
#
# Redemption writes two rows without a transaction: the debit first, then
# the reward's redeemed_at. The reward update is conditional on
# redeemed_at IS NULL and the balance is re-derived after the debit from
# the ledger entries ordered up to it, so of two concurrent spends the
# later one loses with 409 and its debit is deleted again.
# =============================================================================

import logging
import math
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import utc_now
from app.exceptions import (
    InsufficientStarsError,
    RewardAlreadyRedeemedError,
    RewardNotFoundError,
    RewardOwnershipError,
    ValidationError,
)
from core.services.compensation import compensate
from core.services.feed_service import ActivityFeedService

logger = logging.getLogger(__name__)


def compute_balance(events: list[dict[str, Any]]) -> int:
    """
    Sum the stars of a user's ledger entries.

    Example:
        compute_balance([{"stars": 3}, {"stars": 2}, {"stars": -5}])  # 0
    """
    return sum(int(event.get("stars") or 0) for event in events)


def balance_through(events: list[dict[str, Any]], event_id: str) -> int:
    """
    Sum ledger entries up to and including `event_id`.

    `events` must be in ledger order (created_at, id). Of two debits that
    landed concurrently, the earlier one sees a prefix without the later
    one, so exactly one of them can be admitted. If `event_id` is missing
    the whole ledger is summed.

    Example:
        events = [{"id": "g", "stars": 5}, {"id": "d1", "stars": -5}, {"id": "d2", "stars": -5}]
        balance_through(events, "d1")  # 0
        balance_through(events, "d2")  # -5
    """
    total = 0
    for event in events:
        total += int(event.get("stars") or 0)
        if str(event.get("id")) == str(event_id):
            break
    return total


def normalize_stars_required(value: Any, message: str = "starsRequired requerido.") -> int:
    """
    Floor a requested price and clamp it to >= 0.

    Raises:
        ValidationError: If the value is not a finite number
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number):
        raise ValidationError(message, code="INVALID_STARS_REQUIRED", details={"starsRequired": str(value)})
    return max(math.floor(number), 0)


class RewardService:
    """
    Service for rewards ("beneficios") and the star ledger.
    """

    # -------------------------------------------------------------------------
    # Balance
    # -------------------------------------------------------------------------

    @staticmethod
    def get_balance(couple_id: str | UUID, user_id: str) -> int:
        """Derive a user's current star balance from the ledger."""
        return compute_balance(SupabaseClient.fetch_star_events(couple_id, user_id))

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    @staticmethod
    def list_rewards(couple_id: str | UUID, user_id: str) -> dict[str, Any]:
        """
        List the couple's rewards plus the caller's balance.

        Returns:
            Dict with items (newest first) and balance
        """
        rewards = SupabaseClient.list_rewards(couple_id)
        balance = RewardService.get_balance(couple_id, user_id)
        return {"items": rewards, "balance": balance}

    @staticmethod
    def create_reward(
        couple_id: str | UUID,
        user_id: str,
        title: str,
        stars_required: Any,
        description: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a reward the partner can redeem.

        Records a create_reward event.

        Raises:
            ValidationError: If stars_required is not a finite number
        """
        required = normalize_stars_required(stars_required)

        reward = SupabaseClient.insert_reward({
            "couple_id": str(couple_id),
            "title": title,
            "description": description,
            "stars_required": required,
            "created_by": user_id,
            "redeemed_at": None,
            "redeemed_by": None,
        })
        logger.info(f"Created reward: {reward['id']} ({required} stars) for couple: {couple_id}")

        ActivityFeedService.record_event(
            couple_id,
            actor_id=user_id,
            action="create_reward",
            entity_type="reward",
            entity_id=reward["id"],
            message=f"Creo un beneficio: {title}.",
        )

        return reward

    @staticmethod
    def update_reward(
        couple_id: str | UUID,
        reward_id: str,
        user_id: str,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Edit an unredeemed reward.

        Args:
            changes: Only the fields to change (title, description,
                stars_required)

        Raises:
            RewardNotFoundError: 404
            RewardOwnershipError: 403 if the caller didn't create it
            RewardAlreadyRedeemedError: 409 once redeemed
            ValidationError: If stars_required is not a finite number
        """
        reward = SupabaseClient.fetch_reward(couple_id, reward_id)
        if not reward:
            raise RewardNotFoundError(str(reward_id))

        if reward.get("created_by") != user_id:
            raise RewardOwnershipError(str(reward_id), "No puedes editar este beneficio.")

        if reward.get("redeemed_at"):
            raise RewardAlreadyRedeemedError(str(reward_id), "No se puede editar un beneficio canjeado.")

        updates: dict[str, Any] = {}
        if "title" in changes:
            updates["title"] = changes["title"]
        if "description" in changes:
            updates["description"] = changes["description"]
        if "stars_required" in changes:
            updates["stars_required"] = normalize_stars_required(
                changes["stars_required"], message="starsRequired invalido."
            )

        if not updates:
            return reward

        updated = SupabaseClient.update_reward_if_unredeemed(couple_id, reward_id, updates)
        if updated is None:
            raise RewardAlreadyRedeemedError(str(reward_id), "No se puede editar un beneficio canjeado.")

        logger.info(f"Updated reward {reward_id}: {sorted(updates)}")
        return updated

    # -------------------------------------------------------------------------
    # Redemption
    # -------------------------------------------------------------------------

    @staticmethod
    def redeem_reward(couple_id: str | UUID, reward_id: str, user_id: str) -> dict[str, Any]:
        """
        Redeem a partner's reward with the caller's stars.

        Args:
            couple_id: The couple UUID
            reward_id: The reward to redeem
            user_id: The redeeming partner

        Returns:
            The redeemed reward dict

        Raises:
            RewardNotFoundError: 404
            RewardOwnershipError: 403 if the caller created the reward
            RewardAlreadyRedeemedError: 409, also when a concurrent redeem won
            InsufficientStarsError: 409, also when a concurrent spend whose
                debit sorts before ours took the stars
            UpstreamError: If marking the reward failed (debit deleted)
            CompensationFailedError: If deleting the debit failed too
        """
        reward = SupabaseClient.fetch_reward(couple_id, reward_id)
        if not reward:
            raise RewardNotFoundError(str(reward_id))

        if reward.get("created_by") == user_id:
            raise RewardOwnershipError(str(reward_id), "No puedes canjear tu propio beneficio.")

        if reward.get("redeemed_at"):
            raise RewardAlreadyRedeemedError(str(reward_id))

        required = abs(int(reward.get("stars_required") or 0))
        balance = RewardService.get_balance(couple_id, user_id)
        if balance < required:
            raise InsufficientStarsError(str(reward_id), balance, required)

        debit = SupabaseClient.insert_star_event({
            "couple_id": str(couple_id),
            "reward_id": str(reward_id),
            "awarded_to": user_id,
            "stars": -required,
        })
        undo = [("delete star debit", lambda: SupabaseClient.delete_star_event(debit["id"]))]

        # Another spend may have landed between the check and the debit.
        # Only debits ordered before ours count against it.
        try:
            ledger = SupabaseClient.fetch_star_events(couple_id, user_id)
        except SupabaseClientError as e:
            compensate("redeem_reward", e, undo)

        balance_after = balance_through(ledger, debit["id"])

        if balance_after < 0:
            compensate(
                "redeem_reward",
                InsufficientStarsError(str(reward_id), balance_after + required, required),
                undo,
            )

        try:
            redeemed = SupabaseClient.update_reward_if_unredeemed(
                couple_id,
                reward_id,
                {"redeemed_at": utc_now().isoformat(), "redeemed_by": user_id},
            )
        except SupabaseClientError as e:
            compensate("redeem_reward", e, undo)

        if redeemed is None:
            compensate("redeem_reward", RewardAlreadyRedeemedError(str(reward_id)), undo)

        logger.info(f"Reward {reward_id} redeemed by {user_id} for {required} stars")
        return redeemed
