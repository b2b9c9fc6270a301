# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides one method per query the services need:
# - Profiles (display names, partner push tokens)
# - Home notifications (the couple event log)
# - Challenges and daily challenges
# - Rewards, star events and couple levels
# - Messages, daily questions and their answers
#
# Guarded writes are "conditional updates": the UPDATE carries the expected
# prior value in its filter (status, redeemed_at IS NULL, ...). PostgREST
# applies the filter and the write in one statement, so an empty result
# means another request changed the row first. Those methods return None
# instead of raising and the caller decides whether that is a conflict.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   rows = SupabaseClient.fetch_notifications(couple_id, limit=60)
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError, normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST / Postgres error codes we branch on
_NO_ROWS = "PGRST116"
_UNIQUE_VIOLATION = "23505"


class SupabaseClientError(ApplicationError):
    """
    Error during Supabase operations.

    Raised for every failed query so callers can tell "no data" (empty
    result, None) apart from "the store could not be reached".
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


def _pg_array(values: list[str]) -> str:
    """Render a list of ids as a Postgres array literal for filters."""
    return "{" + ",".join(values) + "}"


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS), so
        every query below filters by couple_id explicitly.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return normalize_uuid(uuid_value)

    @staticmethod
    def _first(response: Any) -> dict[str, Any] | None:
        data = response.data or []
        return data[0] if data else None

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_profile(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a user's profile row.

        Returns:
            Profile dict (user_id, email, alias, couple_id), or None if the
            user has no profile yet

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("profiles")
                .select("user_id, email, alias, couple_id")
                .eq("user_id", user_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if _NO_ROWS in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch profile: {e}",
                code="FETCH_PROFILE_FAILED",
                details={"user_id": user_id_str}
            )

    @classmethod
    def fetch_profiles(cls, user_ids: list[str]) -> list[dict[str, Any]]:
        """Fetch display fields (user_id, alias, email) for several users."""
        if not user_ids:
            return []

        client = cls.get_client()

        try:
            response = (
                client.table("profiles")
                .select("user_id, alias, email")
                .in_("user_id", user_ids)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch profiles: {e}",
                code="FETCH_PROFILES_FAILED",
                details={"user_ids": user_ids}
            )

    @classmethod
    def fetch_partner_profile(
        cls,
        couple_id: str | UUID,
        user_id: str | UUID,
    ) -> dict[str, Any] | None:
        """
        Fetch the other member of a couple.

        Returns:
            Dict with user_id and expo_push_token, or None when the couple
            has a single member
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("profiles")
                .select("user_id, expo_push_token")
                .eq("couple_id", couple_id_str)
                .neq("user_id", user_id_str)
                .limit(1)
                .execute()
            )
            return cls._first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch partner profile: {e}",
                code="FETCH_PARTNER_FAILED",
                details={"couple_id": couple_id_str}
            )

    # -------------------------------------------------------------------------
    # Home Notifications (event log)
    # -------------------------------------------------------------------------

    @classmethod
    def insert_notification(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Append an event to home_notifications.

        Returns:
            Inserted row with generated id and created_at

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()

        try:
            response = client.table("home_notifications").insert(data).execute()
            row = cls._first(response)
            if row:
                return row
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert notification: {e}",
                code="INSERT_NOTIFICATION_FAILED",
                details={"couple_id": data.get("couple_id"), "action": data.get("action")}
            )

    @classmethod
    def fetch_notifications(
        cls,
        couple_id: str | UUID,
        limit: int = 60,
    ) -> list[dict[str, Any]]:
        """
        Fetch the most recent events of a couple, newest first.

        Raises:
            SupabaseClientError: If query fails. An empty list always means
            the couple has no events.
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)

        try:
            response = (
                client.table("home_notifications")
                .select("*")
                .eq("couple_id", couple_id_str)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch notifications: {e}",
                code="FETCH_NOTIFICATIONS_FAILED",
                suggestion="Check that the home_notifications table is accessible",
                details={"couple_id": couple_id_str, "limit": limit}
            )

    @classmethod
    def fetch_notification_seen_state(
        cls,
        couple_id: str | UUID,
        ids: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Fetch (id, seen_by) for some or all events of a couple.

        Args:
            couple_id: The couple UUID
            ids: Restrict to these event ids; None or empty means all
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)

        try:
            query = (
                client.table("home_notifications")
                .select("id, seen_by")
                .eq("couple_id", couple_id_str)
            )
            if ids:
                query = query.in_("id", ids)
            response = query.execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch notification seen state: {e}",
                code="FETCH_SEEN_STATE_FAILED",
                details={"couple_id": couple_id_str}
            )

    @classmethod
    def swap_notification_seen_by(
        cls,
        couple_id: str | UUID,
        notification_id: str,
        expected_seen_by: list[str] | None,
        new_seen_by: list[str],
    ) -> bool:
        """
        Replace seen_by only if it still equals expected_seen_by.

        Args:
            expected_seen_by: Value read earlier; None matches a NULL column

        Returns:
            True if the row was updated, False if seen_by changed meanwhile
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)

        try:
            query = (
                client.table("home_notifications")
                .update({"seen_by": new_seen_by})
                .eq("id", notification_id)
                .eq("couple_id", couple_id_str)
            )
            if expected_seen_by is None:
                query = query.is_("seen_by", "null")
            else:
                query = query.filter("seen_by", "eq", _pg_array(expected_seen_by))
            response = query.execute()
            return bool(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update notification seen state: {e}",
                code="UPDATE_SEEN_STATE_FAILED",
                details={"couple_id": couple_id_str, "notification_id": notification_id}
            )

    # -------------------------------------------------------------------------
    # Challenges
    # -------------------------------------------------------------------------

    @classmethod
    def insert_challenge(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a challenge and return the stored row."""
        client = cls.get_client()

        try:
            response = client.table("home_challenges").insert(data).execute()
            row = cls._first(response)
            if row:
                return row
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert challenge: {e}",
                code="INSERT_CHALLENGE_FAILED",
                details={"couple_id": data.get("couple_id")}
            )

    @classmethod
    def fetch_challenge(
        cls,
        couple_id: str | UUID,
        challenge_id: str | UUID,
    ) -> dict[str, Any] | None:
        """
        Fetch one challenge scoped to a couple.

        Returns:
            Challenge dict, or None if it doesn't exist for this couple
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)
        challenge_id_str = cls._normalize_uuid(challenge_id)

        try:
            response = (
                client.table("home_challenges")
                .select("*")
                .eq("id", challenge_id_str)
                .eq("couple_id", couple_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if _NO_ROWS in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch challenge: {e}",
                code="FETCH_CHALLENGE_FAILED",
                details={"couple_id": couple_id_str, "challenge_id": challenge_id_str}
            )

    @classmethod
    def list_challenges(cls, couple_id: str | UUID) -> list[dict[str, Any]]:
        """List a couple's challenges, newest first."""
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)

        try:
            response = (
                client.table("home_challenges")
                .select("*")
                .eq("couple_id", couple_id_str)
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list challenges: {e}",
                code="LIST_CHALLENGES_FAILED",
                details={"couple_id": couple_id_str}
            )

    @classmethod
    def update_challenge_if_status(
        cls,
        couple_id: str | UUID,
        challenge_id: str | UUID,
        expected_status: str,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update a challenge only while it is still in expected_status.

        Returns:
            Updated row, or None if the status had already changed
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)
        challenge_id_str = cls._normalize_uuid(challenge_id)

        try:
            response = (
                client.table("home_challenges")
                .update(updates)
                .eq("id", challenge_id_str)
                .eq("couple_id", couple_id_str)
                .eq("status", expected_status)
                .execute()
            )
            return cls._first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update challenge: {e}",
                code="UPDATE_CHALLENGE_FAILED",
                details={
                    "couple_id": couple_id_str,
                    "challenge_id": challenge_id_str,
                    "expected_status": expected_status,
                }
            )

    # -------------------------------------------------------------------------
    # Daily Challenges
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_daily_challenges(
        cls,
        couple_id: str | UUID,
        day_date: str,
    ) -> list[dict[str, Any]]:
        """
        Fetch one day's daily challenges in commit order.

        Ordered by (created_at, id) so every reader agrees on which row
        came first.
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)

        try:
            response = (
                client.table("home_daily_challenges")
                .select("*")
                .eq("couple_id", couple_id_str)
                .eq("day_date", day_date)
                .order("created_at", desc=False)
                .order("id", desc=False)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch daily challenges: {e}",
                code="FETCH_DAILY_CHALLENGES_FAILED",
                details={"couple_id": couple_id_str, "day_date": day_date}
            )

    @classmethod
    def fetch_daily_challenge(
        cls,
        couple_id: str | UUID,
        challenge_id: str | UUID,
        day_date: str,
    ) -> dict[str, Any] | None:
        """Fetch one daily challenge of a given day, or None."""
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)
        challenge_id_str = cls._normalize_uuid(challenge_id)

        try:
            response = (
                client.table("home_daily_challenges")
                .select("*")
                .eq("id", challenge_id_str)
                .eq("couple_id", couple_id_str)
                .eq("day_date", day_date)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if _NO_ROWS in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch daily challenge: {e}",
                code="FETCH_DAILY_CHALLENGE_FAILED",
                details={"couple_id": couple_id_str, "challenge_id": challenge_id_str}
            )

    @classmethod
    def insert_daily_challenge(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a daily challenge and return the stored row."""
        client = cls.get_client()

        try:
            response = client.table("home_daily_challenges").insert(data).execute()
            row = cls._first(response)
            if row:
                return row
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert daily challenge: {e}",
                code="INSERT_DAILY_CHALLENGE_FAILED",
                details={"couple_id": data.get("couple_id"), "day_date": data.get("day_date")}
            )

    @classmethod
    def delete_daily_challenge(cls, challenge_id: str | UUID) -> None:
        """Delete a daily challenge (used to withdraw an over-budget insert)."""
        client = cls.get_client()
        challenge_id_str = cls._normalize_uuid(challenge_id)

        try:
            client.table("home_daily_challenges").delete().eq("id", challenge_id_str).execute()

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete daily challenge: {e}",
                code="DELETE_DAILY_CHALLENGE_FAILED",
                details={"challenge_id": challenge_id_str}
            )

    @classmethod
    def update_daily_challenge_completion(
        cls,
        couple_id: str | UUID,
        challenge_id: str | UUID,
        completed: bool,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update a daily challenge only if its completion state is as expected.

        Args:
            completed: Expected current state (False: completed_at IS NULL)

        Returns:
            Updated row, or None if the state had already changed
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)
        challenge_id_str = cls._normalize_uuid(challenge_id)

        try:
            query = (
                client.table("home_daily_challenges")
                .update(updates)
                .eq("id", challenge_id_str)
                .eq("couple_id", couple_id_str)
            )
            if completed:
                query = query.not_.is_("completed_at", "null")
            else:
                query = query.is_("completed_at", "null")
            response = query.execute()
            return cls._first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update daily challenge: {e}",
                code="UPDATE_DAILY_CHALLENGE_FAILED",
                details={"couple_id": couple_id_str, "challenge_id": challenge_id_str}
            )

    # -------------------------------------------------------------------------
    # Rewards
    # -------------------------------------------------------------------------

    @classmethod
    def list_rewards(cls, couple_id: str | UUID) -> list[dict[str, Any]]:
        """List a couple's rewards, newest first."""
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)

        try:
            response = (
                client.table("couple_rewards")
                .select("*")
                .eq("couple_id", couple_id_str)
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list rewards: {e}",
                code="LIST_REWARDS_FAILED",
                details={"couple_id": couple_id_str}
            )

    @classmethod
    def fetch_reward(
        cls,
        couple_id: str | UUID,
        reward_id: str | UUID,
    ) -> dict[str, Any] | None:
        """Fetch one reward scoped to a couple, or None."""
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)
        reward_id_str = cls._normalize_uuid(reward_id)

        try:
            response = (
                client.table("couple_rewards")
                .select("*")
                .eq("id", reward_id_str)
                .eq("couple_id", couple_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if _NO_ROWS in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch reward: {e}",
                code="FETCH_REWARD_FAILED",
                details={"couple_id": couple_id_str, "reward_id": reward_id_str}
            )

    @classmethod
    def insert_reward(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a reward and return the stored row."""
        client = cls.get_client()

        try:
            response = client.table("couple_rewards").insert(data).execute()
            row = cls._first(response)
            if row:
                return row
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert reward: {e}",
                code="INSERT_REWARD_FAILED",
                details={"couple_id": data.get("couple_id")}
            )

    @classmethod
    def update_reward_if_unredeemed(
        cls,
        couple_id: str | UUID,
        reward_id: str | UUID,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update a reward only while redeemed_at IS NULL.

        Returns:
            Updated row, or None if the reward was redeemed meanwhile
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)
        reward_id_str = cls._normalize_uuid(reward_id)

        try:
            response = (
                client.table("couple_rewards")
                .update(updates)
                .eq("id", reward_id_str)
                .eq("couple_id", couple_id_str)
                .is_("redeemed_at", "null")
                .execute()
            )
            return cls._first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update reward: {e}",
                code="UPDATE_REWARD_FAILED",
                details={"couple_id": couple_id_str, "reward_id": reward_id_str}
            )

    # -------------------------------------------------------------------------
    # Star Events (append-only ledger)
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_star_events(
        cls,
        couple_id: str | UUID,
        user_id: str | UUID,
    ) -> list[dict[str, Any]]:
        """
        Fetch every star event awarded to a user within a couple.

        Rows come in ledger order (created_at, id) so callers can tell
        which of two concurrent debits landed first.
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("couple_star_events")
                .select("id, stars, created_at")
                .eq("couple_id", couple_id_str)
                .eq("awarded_to", user_id_str)
                .order("created_at", desc=False)
                .order("id", desc=False)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch star events: {e}",
                code="FETCH_STAR_EVENTS_FAILED",
                details={"couple_id": couple_id_str, "user_id": user_id_str}
            )

    @classmethod
    def insert_star_event(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Append a star event and return the stored row."""
        client = cls.get_client()

        try:
            response = client.table("couple_star_events").insert(data).execute()
            row = cls._first(response)
            if row:
                return row
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert star event: {e}",
                code="INSERT_STAR_EVENT_FAILED",
                details={"couple_id": data.get("couple_id"), "awarded_to": data.get("awarded_to")}
            )

    @classmethod
    def delete_star_event(cls, event_id: str | UUID) -> None:
        """
        Delete a star event.

        Only used to undo an entry written earlier in the same request.
        """
        client = cls.get_client()
        event_id_str = cls._normalize_uuid(event_id)

        try:
            client.table("couple_star_events").delete().eq("id", event_id_str).execute()

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete star event: {e}",
                code="DELETE_STAR_EVENT_FAILED",
                details={"event_id": event_id_str}
            )

    # -------------------------------------------------------------------------
    # Couple Levels
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_couple_level(cls, couple_id: str | UUID) -> dict[str, Any] | None:
        """Fetch the couple's level row, or None if no XP was ever granted."""
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)

        try:
            response = (
                client.table("couple_levels")
                .select("*")
                .eq("couple_id", couple_id_str)
                .limit(1)
                .execute()
            )
            return cls._first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch couple level: {e}",
                code="FETCH_LEVEL_FAILED",
                details={"couple_id": couple_id_str}
            )

    @classmethod
    def insert_couple_level(
        cls,
        couple_id: str | UUID,
        level: int,
        xp: int,
    ) -> dict[str, Any] | None:
        """
        Create the couple's level row.

        Returns:
            Inserted row, or None if another request created it first
            (unique violation on couple_id)
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)

        try:
            response = (
                client.table("couple_levels")
                .insert({"couple_id": couple_id_str, "level": level, "xp": xp})
                .execute()
            )
            return cls._first(response)

        except Exception as e:
            if _UNIQUE_VIOLATION in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to insert couple level: {e}",
                code="INSERT_LEVEL_FAILED",
                details={"couple_id": couple_id_str}
            )

    @classmethod
    def update_couple_level_if_unchanged(
        cls,
        couple_id: str | UUID,
        expected_level: int,
        expected_xp: int,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update the level row only if (level, xp) still match what was read.

        Returns:
            Updated row, or None if a concurrent grant got there first
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)

        try:
            response = (
                client.table("couple_levels")
                .update(updates)
                .eq("couple_id", couple_id_str)
                .eq("level", expected_level)
                .eq("xp", expected_xp)
                .execute()
            )
            return cls._first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update couple level: {e}",
                code="UPDATE_LEVEL_FAILED",
                details={"couple_id": couple_id_str}
            )

    # -------------------------------------------------------------------------
    # Messages
    # -------------------------------------------------------------------------

    @classmethod
    def insert_message(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a message and return the stored row."""
        client = cls.get_client()

        try:
            response = client.table("home_messages").insert(data).execute()
            row = cls._first(response)
            if row:
                return row
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert message: {e}",
                code="INSERT_MESSAGE_FAILED",
                details={"couple_id": data.get("couple_id")}
            )

    @classmethod
    def list_messages(cls, couple_id: str | UUID) -> list[dict[str, Any]]:
        """List a couple's messages, newest first."""
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)

        try:
            response = (
                client.table("home_messages")
                .select("id, text, author_id, created_at")
                .eq("couple_id", couple_id_str)
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list messages: {e}",
                code="LIST_MESSAGES_FAILED",
                details={"couple_id": couple_id_str}
            )

    # -------------------------------------------------------------------------
    # Daily questions
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_daily_question(
        cls,
        couple_id: str | UUID,
        start: datetime,
        end: datetime,
    ) -> dict[str, Any] | None:
        """
        Fetch the latest question asked within [start, end).

        Returns:
            Question dict, or None if nothing was asked in the window
        """
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)

        try:
            response = (
                client.table("home_daily_questions")
                .select("*")
                .eq("couple_id", couple_id_str)
                .gte("asked_at", start.isoformat())
                .lt("asked_at", end.isoformat())
                .order("asked_at", desc=True)
                .limit(1)
                .execute()
            )
            return cls._first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch daily question: {e}",
                code="FETCH_DAILY_QUESTION_FAILED",
                details={"couple_id": couple_id_str}
            )

    @classmethod
    def fetch_question(
        cls,
        couple_id: str | UUID,
        question_id: str | UUID,
    ) -> dict[str, Any] | None:
        """Fetch one question scoped to a couple, or None."""
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)
        question_id_str = cls._normalize_uuid(question_id)

        try:
            response = (
                client.table("home_daily_questions")
                .select("*")
                .eq("id", question_id_str)
                .eq("couple_id", couple_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if _NO_ROWS in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch question: {e}",
                code="FETCH_QUESTION_FAILED",
                details={"question_id": question_id_str}
            )

    @classmethod
    def insert_question(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a question; asked_at defaults to now() in the database."""
        client = cls.get_client()

        try:
            response = client.table("home_daily_questions").insert(data).execute()
            row = cls._first(response)
            if row:
                return row
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert question: {e}",
                code="INSERT_QUESTION_FAILED",
                details={"couple_id": data.get("couple_id")}
            )

    @classmethod
    def list_questions(cls, couple_id: str | UUID, limit: int = 30) -> list[dict[str, Any]]:
        """List a couple's questions, most recently asked first."""
        client = cls.get_client()
        couple_id_str = cls._normalize_uuid(couple_id)

        try:
            response = (
                client.table("home_daily_questions")
                .select("*")
                .eq("couple_id", couple_id_str)
                .order("asked_at", desc=True)
                .limit(limit)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list questions: {e}",
                code="LIST_QUESTIONS_FAILED",
                details={"couple_id": couple_id_str}
            )

    @classmethod
    def insert_answer(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Insert an answer to a question and return the stored row."""
        client = cls.get_client()

        try:
            response = client.table("home_daily_answers").insert(data).execute()
            row = cls._first(response)
            if row:
                return row
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert answer: {e}",
                code="INSERT_ANSWER_FAILED",
                details={"question_id": data.get("question_id")}
            )

    @classmethod
    def list_answers(cls, question_id: str | UUID) -> list[dict[str, Any]]:
        """List the answers to a question, oldest first."""
        client = cls.get_client()
        question_id_str = cls._normalize_uuid(question_id)

        try:
            response = (
                client.table("home_daily_answers")
                .select("id, question_id, user_id, answer_text, created_at")
                .eq("question_id", question_id_str)
                .order("created_at", desc=False)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list answers: {e}",
                code="LIST_ANSWERS_FAILED",
                details={"question_id": question_id_str}
            )
