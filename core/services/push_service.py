# =============================================================================
# core/services/push_service.py - Partner Push Notifications
# =============================================================================
# Hands a push payload for the partner to the Celery worker. Everything
# here is best-effort: the action that triggered the push already
# succeeded, so lookup or enqueue failures are logged and ignored.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from app.config import settings
from workers.tasks import send_push_notification

logger = logging.getLogger(__name__)

EXPO_TOKEN_PREFIXES = ("ExpoPushToken", "ExponentPushToken")


def is_expo_push_token(token: Any) -> bool:
    """Check that a stored token is an Expo token (not an APNs/FCM raw token)."""
    return isinstance(token, str) and token.startswith(EXPO_TOKEN_PREFIXES)


class PushService:
    """
    Service for notifying the other member of a couple.
    """

    @staticmethod
    def notify_partner(
        couple_id: str | UUID,
        actor_id: str,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> bool:
        """
        Enqueue a push notification to the actor's partner.

        Args:
            couple_id: The couple UUID
            actor_id: The user who did something (not notified)
            title: Notification title
            body: Notification body
            data: Extra payload for the app

        Returns:
            True if a push was enqueued
        """
        if not settings.PUSH_NOTIFICATIONS_ENABLED:
            return False

        try:
            partner = SupabaseClient.fetch_partner_profile(couple_id, actor_id)
        except SupabaseClientError as e:
            logger.warning(f"Push skipped, partner lookup failed for couple {couple_id}: {e.message}")
            return False

        token = (partner or {}).get("expo_push_token")
        if not is_expo_push_token(token):
            logger.debug(f"Push skipped, no Expo token for partner in couple {couple_id}")
            return False

        try:
            send_push_notification.delay(token, title, body, data or {})
        except Exception as e:
            # Broker down; the push is dropped
            logger.warning(f"Push enqueue failed for couple {couple_id}: {e}")
            return False

        logger.info(f"Push enqueued for couple {couple_id}: {title}")
        return True
