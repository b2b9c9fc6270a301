# =============================================================================
# core/services/message_service.py - Partner Messages
# =============================================================================
# Short messages between partners, plus the "message of the day": one random
# message per couple per UTC day, memoized in a TTLCache handed in by the
# caller.
# =============================================================================

import logging
import random
from typing import Any
from uuid import UUID

from lib.cache import TTLCache
from lib.supabase_client import SupabaseClient
from lib.utils import today_key_utc
from app.config import settings
from app.exceptions import MessageNotFoundError
from core.services.feed_service import ActivityFeedService
from core.services.push_service import PushService

logger = logging.getLogger(__name__)


class MessageService:
    """
    Service for messages between partners.
    """

    @staticmethod
    def create_message(couple_id: str | UUID, user_id: str, text: str) -> dict[str, Any]:
        """
        Store a message, log a create_message event and push "Nuevo mensaje".

        Returns:
            Created message dict
        """
        message = SupabaseClient.insert_message({
            "couple_id": str(couple_id),
            "author_id": user_id,
            "text": text,
        })
        logger.info(f"Created message: {message['id']} for couple: {couple_id}")

        ActivityFeedService.record_event(
            couple_id,
            actor_id=user_id,
            action="create_message",
            entity_type="message",
            entity_id=message["id"],
            message="Envio un mensaje.",
        )
        PushService.notify_partner(
            couple_id,
            actor_id=user_id,
            title="Nuevo mensaje",
            body="Tu pareja envio un mensaje.",
            data={"type": "message", "id": message["id"]},
        )

        return message

    @staticmethod
    def list_messages(couple_id: str | UUID) -> list[dict[str, Any]]:
        """List the couple's messages, newest first."""
        return SupabaseClient.list_messages(couple_id)

    @staticmethod
    def get_daily_message(
        couple_id: str | UUID,
        cache: TTLCache,
        rng: random.Random | None = None,
    ) -> dict[str, Any]:
        """
        Pick the couple's message of the day.

        The first call of a UTC day picks at random; later calls that day get
        the same message from the cache.

        Args:
            couple_id: The couple UUID
            cache: Cache keyed by "couple_id:YYYY-MM-DD"
            rng: Random source (tests)

        Raises:
            MessageNotFoundError: If the couple has no messages yet
        """
        key = f"{couple_id}:{today_key_utc()}"

        def pick() -> dict[str, Any]:
            messages = SupabaseClient.list_messages(couple_id)
            if not messages:
                raise MessageNotFoundError()
            picked = (rng or random).choice(messages)
            logger.debug(f"Picked daily message {picked.get('id')} for {key}")
            return picked

        return cache.get_or_set(key, pick, ttl_seconds=settings.DAILY_MESSAGE_CACHE_TTL_SECONDS)
