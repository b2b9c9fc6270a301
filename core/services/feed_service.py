# =============================================================================
# core/services/feed_service.py - Activity Feed Aggregation
# =============================================================================
# Turns a couple's raw event log (home_notifications) into the home feed.
#
# Events are grouped by (actor, action) across the whole fetched window:
# "Ana envio 3 mensajes nuevos" instead of three separate lines. A group is
# seen only when the viewer has seen every event in it; the viewer always
# counts as having seen their own events.
#
# Seen state is a Postgres uuid[] column that only ever grows. Appending is a
# compare-and-swap on the previous array value so both partners can mark the
# same event at the same time without dropping each other's id.
# =============================================================================

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import parse_timestamp
from app.config import settings
from app.exceptions import ContentionError, StoreError
from core.models.feed import ActivityGroup

logger = logging.getLogger(__name__)

# Sentinels used in the grouping key
NO_ACTOR = "none"
UNKNOWN_ACTION = "unknown"

SELF_NAME = "Tu"
PARTNER_PLACEHOLDER = "Pareja"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ActionCopy:
    """Spanish wording for one event action."""
    self_verb: str
    other_verb: str
    singular: str
    plural: str


ACTION_LABELS: dict[str, ActionCopy] = {
    "create_review": ActionCopy("agregaste", "agrego", "resena nueva", "resenas nuevas"),
    "create_challenge": ActionCopy("creaste", "creo", "reto nuevo", "retos nuevos"),
    "create_message": ActionCopy("enviaste", "envio", "mensaje nuevo", "mensajes nuevos"),
    "create_reward": ActionCopy("creaste", "creo", "beneficio nuevo", "beneficios nuevos"),
    "edit_day": ActionCopy("editaste", "edito", "dia del calendario", "dias del calendario"),
    "answer_daily_question": ActionCopy("respondiste", "respondio", "pregunta diaria", "preguntas diarias"),
}

FALLBACK_LABEL = ActionCopy("hiciste", "hizo", "novedad", "novedades")


@dataclass
class EventGroup:
    """Accumulator for one (actor, action) group while scanning events."""
    actor_id: str | None
    action: str
    ids: list[str] = field(default_factory=list)
    count: int = 0
    seen: bool = True
    created_at: datetime | None = None


def is_seen_by(event: dict[str, Any], viewer_id: str) -> bool:
    """An event is seen by its own actor and by everyone in seen_by."""
    if event.get("actor_id") == viewer_id:
        return True
    return viewer_id in (event.get("seen_by") or [])


def display_name(profile: dict[str, Any] | None) -> str:
    """
    Resolve a partner's display name.

    Trimmed alias, else the e-mail local part, else "Pareja".
    """
    if not profile:
        return PARTNER_PLACEHOLDER
    alias = (profile.get("alias") or "").strip()
    if alias:
        return alias
    email = profile.get("email") or ""
    local_part = email.split("@")[0]
    return local_part or PARTNER_PLACEHOLDER


class ActivityFeedService:
    """
    Service for the home activity feed.

    Provides grouping/rendering as pure functions plus the store-backed
    build, mark-seen and record operations used by the routes.
    """

    @staticmethod
    def group_events(events: list[dict[str, Any]], viewer_id: str) -> list[EventGroup]:
        """
        Group events by actor and action.

        Args:
            events: Event rows in any order
            viewer_id: The user the feed is built for

        Returns:
            One EventGroup per (actor, action), in first-seen order
        """
        groups: dict[str, EventGroup] = {}

        for event in events:
            actor_id = event.get("actor_id")
            action = event.get("action") or UNKNOWN_ACTION
            key = f"{actor_id or NO_ACTOR}|{action}"

            group = groups.get(key)
            if group is None:
                group = EventGroup(actor_id=actor_id, action=action)
                groups[key] = group

            group.ids.append(str(event.get("id")))
            group.count += 1
            group.seen = group.seen and is_seen_by(event, viewer_id)

            created_at = parse_timestamp(event.get("created_at"))
            if created_at and (group.created_at is None or created_at > group.created_at):
                group.created_at = created_at

        return list(groups.values())

    @staticmethod
    def render_group(
        group: EventGroup,
        viewer_id: str,
        names: dict[str, str],
    ) -> ActivityGroup:
        """
        Render one group as a feed line.

        Args:
            group: Accumulated group
            viewer_id: The user the feed is built for
            names: actor_id -> display name for the partner(s)
        """
        is_self = group.actor_id is not None and group.actor_id == viewer_id
        actor_name = SELF_NAME if is_self else names.get(group.actor_id or "", PARTNER_PLACEHOLDER)

        copy = ACTION_LABELS.get(group.action, FALLBACK_LABEL)
        verb = copy.self_verb if is_self else copy.other_verb
        noun = copy.singular if group.count == 1 else copy.plural

        return ActivityGroup(
            ids=group.ids,
            actor_id=group.actor_id,
            actor_name=actor_name,
            action=group.action,
            count=group.count,
            text=f"{actor_name} {verb} {group.count} {noun}",
            created_at=group.created_at,
            seen=group.seen,
        )

    @staticmethod
    def _resolve_names(actor_ids: list[str]) -> dict[str, str]:
        # Names are cosmetic; a lookup failure falls back to the placeholder
        try:
            profiles = SupabaseClient.fetch_profiles(actor_ids)
        except SupabaseClientError as e:
            logger.warning(f"Could not resolve actor names, using placeholder: {e.message}")
            return {}
        return {str(p.get("user_id")): display_name(p) for p in profiles}

    @staticmethod
    def build_feed(
        couple_id: str | UUID,
        viewer_id: str,
        limit: int | None = None,
    ) -> list[ActivityGroup]:
        """
        Build the aggregated feed for a viewer.

        Args:
            couple_id: The couple UUID
            viewer_id: The requesting user
            limit: How many recent events to aggregate
                (default NOTIFICATION_FEED_LIMIT)

        Returns:
            ActivityGroups, most recent first; groups without a timestamp last

        Raises:
            StoreError: If the event log can't be read. An empty list always
                means the couple has no events.
        """
        limit = limit or settings.NOTIFICATION_FEED_LIMIT

        try:
            events = SupabaseClient.fetch_notifications(couple_id, limit=limit)
        except SupabaseClientError as e:
            logger.error(f"Failed to load feed for couple {couple_id}: {e.message}")
            raise StoreError(e) from e

        if not events:
            return []

        groups = ActivityFeedService.group_events(events, viewer_id)

        partner_ids = sorted({
            g.actor_id for g in groups
            if g.actor_id and g.actor_id != viewer_id
        })
        names = ActivityFeedService._resolve_names(partner_ids) if partner_ids else {}

        groups.sort(key=lambda g: g.created_at or _EPOCH, reverse=True)
        return [ActivityFeedService.render_group(g, viewer_id, names) for g in groups]

    @staticmethod
    def mark_seen(
        couple_id: str | UUID,
        viewer_id: str,
        ids: list[str] | None = None,
    ) -> int:
        """
        Add the viewer to seen_by of the addressed events.

        Args:
            couple_id: The couple UUID
            viewer_id: The requesting user
            ids: Event IDs; None or empty means every event of the couple

        Returns:
            Number of events that gained the viewer (0 on a repeat call)

        Raises:
            StoreError: If the store fails
            ContentionError: If an event's seen_by kept changing underneath us
        """
        attempts = settings.STORE_MAX_RETRIES

        try:
            rows = SupabaseClient.fetch_notification_seen_state(couple_id, ids or None)
            updated = 0

            for row in rows:
                event_id = str(row["id"])
                seen_by = row.get("seen_by")

                for _ in range(attempts):
                    if viewer_id in (seen_by or []):
                        break
                    new_seen_by = [*(seen_by or []), viewer_id]
                    if SupabaseClient.swap_notification_seen_by(
                        couple_id, event_id, seen_by, new_seen_by
                    ):
                        updated += 1
                        break
                    # Lost the race: re-read and try again from the new value
                    fresh = SupabaseClient.fetch_notification_seen_state(couple_id, [event_id])
                    if not fresh:
                        break
                    seen_by = fresh[0].get("seen_by")
                else:
                    raise ContentionError(f"home_notifications:{event_id}", attempts)

        except SupabaseClientError as e:
            logger.error(f"Failed to mark events seen for couple {couple_id}: {e.message}")
            raise StoreError(e) from e

        logger.info(f"Marked {updated} events seen for user {viewer_id}")
        return updated

    @staticmethod
    def record_event(
        couple_id: str | UUID,
        actor_id: str | None,
        action: str,
        entity_type: str | None = None,
        entity_id: str | None = None,
        message: str | None = None,
    ) -> dict[str, Any] | None:
        """
        Append an event to the couple's log.

        The actor has implicitly seen their own event. This runs after the
        primary action already succeeded, so failures are logged and
        swallowed.

        Returns:
            The stored event, or None if the insert failed
        """
        data = {
            "couple_id": str(couple_id),
            "actor_id": actor_id,
            "action": action,
            "entity_type": entity_type,
            "entity_id": str(entity_id) if entity_id is not None else None,
            "message": message,
            "seen_by": [actor_id] if actor_id else [],
        }

        try:
            return SupabaseClient.insert_notification(data)
        except SupabaseClientError as e:
            logger.warning(f"record_event({action}) failed for couple {couple_id}: {e.message}")
            return None
