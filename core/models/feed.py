# =============================================================================
# core/models/feed.py - Activity Feed Schemas
# =============================================================================
# These models define the API contract for the home activity feed:
# - ActivityGroup: One rendered feed line ("Tu enviaste 2 mensajes nuevos")
# - NotificationFeed: The GET /home/notifications response
# - MarkSeenRequest / MarkSeenResponse: POST /home/notifications/seen
#
# The feed is derived on every request from home_notifications; none of
# these are persisted.
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ActivityGroup(BaseModel):
    """
    All events of one actor and one action, collapsed into a feed line.

    Example:
        {
            "ids": ["e1", "e2"],
            "actor_id": "user-a",
            "actor_name": "Ana",
            "action": "create_message",
            "count": 2,
            "text": "Ana envio 2 mensajes nuevos",
            "created_at": "2026-01-15T10:30:00Z",
            "seen": false
        }
    """

    # Every member event id, so the client can mark the whole line seen
    ids: list[str] = Field(
        default_factory=list,
        description="IDs of the events in this group"
    )

    actor_id: str | None = Field(
        default=None,
        description="User who produced the events (null for system events)"
    )

    actor_name: str = Field(
        ...,
        description="'Tu' for the viewer, otherwise the partner's display name"
    )

    action: str = Field(
        ...,
        description="Event action, e.g. create_message"
    )

    count: int = Field(
        ...,
        ge=1,
        description="Number of events in the group"
    )

    text: str = Field(
        ...,
        description="Rendered Spanish summary line"
    )

    # Latest member timestamp; None only if no member had one
    created_at: datetime | None = Field(
        default=None,
        description="Timestamp of the most recent event in the group"
    )

    seen: bool = Field(
        ...,
        description="True when the viewer has seen every event in the group"
    )


class NotificationFeed(BaseModel):
    """Response for GET /home/notifications, newest group first."""

    items: list[ActivityGroup] = Field(default_factory=list)


class MarkSeenRequest(BaseModel):
    """
    Body for POST /home/notifications/seen.

    Omit ids (or send an empty list) to mark every event of the couple.
    """

    ids: list[UUID] | None = Field(
        default=None,
        description="Event IDs to mark as seen"
    )


class MarkSeenResponse(BaseModel):
    """Number of events whose seen_by gained the viewer."""

    updated: int = Field(..., ge=0)
