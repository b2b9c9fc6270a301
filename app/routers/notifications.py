# =============================================================================
# app/routers/notifications.py - Activity Feed Endpoints
# =============================================================================
# The home screen feed: the couple's recent events grouped per actor and
# action, and marking them as seen.
# All endpoints require a paired user.
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import get_couple_member, CoupleMember
from core.models.feed import MarkSeenRequest, MarkSeenResponse, NotificationFeed
from core.services.feed_service import ActivityFeedService

router = APIRouter()


@router.get("/home/notifications", response_model=NotificationFeed)
async def get_notifications(
    member: CoupleMember = Depends(get_couple_member),
) -> NotificationFeed:
    """
    Get the aggregated activity feed.

    Returns the most recent events of the couple grouped by actor and
    action, newest group first. A group is "seen" when the caller has seen
    every event in it.
    """
    items = ActivityFeedService.build_feed(member.couple_id, member.id)
    return NotificationFeed(items=items)


@router.post("/home/notifications/seen", response_model=MarkSeenResponse)
async def mark_notifications_seen(
    request: MarkSeenRequest | None = None,
    member: CoupleMember = Depends(get_couple_member),
) -> MarkSeenResponse:
    """
    Mark events as seen by the caller.

    Send {"ids": [...]} to mark specific events; send no ids to mark every
    event of the couple. Calling it twice is harmless.
    """
    ids = [str(i) for i in request.ids] if request and request.ids is not None else None
    updated = ActivityFeedService.mark_seen(member.couple_id, member.id, ids)
    return MarkSeenResponse(updated=updated)
