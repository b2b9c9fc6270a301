# =============================================================================
# app/routers/messages.py - Message Endpoints
# =============================================================================
# Messages between partners and the message of the day.
# =============================================================================

from fastapi import APIRouter, Depends, status

from app.auth import get_couple_member, CoupleMember
from app.dependencies import DailyMessageCacheDep
from core.models.message import MessageCreate, MessageEnvelope, MessageList
from core.services.message_service import MessageService

router = APIRouter(prefix="/home")


@router.get("/messages", response_model=MessageList)
async def list_messages(
    member: CoupleMember = Depends(get_couple_member),
) -> MessageList:
    """List the couple's messages, newest first."""
    return MessageList(items=MessageService.list_messages(member.couple_id))


@router.post("/messages", response_model=MessageEnvelope, status_code=status.HTTP_201_CREATED)
async def create_message(
    request: MessageCreate,
    member: CoupleMember = Depends(get_couple_member),
) -> MessageEnvelope:
    """Send a message to the partner."""
    message = MessageService.create_message(member.couple_id, member.id, request.text)
    return MessageEnvelope(message=message)


@router.get("/daily-message", response_model=MessageEnvelope)
async def get_daily_message(
    cache: DailyMessageCacheDep,
    member: CoupleMember = Depends(get_couple_member),
) -> MessageEnvelope:
    """
    Get the message of the day.

    Picked at random once per couple and UTC day. 404 if the couple has no
    messages yet.
    """
    message = MessageService.get_daily_message(member.couple_id, cache)
    return MessageEnvelope(message=message)
