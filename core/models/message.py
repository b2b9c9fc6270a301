# =============================================================================
# core/models/message.py - Message Schemas
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    """Body for POST /home/messages."""

    text: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Message for the partner"
    )


class MessageResponse(BaseModel):
    """A stored message."""

    id: str
    text: str
    author_id: str | None = None
    created_at: datetime | None = None


class MessageEnvelope(BaseModel):
    message: MessageResponse


class MessageList(BaseModel):
    items: list[MessageResponse] = Field(default_factory=list)
