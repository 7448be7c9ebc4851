"""
Chat Schemas.
"""

from pydantic import Field
from datetime import datetime
from typing import List, Optional
from backend.app.models.message import SUPPORT_CHANNEL
from backend.app.schemas.common import CamelModel


class MessageCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=2000)
    receiver_id: str = Field(SUPPORT_CHANNEL, description="User id, or SUPPORT for the support channel")


class MessageResponse(CamelModel):
    id: int
    sender_id: str
    receiver_id: str
    content: str
    is_ai_generated: bool
    created_at: datetime


class ChatExchangeResponse(CamelModel):
    """The stored message plus the auto-reply, when one was generated."""
    message: MessageResponse
    reply: Optional[MessageResponse] = None


class ConversationResponse(CamelModel):
    messages: List[MessageResponse]
    total: int
