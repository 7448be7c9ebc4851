"""
Chat API Endpoints.

Messages to the support channel get an auto-reply.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.core.dependencies import get_actor, get_data_access
from backend.app.domain.context import Actor
from backend.app.models.message import SUPPORT_CHANNEL
from backend.app.schemas.chat import MessageCreate, MessageResponse, ChatExchangeResponse, ConversationResponse
from backend.app.services import chat_service
from backend.app.services.text_generation import TextGenerator, get_text_generator

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.get("/messages", response_model=ConversationResponse)
async def list_messages(
    peer_id: str = Query(SUPPORT_CHANNEL, alias="peerId", description="User id, or SUPPORT"),
    limit: int = Query(100, ge=1, le=500),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db)
):
    """Conversation between the current user and a peer, oldest first."""
    messages = await chat_service.list_conversation(db, actor, peer_id, limit=limit)
    return ConversationResponse(
        messages=[MessageResponse.model_validate(m) for m in messages],
        total=len(messages)
    )


@router.post("/messages", response_model=ChatExchangeResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageCreate,
    actor: Actor = Depends(get_actor),
    data=Depends(get_data_access),
    db: AsyncSession = Depends(get_db),
    generator: TextGenerator = Depends(get_text_generator)
):
    """Send a message; messages to SUPPORT come back with an auto-reply."""
    message, reply = await chat_service.send_message(
        data, db, generator, actor, payload.content, payload.receiver_id
    )
    return ChatExchangeResponse(
        message=MessageResponse.model_validate(message),
        reply=MessageResponse.model_validate(reply) if reply else None
    )
