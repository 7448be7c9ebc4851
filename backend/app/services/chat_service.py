"""
Support Chat Service.

Stores chat messages and, for messages sent to the support channel,
an auto-reply from the text-generation provider.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.domain.context import Actor
from backend.app.models.message import SUPPORT_CHANNEL, Message
from backend.app.services.text_generation import TextGenerator, simulate_chat_response

logger = logging.getLogger("eparcel")

# Messages of history passed to the provider as context
CONTEXT_MESSAGES = 5


def _between(actor_id: str, peer_id: str):
    return or_(
        and_(Message.sender_id == actor_id, Message.receiver_id == peer_id),
        and_(Message.sender_id == peer_id, Message.receiver_id == actor_id),
    )


async def list_conversation(
    db: AsyncSession,
    actor: Actor,
    peer_id: str = SUPPORT_CHANNEL,
    limit: int = 100,
) -> List[Message]:
    """Messages between the actor and a peer (or the support channel), oldest first."""
    query = (
        select(Message)
        .where(_between(actor.id, peer_id))
        .order_by(Message.created_at, Message.id)
        .limit(limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def recent_messages(db: AsyncSession, actor: Actor, peer_id: str, count: int) -> List[Message]:
    """The newest `count` messages of a conversation, oldest first."""
    query = (
        select(Message)
        .where(_between(actor.id, peer_id))
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(count)
    )
    result = await db.execute(query)
    return list(reversed(result.scalars().all()))


async def send_message(
    data,
    db: AsyncSession,
    generator: TextGenerator,
    actor: Actor,
    content: str,
    receiver_id: str = SUPPORT_CHANNEL,
) -> Tuple[Message, Optional[Message]]:
    """
    Store a message; auto-reply when it is addressed to support.

    Returns:
        (message, reply) where reply is None for direct messages or when
        auto-replies are disabled.

    Raises:
        ResourceNotFoundError: receiver is not a known user
    """
    if receiver_id != SUPPORT_CHANNEL and await data.users.get(receiver_id) is None:
        raise ResourceNotFoundError("User", receiver_id)

    history = (
        await recent_messages(db, actor, receiver_id, CONTEXT_MESSAGES)
        if receiver_id == SUPPORT_CHANNEL
        else []
    )

    message = Message(sender_id=actor.id, receiver_id=receiver_id, content=content)
    db.add(message)
    await db.commit()
    await db.refresh(message)

    if receiver_id != SUPPORT_CHANNEL or not settings.chat_auto_reply:
        return message, None

    context = " | ".join(m.content for m in history) or "New conversation"
    reply_text = await simulate_chat_response(generator, content, actor.role.value, context)

    reply = Message(
        sender_id=SUPPORT_CHANNEL,
        receiver_id=actor.id,
        content=reply_text,
        is_ai_generated=True,
    )
    db.add(reply)
    await db.commit()
    await db.refresh(reply)
    logger.info("Auto-replied to support message %s from %s", message.id, actor.id)
    return message, reply
