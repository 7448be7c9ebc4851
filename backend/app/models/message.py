"""
Chat Message Database Model.
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.sql import func
from backend.app.db.session import Base

# Receiver id for the shared support channel
SUPPORT_CHANNEL = "SUPPORT"


class Message(Base):
    """
    A chat message between a user and support (or another user).

    Auto-replies produced by the text-generation provider are flagged
    with is_ai_generated.
    """
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    sender_id = Column(String(32), nullable=False, index=True)
    receiver_id = Column(String(32), nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_ai_generated = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<Message(id={self.id}, from={self.sender_id}, to={self.receiver_id})>"
