"""
Audit Log Database Model.

Tracks security events, account changes and parcel lifecycle actions.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from backend.app.db.session import Base


class AuditLog(Base):
    """
    Audit log entry.

    Events logged:
    - LOGIN_SUCCESS / LOGIN_FAILED / LOGOUT
    - CLIENT_REGISTERED / USER_CREATED
    - USER_ACTIVATED / USER_DEACTIVATED
    - PARCEL_CREATED / PARCEL_STATUS_CHANGED / PARCEL_DELETED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for anonymous attempts)
    actor_id = Column(String(32), index=True, nullable=True)
    actor_username = Column(String(255), nullable=True)

    action = Column(String(100), nullable=False, index=True)

    # Who was the target of the action (for account management actions)
    target_user_id = Column(String(32), index=True, nullable=True)
    target_username = Column(String(255), nullable=True)

    meta_data = Column(JSON, nullable=True)
    ip_address = Column(String(50), nullable=True)

    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_username}, target={self.target_username})>"
