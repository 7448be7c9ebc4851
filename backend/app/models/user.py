"""
User database model.

This module defines the User SQLAlchemy model for authentication
and account management.
"""

from sqlalchemy import Column, String, Boolean, DateTime, Enum, JSON
from sqlalchemy.sql import func
from backend.app.db.ids import new_user_id
from backend.app.db.session import Base
from backend.app.models.enums import UserRole


class User(Base):
    """
    User model for authentication and user management.

    The role is set at creation and never changed. Self-registered
    clients start inactive and wait for admin approval.
    """
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_user_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Informational only: not applied as an access filter
    assigned_clients = Column(JSON, nullable=False, default=list)
    avatar = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
