"""
Parcel database model.

Staff register parcels for clients; the status moves through the
lifecycle defined in backend.app.domain.status_machine.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Date
from sqlalchemy.sql import func
from backend.app.db.ids import new_parcel_id
from backend.app.db.session import Base
from backend.app.models.parcel_enums import ParcelStatus


class Parcel(Base):
    """
    Parcel model.

    A parcel is owned by exactly one CLIENT user (client_id) and is
    optionally handled by a STAFF user (handled_by).

    `version` is the optimistic concurrency counter: SQLAlchemy bumps it
    on every UPDATE and rejects stale writes.
    """
    __tablename__ = "parcels"

    id = Column(String(32), primary_key=True, default=new_parcel_id)
    tracking_number = Column(String(50), unique=True, nullable=False, index=True)
    sender = Column(String(255), nullable=False, default="")
    description = Column(String(500), nullable=False, default="")

    # Ownership
    client_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    handled_by = Column(String(32), ForeignKey("users.id"), nullable=True, index=True)

    # Status
    status = Column(Enum(ParcelStatus), default=ParcelStatus.PENDING, nullable=False, index=True)
    date_created = Column(Date, nullable=False)
    date_updated = Column(Date, nullable=False)
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Parcel(id={self.id}, tracking='{self.tracking_number}', client_id={self.client_id}, status='{self.status.value}')>"
