"""Call model: a client service request assigned to one technician."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import String, Text, DateTime, ForeignKey, Integer, Numeric, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.base import Base, IdMixin


class CallStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


ACTIVE_STATUSES = (CallStatus.OPEN.value, CallStatus.IN_PROGRESS.value)

_IN_PROGRESS_ONLY = text("status = 'in_progress'")


class Call(Base, IdMixin):
    __tablename__ = "calls"
    __table_args__ = (
        # At most one in_progress call per technician, enforced by the store.
        Index(
            "uq_calls_technician_in_progress",
            "technician_id",
            unique=True,
            sqlite_where=_IN_PROGRESS_ONLY,
            postgresql_where=_IN_PROGRESS_ONLY,
        ),
    )

    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default=CallStatus.OPEN.value, index=True)
    client_id: Mapped[str] = mapped_column(String(36), ForeignKey("client_profiles.id"))
    technician_id: Mapped[str] = mapped_column(String(36), ForeignKey("technician_profiles.id"), index=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)

    client = relationship("ClientProfile", back_populates="calls")
    technician = relationship("TechnicianProfile", back_populates="assigned_calls")
    services = relationship(
        "CallService",
        back_populates="call",
        order_by="CallService.position",
        cascade="all, delete-orphan",
    )


class CallService(Base):
    """Priced link between a call and a catalog service.

    ``assigned_value`` freezes the catalog price at attach time. The
    association with the lowest ``position`` is the call's base service.
    """

    __tablename__ = "call_services"

    call_id: Mapped[str] = mapped_column(String(36), ForeignKey("calls.id", ondelete="CASCADE"), primary_key=True)
    service_id: Mapped[str] = mapped_column(String(36), ForeignKey("services.id"), primary_key=True)
    assigned_value: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    position: Mapped[int] = mapped_column(Integer, default=0)

    call = relationship("Call", back_populates="services")
    service = relationship("Service", back_populates="associations", lazy="joined")
