"""Technician profile: availability slots and assigned calls."""

from __future__ import annotations

from sqlalchemy import String, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.base import Base, IdMixin


class TechnicianProfile(Base, IdMixin):
    __tablename__ = "technician_profiles"

    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), unique=True)
    availability: Mapped[list] = mapped_column(JSON, default=list)  # ["08:00", "09:00", ...]

    user = relationship("User", back_populates="technician_profile", lazy="joined")
    assigned_calls = relationship("Call", back_populates="technician")
