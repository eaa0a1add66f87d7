from __future__ import annotations

from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.base import Base, IdMixin


class ClientProfile(Base, IdMixin):
    __tablename__ = "client_profiles"

    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), unique=True)

    user = relationship("User", back_populates="client_profile", lazy="joined")
    calls = relationship("Call", back_populates="client")
