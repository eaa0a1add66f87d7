"""Catalog service: a billable line item that calls reference."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import String, Boolean, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.models.base import Base, IdMixin


class Service(Base, IdMixin):
    __tablename__ = "services"

    name: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    value: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    associations = relationship("CallService", back_populates="service")
