from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from helpdesk.schemas.common import CamelModel, Money, Pagination


class ServiceCreate(CamelModel):
    name: str = Field(min_length=2, max_length=200)
    value: Decimal = Field(gt=0, max_digits=10, decimal_places=2)


class ServiceUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    value: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)


class ServiceStatusUpdate(CamelModel):
    active: bool


class ServiceRead(CamelModel):
    id: str
    name: str
    value: Money
    active: bool
    created_at: datetime


class ServicePage(CamelModel):
    services: list[ServiceRead]
    pagination: Pagination
