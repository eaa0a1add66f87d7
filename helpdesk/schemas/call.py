from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field, field_validator

from helpdesk.models.call import CallStatus
from helpdesk.schemas.common import CamelModel, Money, Pagination, PersonRef


class CallCreate(CamelModel):
    name: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10)
    service_ids: list[UUID] = Field(min_length=1)

    @field_validator("name", "description", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("service_ids", mode="before")
    @classmethod
    def _split_ids(cls, v):
        # Accepts a list, a single id or a comma-separated string of ids.
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    @field_validator("service_ids")
    @classmethod
    def _dedupe(cls, v: list[UUID]) -> list[UUID]:
        return list(dict.fromkeys(v))


class StatusUpdate(CamelModel):
    status: CallStatus


class AddServiceRequest(CamelModel):
    service_id: UUID


class AdditionalServiceItem(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    assigned_value: Decimal = Field(gt=0, max_digits=10, decimal_places=2)

    @field_validator("name", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class AdditionalServicesUpdate(CamelModel):
    additional_services: list[AdditionalServiceItem]


class CallFilter(CamelModel):
    """Query parameters accepted by the call listing."""

    status: CallStatus | None = None
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=10, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


class ServiceLine(CamelModel):
    id: str
    name: str
    assigned_value: Money


class CallRead(CamelModel):
    id: str
    name: str
    description: str
    status: CallStatus
    created_at: datetime
    updated_at: datetime | None = None
    client: PersonRef
    technician: PersonRef
    services: list[ServiceLine]
    total_value: Money


class CallSummary(CamelModel):
    id: str
    name: str
    status: CallStatus
    updated_at: datetime | None = None
    total_value: Money


class CallPage(CamelModel):
    calls: list[CallRead]
    pagination: Pagination
