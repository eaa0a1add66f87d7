from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from helpdesk.schemas.common import CamelModel, Pagination
from helpdesk.schemas.user import AccountUpdate
from helpdesk.services.availability import AVAILABILITY_PATTERN

Slot = str


def _check_slots(slots: list[str] | None) -> list[str] | None:
    if slots is None:
        return None
    for slot in slots:
        if not AVAILABILITY_PATTERN.match(slot):
            raise ValueError(f"Invalid time slot {slot!r}, expected HH:MM")
    return slots


class TechnicianCreate(CamelModel):
    name: str = Field(min_length=2, max_length=200)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=6)
    availability: list[Slot] | None = None

    @field_validator("name", "email", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.lower()

    @field_validator("availability")
    @classmethod
    def _slots(cls, v):
        return _check_slots(v)


class AvailabilityUpdate(CamelModel):
    availability: list[Slot] = Field(min_length=1)

    @field_validator("availability")
    @classmethod
    def _slots(cls, v):
        return _check_slots(v)


class TechnicianUpdate(AccountUpdate):
    availability: list[Slot] | None = Field(default=None, min_length=1)

    @field_validator("availability")
    @classmethod
    def _slots(cls, v):
        return _check_slots(v)


class TechnicianRead(CamelModel):
    id: str
    name: str
    email: str
    availability: list[str]
    created_at: datetime


class TechnicianPage(CamelModel):
    technicians: list[TechnicianRead]
    pagination: Pagination


class TechnicianAvailability(CamelModel):
    id: str
    name: str
    email: str
    availability: list[str]
    is_available_now: bool
    current_calls: int
    has_call_in_progress: bool


class AvailabilityReport(CamelModel):
    current_time: str
    total_technicians: int
    available_technicians: int
    unavailable_technicians: int
    technicians: list[TechnicianAvailability]
    can_create_call: bool
    message: str
