"""Profile and account-edit schemas shared by every role."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from helpdesk.schemas.common import CamelModel


class AccountUpdate(CamelModel):
    """Name and email edits; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=2, max_length=200)
    email: str | None = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

    @field_validator("name", "email", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def _lower(cls, v: str | None) -> str | None:
        return v.lower() if v else v


class PasswordChange(CamelModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)


class ProfileRead(CamelModel):
    id: str
    name: str
    email: str
    role: str
    created_at: datetime
    availability: list[str] | None = None
