from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from helpdesk.schemas.common import CamelModel, Pagination


class ClientCreate(CamelModel):
    name: str = Field(min_length=2, max_length=200)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=6)

    @field_validator("name", "email", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.lower()


class ClientRead(CamelModel):
    id: str
    name: str
    email: str
    created_at: datetime


class ClientPage(CamelModel):
    clients: list[ClientRead]
    pagination: Pagination
