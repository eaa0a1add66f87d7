from __future__ import annotations

from datetime import datetime

from helpdesk.schemas.common import CamelModel


class LoginRequest(CamelModel):
    email: str
    password: str


class LoginResponse(CamelModel):
    token: str
    expires_at: datetime
    user_id: str
    name: str
    role: str
