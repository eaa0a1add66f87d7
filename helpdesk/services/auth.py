"""Authentication service: DB-backed sessions, bcrypt passwords."""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta

import bcrypt
from fastapi import Request, HTTPException
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.models import User, UserSession

SESSION_COOKIE_NAME = "session_token"
SESSION_MAX_AGE_DAYS = 7


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    role: str  # 'admin' | 'technician' | 'client'
    email: str
    name: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def _hash_token(token: str) -> str:
    """SHA-256 hash of a session token for DB storage."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def context_for(user: User) -> AuthContext:
    return AuthContext(user_id=user.id, role=user.role, email=user.email, name=user.name)


async def authenticate(db: AsyncSession, email: str, password: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    user = result.scalars().first()
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


async def create_session(
    user: User, db: AsyncSession, max_age_days: int = SESSION_MAX_AGE_DAYS,
) -> tuple[str, datetime]:
    """Create a DB-backed session. Returns the raw token (not the hash) and its expiry."""
    token = secrets.token_urlsafe(48)
    expires_at = datetime.now(timezone.utc) + timedelta(days=max_age_days)
    db.add(UserSession(user_id=user.id, token_hash=_hash_token(token), expires_at=expires_at))
    await db.flush()
    return token, expires_at


async def validate_session(token: str, db: AsyncSession) -> User | None:
    """Look up session by token hash, return User if valid."""
    result = await db.execute(
        select(UserSession).where(
            UserSession.token_hash == _hash_token(token),
            UserSession.expires_at > datetime.now(timezone.utc),
        )
    )
    session = result.scalars().first()
    if not session:
        return None
    return await db.get(User, session.user_id)


async def remove_session(token: str, db: AsyncSession) -> None:
    await db.execute(delete(UserSession).where(UserSession.token_hash == _hash_token(token)))


def request_token(request: Request, cookie_name: str) -> str | None:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(cookie_name)


async def get_current_user(
    request: Request, db: AsyncSession, cookie_name: str = SESSION_COOKIE_NAME,
) -> AuthContext:
    """Read bearer token or session cookie, validate, return AuthContext or raise 401."""
    token = request_token(request, cookie_name)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = await validate_session(token, db)
    if not user:
        raise HTTPException(status_code=401, detail="Session expired")
    return context_for(user)
