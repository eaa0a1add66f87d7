"""FastAPI dependency providers for the store, clock, auth and role enforcement."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.clock import Clock
from helpdesk.config import Settings
from helpdesk.db.engine import Database
from helpdesk.services.auth import AuthContext, get_current_user


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


async def get_db(database: Database = Depends(get_database)) -> AsyncSession:
    """Yield a session for reads; writes go through ``Database.run``."""
    async with database.session_factory() as session:
        yield session


async def require_auth(
    request: Request,
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_settings_dep),
) -> AuthContext:
    """Require a valid authenticated session. Returns AuthContext.

    Uses its own short session so no read transaction is held open while the
    handler writes through ``Database.run``.
    """
    async with database.session_factory() as db:
        return await get_current_user(request, db, settings.auth.cookie_name)


def require_role(*allowed_roles: str):
    """Factory: returns a dependency that enforces role membership."""
    async def _check(auth: AuthContext = Depends(require_auth)) -> AuthContext:
        if auth.role not in allowed_roles:
            raise HTTPException(403, "Insufficient permissions")
        return auth
    return _check


def page_size(per_page: int | None, settings: Settings) -> int:
    if per_page is None:
        return settings.pagination.default_per_page
    return min(per_page, settings.pagination.max_per_page)
