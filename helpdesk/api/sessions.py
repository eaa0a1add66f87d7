"""Login / logout."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import Settings
from helpdesk.db.engine import Database
from helpdesk.dependencies import get_database, get_settings_dep, require_auth
from helpdesk.schemas import LoginRequest, LoginResponse
from helpdesk.services.auth import AuthContext, authenticate, create_session, remove_session, request_token

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


async def _login(db: AsyncSession, email: str, password: str, max_age_days: int) -> LoginResponse | None:
    user = await authenticate(db, email, password)
    if not user:
        return None
    token, expires_at = await create_session(user, db, max_age_days)
    return LoginResponse(token=token, expires_at=expires_at, user_id=user.id, name=user.name, role=user.role)


async def _logout(db: AsyncSession, token: str) -> None:
    await remove_session(token, db)


@router.post("", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_settings_dep),
):
    result = await database.run(_login, body.email, body.password, settings.auth.session_max_age_days)
    if result is None:
        raise HTTPException(401, "Invalid email or password")

    response.set_cookie(
        key=settings.auth.cookie_name,
        value=result.token,
        httponly=True,
        samesite="lax",
        max_age=settings.auth.session_max_age_days * 24 * 3600,
    )
    return result


@router.delete("")
async def logout(
    request: Request,
    response: Response,
    auth: AuthContext = Depends(require_auth),
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_settings_dep),
):
    token = request_token(request, settings.auth.cookie_name)
    if token:
        await database.run(_logout, token)
    response.delete_cookie(settings.auth.cookie_name)
    return {"ok": True}
