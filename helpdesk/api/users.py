"""The signed-in user's own profile and password."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.db.engine import Database
from helpdesk.dependencies import get_database, get_db, require_auth
from helpdesk.schemas import AccountUpdate, PasswordChange, ProfileRead
from helpdesk.services import accounts
from helpdesk.services.auth import AuthContext

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/profile", response_model=ProfileRead)
async def get_profile(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await accounts.get_profile(db, auth)


@router.patch("/profile", response_model=ProfileRead)
async def update_profile(
    body: AccountUpdate,
    auth: AuthContext = Depends(require_auth),
    database: Database = Depends(get_database),
):
    return await database.run(accounts.update_profile, auth, body)


@router.patch("/profile/password")
async def change_password(
    body: PasswordChange,
    auth: AuthContext = Depends(require_auth),
    database: Database = Depends(get_database),
):
    await database.run(accounts.change_password, auth, body)
    return {"ok": True}
