"""Client sign-up and admin management."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import Settings
from helpdesk.db.engine import Database
from helpdesk.dependencies import get_database, get_db, get_settings_dep, page_size, require_role
from helpdesk.schemas import AccountUpdate, ClientCreate, ClientPage, ClientRead
from helpdesk.services import accounts
from helpdesk.services.auth import AuthContext

router = APIRouter(prefix="/api/clients", tags=["clients"])

_admin_dep = require_role("admin")


@router.post("", status_code=201, response_model=ClientRead)
async def register_client(
    body: ClientCreate,
    database: Database = Depends(get_database),
):
    return await database.run(accounts.register_client, body)


@router.get("", response_model=ClientPage)
async def list_clients(
    search: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1, alias="perPage"),
    auth: AuthContext = Depends(_admin_dep),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    return await accounts.list_clients(db, search, page, page_size(per_page, settings))


@router.get("/{client_id}", response_model=ClientRead)
async def get_client(
    client_id: UUID,
    auth: AuthContext = Depends(_admin_dep),
    db: AsyncSession = Depends(get_db),
):
    return await accounts.get_client(db, str(client_id))


@router.put("/{client_id}", response_model=ClientRead)
async def update_client(
    client_id: UUID,
    body: AccountUpdate,
    auth: AuthContext = Depends(_admin_dep),
    database: Database = Depends(get_database),
):
    return await database.run(accounts.update_client, str(client_id), body)


@router.delete("/{client_id}")
async def delete_client(
    client_id: UUID,
    auth: AuthContext = Depends(_admin_dep),
    database: Database = Depends(get_database),
):
    await database.run(accounts.delete_client, str(client_id))
    return {"ok": True, "id": str(client_id)}
