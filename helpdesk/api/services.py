"""Service catalog API: admin writes, authenticated reads."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.db.engine import Database
from helpdesk.config import Settings
from helpdesk.dependencies import get_database, get_db, get_settings_dep, page_size, require_auth, require_role
from helpdesk.schemas import ServiceCreate, ServicePage, ServiceRead, ServiceStatusUpdate, ServiceUpdate
from helpdesk.services import catalog
from helpdesk.services.auth import AuthContext

router = APIRouter(prefix="/api/services", tags=["services"])

_admin_dep = require_role("admin")


@router.post("", status_code=201, response_model=ServiceRead)
async def create_service(
    body: ServiceCreate,
    auth: AuthContext = Depends(_admin_dep),
    database: Database = Depends(get_database),
):
    return await database.run(catalog.create_service, body)


@router.get("", response_model=ServicePage)
async def list_services(
    active: bool | None = Query(default=None),
    search: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1, alias="perPage"),
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    # Only admins see inactive catalog entries.
    if not auth.is_admin:
        active = True
    return await catalog.list_services(db, active, search, page, page_size(per_page, settings))


@router.get("/{service_id}", response_model=ServiceRead)
async def get_service(
    service_id: UUID,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await catalog.get_service(db, str(service_id))


@router.put("/{service_id}", response_model=ServiceRead)
async def update_service(
    service_id: UUID,
    body: ServiceUpdate,
    auth: AuthContext = Depends(_admin_dep),
    database: Database = Depends(get_database),
):
    return await database.run(catalog.update_service, str(service_id), body)


@router.patch("/{service_id}/status", response_model=ServiceRead)
async def update_service_status(
    service_id: UUID,
    body: ServiceStatusUpdate,
    auth: AuthContext = Depends(_admin_dep),
    database: Database = Depends(get_database),
):
    return await database.run(catalog.set_service_active, str(service_id), body.active)


@router.delete("/{service_id}")
async def delete_service(
    service_id: UUID,
    auth: AuthContext = Depends(_admin_dep),
    database: Database = Depends(get_database),
):
    await database.run(catalog.delete_service, str(service_id))
    return {"ok": True, "id": str(service_id)}
