"""Technician management API."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.config import Settings
from helpdesk.db.engine import Database
from helpdesk.dependencies import get_database, get_db, get_settings_dep, page_size, require_role
from helpdesk.schemas import (
    AvailabilityUpdate, TechnicianCreate, TechnicianPage, TechnicianRead, TechnicianUpdate,
)
from helpdesk.services import accounts
from helpdesk.services.auth import AuthContext

router = APIRouter(prefix="/api/technicians", tags=["technicians"])

_admin_dep = require_role("admin")
_staff_dep = require_role("technician", "admin")


@router.post("", status_code=201, response_model=TechnicianRead)
async def create_technician(
    body: TechnicianCreate,
    auth: AuthContext = Depends(_admin_dep),
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_settings_dep),
):
    return await database.run(
        accounts.register_technician, body, settings.assignment.default_availability,
    )


@router.get("", response_model=TechnicianPage)
async def list_technicians(
    search: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1, alias="perPage"),
    auth: AuthContext = Depends(_admin_dep),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    return await accounts.list_technicians(db, search, page, page_size(per_page, settings))


@router.get("/{technician_id}", response_model=TechnicianRead)
async def get_technician(
    technician_id: UUID,
    auth: AuthContext = Depends(_staff_dep),
    db: AsyncSession = Depends(get_db),
):
    return await accounts.get_technician(db, auth, str(technician_id))


@router.put("/{technician_id}/availability", response_model=TechnicianRead)
async def update_availability(
    technician_id: UUID,
    body: AvailabilityUpdate,
    auth: AuthContext = Depends(_staff_dep),
    database: Database = Depends(get_database),
):
    return await database.run(accounts.update_availability, auth, str(technician_id), body.availability)


@router.put("/{technician_id}", response_model=TechnicianRead)
async def update_technician(
    technician_id: UUID,
    body: TechnicianUpdate,
    auth: AuthContext = Depends(_admin_dep),
    database: Database = Depends(get_database),
):
    return await database.run(accounts.update_technician, str(technician_id), body)


@router.delete("/{technician_id}")
async def delete_technician(
    technician_id: UUID,
    auth: AuthContext = Depends(_admin_dep),
    database: Database = Depends(get_database),
):
    await database.run(accounts.delete_technician, str(technician_id))
    return {"ok": True, "id": str(technician_id)}
