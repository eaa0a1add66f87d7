"""Call API: open, list, inspect, change status, edit service lines, delete."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.clock import Clock
from helpdesk.config import Settings
from helpdesk.db.engine import Database
from helpdesk.dependencies import (
    get_clock, get_database, get_db, get_settings_dep, page_size, require_auth, require_role,
)
from helpdesk.models import CallStatus
from helpdesk.schemas import (
    AddServiceRequest, AdditionalServicesUpdate, AvailabilityReport, CallCreate, CallFilter,
    CallPage, CallRead, CallSummary, StatusUpdate,
)
from helpdesk.services import calls
from helpdesk.services.auth import AuthContext
from helpdesk.services.workload import availability_report

router = APIRouter(prefix="/api/calls", tags=["calls"])

_client_dep = require_role("client")
_staff_dep = require_role("technician", "admin")
_owner_dep = require_role("client", "admin")


@router.post("", status_code=201, response_model=CallRead)
async def create_call(
    body: CallCreate,
    auth: AuthContext = Depends(_client_dep),
    database: Database = Depends(get_database),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings_dep),
):
    return await database.run(
        calls.create_call, auth, body, clock.now(), settings.assignment.tolerance_minutes,
    )


@router.get("", response_model=CallPage)
async def list_calls(
    status: CallStatus | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1, alias="perPage"),
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    filters = CallFilter(status=status, page=page, per_page=page_size(per_page, settings))
    return await calls.list_calls(db, auth, filters)


@router.get("/availability", response_model=AvailabilityReport)
async def check_availability(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings_dep),
):
    return await availability_report(db, clock.now(), settings.assignment.tolerance_minutes)


@router.get("/{call_id}", response_model=CallRead)
async def get_call(
    call_id: UUID,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await calls.get_call(db, auth, str(call_id))


@router.patch("/{call_id}/status", response_model=CallSummary)
async def update_status(
    call_id: UUID,
    body: StatusUpdate,
    auth: AuthContext = Depends(_staff_dep),
    database: Database = Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    return await database.run(calls.update_status, auth, str(call_id), body.status, clock.now())


@router.post("/{call_id}/services", response_model=CallRead)
async def add_service(
    call_id: UUID,
    body: AddServiceRequest,
    auth: AuthContext = Depends(_staff_dep),
    database: Database = Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    return await database.run(calls.add_service, auth, str(call_id), str(body.service_id), clock.now())


@router.delete("/{call_id}/services/{service_id}", response_model=CallRead)
async def remove_service(
    call_id: UUID,
    service_id: UUID,
    auth: AuthContext = Depends(_staff_dep),
    database: Database = Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    return await database.run(calls.remove_service, auth, str(call_id), str(service_id), clock.now())


@router.patch("/{call_id}/additional-services", response_model=CallRead)
async def replace_additional_services(
    call_id: UUID,
    body: AdditionalServicesUpdate,
    auth: AuthContext = Depends(_staff_dep),
    database: Database = Depends(get_database),
    clock: Clock = Depends(get_clock),
):
    return await database.run(
        calls.replace_additional_services, auth, str(call_id), body.additional_services, clock.now(),
    )


@router.delete("/{call_id}")
async def delete_call(
    call_id: UUID,
    auth: AuthContext = Depends(_owner_dep),
    database: Database = Depends(get_database),
):
    await database.run(calls.delete_call, auth, str(call_id))
    return {"ok": True, "id": str(call_id)}
