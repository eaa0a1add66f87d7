"""Call orchestration: create with auto-assignment, read, list, edit, delete.

Each public coroutine takes an open session and is meant to be run through
``Database.run`` so it executes as one transaction.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.clock import utc
from helpdesk.db import crud
from helpdesk.errors import CallNotFound, Forbidden, ProfileNotFound
from helpdesk.models import Call, CallStatus
from helpdesk.schemas.call import (
    AdditionalServiceItem, CallCreate, CallFilter, CallPage, CallRead, CallSummary, ServiceLine,
)
from helpdesk.schemas.common import Pagination, PersonRef
from helpdesk.services import ledger, lifecycle
from helpdesk.services.auth import AuthContext
from helpdesk.services.policies import ensure_can_manage_call, ensure_can_view_call
from helpdesk.services.selector import select_technician
from helpdesk.services.workload import load_workload_snapshot

logger = logging.getLogger(__name__)


def compose_call(call: Call) -> CallRead:
    """CallRead from a call loaded with ``crud.get_call_detail``."""
    return CallRead(
        id=call.id,
        name=call.name,
        description=call.description,
        status=CallStatus(call.status),
        created_at=call.created_at,
        updated_at=call.updated_at,
        client=PersonRef(id=call.client.id, name=call.client.user.name, email=call.client.user.email),
        technician=PersonRef(
            id=call.technician.id, name=call.technician.user.name, email=call.technician.user.email,
        ),
        services=[
            ServiceLine(id=a.service.id, name=a.service.name, assigned_value=a.assigned_value)
            for a in call.services
        ],
        total_value=ledger.total_value(call.services),
    )


async def _detail(db: AsyncSession, call_id: str) -> CallRead:
    call = await crud.get_call_detail(db, call_id)
    if not call:
        raise CallNotFound()
    return compose_call(call)


async def _call_for_edit(db: AsyncSession, actor: AuthContext, call_id: str) -> Call:
    call = await crud.get_call_for_update(db, call_id)
    if not call:
        raise CallNotFound()
    await ensure_can_manage_call(db, actor, call)
    return call


async def create_call(
    db: AsyncSession,
    actor: AuthContext,
    payload: CallCreate,
    now: datetime,
    tolerance_minutes: int,
) -> CallRead:
    """Open a call for the acting client and assign it a technician."""
    if actor.role != "client":
        raise Forbidden("Only clients can open calls.")

    client = await crud.get_client_by_user(db, actor.user_id)
    if not client:
        raise ProfileNotFound("Client profile not found.")

    services = await ledger.resolve_active_services(db, [str(sid) for sid in payload.service_ids])

    snapshot = await load_workload_snapshot(db, now, tolerance_minutes)
    chosen = select_technician(snapshot)

    call = await crud.create_call(
        db,
        name=payload.name,
        description=payload.description,
        status=CallStatus.OPEN.value,
        client_id=client.id,
        technician_id=chosen.technician_id,
        created_at=utc(now),
    )
    await ledger.attach_services(db, call, services)
    logger.info(
        "Call %s opened by client %s, assigned to technician %s with %d service(s)",
        call.id, client.id, chosen.technician_id, len(services),
    )
    return await _detail(db, call.id)


async def get_call(db: AsyncSession, actor: AuthContext, call_id: str) -> CallRead:
    call = await crud.get_call_detail(db, call_id)
    if not call:
        raise CallNotFound()
    await ensure_can_view_call(db, actor, call)
    return compose_call(call)


async def list_calls(db: AsyncSession, actor: AuthContext, filters: CallFilter) -> CallPage:
    """Newest first; clients see their own calls, technicians their assignments."""
    client_id = technician_id = None
    if actor.role == "client":
        client = await crud.get_client_by_user(db, actor.user_id)
        if not client:
            raise ProfileNotFound("Client profile not found.")
        client_id = client.id
    elif actor.role == "technician":
        tech = await crud.get_technician_by_user(db, actor.user_id)
        if not tech:
            raise ProfileNotFound("Technician profile not found.")
        technician_id = tech.id

    calls, total = await crud.list_calls(
        db,
        status=filters.status.value if filters.status else None,
        client_id=client_id,
        technician_id=technician_id,
        offset=filters.offset,
        limit=filters.per_page,
    )
    return CallPage(
        calls=[compose_call(c) for c in calls],
        pagination=Pagination.build(filters.page, filters.per_page, total),
    )


async def update_status(
    db: AsyncSession, actor: AuthContext, call_id: str, status: CallStatus, now: datetime,
) -> CallSummary:
    return await lifecycle.change_status(db, actor, call_id, status, now)


async def add_service(
    db: AsyncSession, actor: AuthContext, call_id: str, service_id: str, now: datetime,
) -> CallRead:
    call = await _call_for_edit(db, actor, call_id)
    await ledger.add_service(db, call, service_id, now)
    return await _detail(db, call.id)


async def remove_service(
    db: AsyncSession, actor: AuthContext, call_id: str, service_id: str, now: datetime,
) -> CallRead:
    call = await _call_for_edit(db, actor, call_id)
    await ledger.remove_service(db, call, service_id, now)
    return await _detail(db, call.id)


async def replace_additional_services(
    db: AsyncSession,
    actor: AuthContext,
    call_id: str,
    items: Sequence[AdditionalServiceItem],
    now: datetime,
) -> CallRead:
    call = await _call_for_edit(db, actor, call_id)
    await ledger.replace_additional_services(db, call, items, now)
    return await _detail(db, call.id)


async def delete_call(db: AsyncSession, actor: AuthContext, call_id: str) -> None:
    await lifecycle.delete_call(db, actor, call_id)
