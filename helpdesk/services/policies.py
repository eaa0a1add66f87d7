"""Role and ownership checks applied before touching a call."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.db import crud
from helpdesk.errors import Forbidden
from helpdesk.models import Call
from helpdesk.services.auth import AuthContext


async def _is_assigned_technician(db: AsyncSession, actor: AuthContext, call: Call) -> bool:
    if actor.role != "technician":
        return False
    tech = await crud.get_technician_by_user(db, actor.user_id)
    return tech is not None and tech.id == call.technician_id


async def _is_owning_client(db: AsyncSession, actor: AuthContext, call: Call) -> bool:
    if actor.role != "client":
        return False
    client = await crud.get_client_by_user(db, actor.user_id)
    return client is not None and client.id == call.client_id


async def ensure_can_manage_call(db: AsyncSession, actor: AuthContext, call: Call) -> None:
    """Status changes and service edits: assigned technician or admin."""
    if actor.is_admin or await _is_assigned_technician(db, actor, call):
        return
    if actor.role == "technician":
        raise Forbidden("You are not assigned to this call.")
    raise Forbidden("Only the assigned technician or an administrator can change this call.")


async def ensure_can_delete_call(db: AsyncSession, actor: AuthContext, call: Call) -> None:
    """Deletion: owning client or admin."""
    if actor.is_admin or await _is_owning_client(db, actor, call):
        return
    raise Forbidden("Only the client who opened the call or an administrator can delete it.")


async def ensure_can_view_call(db: AsyncSession, actor: AuthContext, call: Call) -> None:
    if actor.is_admin:
        return
    if await _is_owning_client(db, actor, call) or await _is_assigned_technician(db, actor, call):
        return
    raise Forbidden("You are not allowed to view this call.")
