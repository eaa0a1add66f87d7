"""Call status state machine and the single in-progress call per technician rule."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.clock import utc
from helpdesk.db import crud
from helpdesk.errors import CallNotFound, InvalidTransition, TechnicianBusy
from helpdesk.models import CallStatus
from helpdesk.schemas.call import CallSummary
from helpdesk.services import ledger
from helpdesk.services.auth import AuthContext
from helpdesk.services.policies import ensure_can_manage_call, ensure_can_delete_call

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[CallStatus, frozenset[CallStatus]] = {
    CallStatus.OPEN: frozenset({CallStatus.IN_PROGRESS, CallStatus.CLOSED}),
    CallStatus.IN_PROGRESS: frozenset({CallStatus.CLOSED}),
    CallStatus.CLOSED: frozenset(),
}


def validate_transition(current: CallStatus | str, target: CallStatus | str) -> None:
    current = CallStatus(current)
    target = CallStatus(target)
    if current is target:
        raise InvalidTransition(f"Call is already {target.value}.")
    if current is CallStatus.CLOSED:
        raise InvalidTransition("Closed calls cannot change status.")
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(f"Cannot move a call from {current.value} to {target.value}.")


async def change_status(
    db: AsyncSession,
    actor: AuthContext,
    call_id: str,
    target: CallStatus,
    now: datetime,
) -> CallSummary:
    """Move a call to ``target`` inside the caller's transaction.

    Moving into in_progress locks the technician and re-checks for another
    in_progress call before writing; the partial unique index on calls is the
    last line if two writers still meet.
    """
    call = await crud.get_call_for_update(db, call_id)
    if not call:
        raise CallNotFound()

    await ensure_can_manage_call(db, actor, call)
    validate_transition(call.status, target)

    if target is CallStatus.IN_PROGRESS:
        await crud.lock_technician(db, call.technician_id)
        busy = await crud.find_other_in_progress_call(db, call.technician_id, call.id)
        if busy:
            logger.info(
                "Technician %s busy with call %s, refusing to start call %s",
                call.technician_id, busy.id, call.id,
            )
            raise TechnicianBusy()

    previous = call.status
    call.status = target.value
    call.updated_at = utc(now)
    try:
        await db.flush()
    except IntegrityError as exc:
        raise TechnicianBusy() from exc

    logger.info("Call %s moved from %s to %s by %s", call.id, previous, target.value, actor.user_id)
    associations = await crud.list_associations(db, call.id)
    return CallSummary(
        id=call.id,
        name=call.name,
        status=CallStatus(call.status),
        updated_at=call.updated_at,
        total_value=ledger.total_value(associations),
    )


async def delete_call(db: AsyncSession, actor: AuthContext, call_id: str) -> None:
    """Delete a call together with its service lines."""
    call = await crud.get_call_for_update(db, call_id)
    if not call:
        raise CallNotFound()

    await ensure_can_delete_call(db, actor, call)
    await crud.delete_call(db, call)
    logger.info("Call %s deleted by %s", call_id, actor.user_id)
