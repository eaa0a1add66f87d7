"""Call/service association ledger: attach, add, remove, bulk-replace, totals.

Every association freezes the catalog price in ``assigned_value``. The
association with the lowest ``position`` is the call's base service and
survives bulk replacement and single removal.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.clock import utc
from helpdesk.db import crud
from helpdesk.errors import (
    AssociationNotFound, BaseServiceProtected, DuplicateAssociation,
    InactiveOrMissingService, ServiceInUse,
)
from helpdesk.models import Call, CallService, Service
from helpdesk.schemas.call import AdditionalServiceItem

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def total_value(associations: Iterable[CallService]) -> Decimal:
    total = sum((Decimal(a.assigned_value) for a in associations), Decimal("0"))
    return total.quantize(_CENTS)


def touch(call: Call, now: datetime) -> None:
    call.updated_at = utc(now)


async def resolve_active_services(db: AsyncSession, service_ids: Sequence[str]) -> list[Service]:
    """All requested services, in request order, or InactiveOrMissingService."""
    found = {s.id: s for s in await crud.get_services_by_ids(db, list(service_ids))}
    invalid = [sid for sid in service_ids if sid not in found or not found[sid].active]
    if invalid:
        raise InactiveOrMissingService(
            f"Services not found or inactive: {', '.join(invalid)}"
        )
    return [found[sid] for sid in service_ids]


async def attach_services(db: AsyncSession, call: Call, services: Sequence[Service]) -> list[CallService]:
    """Attach services at the catalog's current price, after any existing ones."""
    start = await crud.next_position(db, call.id)
    return [
        await crud.create_association(db, call.id, service.id, service.value, start + offset)
        for offset, service in enumerate(services)
    ]


async def base_association(db: AsyncSession, call_id: str) -> CallService | None:
    associations = await crud.list_associations(db, call_id)
    return associations[0] if associations else None


async def add_service(db: AsyncSession, call: Call, service_id: str, now: datetime) -> CallService:
    if await crud.get_association(db, call.id, service_id):
        raise DuplicateAssociation()

    service = await crud.get_service(db, service_id)
    if not service or not service.active:
        raise InactiveOrMissingService("Service not found or inactive.")

    assoc = await crud.create_association(
        db, call.id, service.id, service.value, await crud.next_position(db, call.id),
    )
    touch(call, now)
    logger.info("Attached service %s to call %s at %s", service.id, call.id, service.value)
    return assoc


async def remove_service(db: AsyncSession, call: Call, service_id: str, now: datetime) -> None:
    assoc = await crud.get_association(db, call.id, service_id)
    if not assoc:
        raise AssociationNotFound()

    base = await base_association(db, call.id)
    if base is not None and base.service_id == service_id:
        raise BaseServiceProtected()

    await crud.delete_association(db, assoc)
    touch(call, now)
    logger.info("Removed service %s from call %s", service_id, call.id)


async def replace_additional_services(
    db: AsyncSession,
    call: Call,
    items: Sequence[AdditionalServiceItem],
    now: datetime,
) -> None:
    """Keep the base service, drop every other line, recreate lines from ``items``.

    Each item is matched to a catalog service by name; a missing name creates
    a new active catalog entry priced at the item's value. Runs inside the
    caller's transaction, so a failure leaves the previous lines untouched.
    """
    names = [item.name for item in items]
    if len(set(names)) != len(names):
        raise DuplicateAssociation("The same service appears more than once in the replacement list.")

    base = await base_association(db, call.id)
    await crud.delete_associations_except(db, call.id, base.service_id if base else None)

    position = base.position + 1 if base else 0
    for item in items:
        service = await crud.get_service_by_name(db, item.name)
        if service is None:
            service = await crud.create_service(db, item.name, item.assigned_value, active=True)
            logger.info("Created catalog service %r from a line item on call %s", item.name, call.id)
        if base is not None and service.id == base.service_id:
            raise DuplicateAssociation(f"{item.name!r} is already the base service of this call.")
        await crud.create_association(db, call.id, service.id, item.assigned_value, position)
        position += 1

    touch(call, now)
    logger.info("Replaced additional services on call %s with %d line(s)", call.id, len(items))


# ── Catalog guards ────────────────────────────────────────

async def ensure_service_deletable(db: AsyncSession, service: Service) -> None:
    if await crud.count_associations_for_service(db, service.id):
        raise ServiceInUse(
            "The service is attached to existing calls and cannot be deleted. Deactivate it instead."
        )


async def ensure_service_deactivatable(db: AsyncSession, service: Service) -> None:
    if await crud.count_active_calls_using_service(db, service.id):
        raise ServiceInUse(
            "The service is attached to open or in-progress calls and cannot be deactivated."
        )
