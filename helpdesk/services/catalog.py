"""Service catalog administration."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.db import crud
from helpdesk.errors import Conflict, ServiceNotFound
from helpdesk.models import Service
from helpdesk.schemas.common import Pagination
from helpdesk.schemas.service import ServiceCreate, ServicePage, ServiceRead, ServiceUpdate
from helpdesk.services import ledger

logger = logging.getLogger(__name__)


async def _get(db: AsyncSession, service_id: str) -> Service:
    service = await crud.get_service(db, service_id)
    if not service:
        raise ServiceNotFound()
    return service


async def create_service(db: AsyncSession, payload: ServiceCreate) -> ServiceRead:
    if await crud.get_service_by_name(db, payload.name):
        raise Conflict("A service with this name already exists.")
    service = await crud.create_service(db, payload.name, payload.value)
    logger.info("Service %s (%s) created at %s", service.id, service.name, service.value)
    return ServiceRead.model_validate(service)


async def list_services(
    db: AsyncSession,
    active: bool | None = None,
    search: str | None = None,
    page: int = 1,
    per_page: int = 10,
) -> ServicePage:
    """Catalog page ordered by name; ``search`` matches names case-insensitively."""
    services, total = await crud.list_services(db, active, search, (page - 1) * per_page, per_page)
    return ServicePage(
        services=[ServiceRead.model_validate(s) for s in services],
        pagination=Pagination.build(page, per_page, total),
    )


async def get_service(db: AsyncSession, service_id: str) -> ServiceRead:
    return ServiceRead.model_validate(await _get(db, service_id))


async def update_service(db: AsyncSession, service_id: str, payload: ServiceUpdate) -> ServiceRead:
    service = await _get(db, service_id)
    if payload.name and payload.name != service.name:
        if await crud.get_service_by_name(db, payload.name):
            raise Conflict("A service with this name already exists.")
    # Existing call lines keep their frozen assigned_value.
    service = await crud.update_service(db, service, name=payload.name, value=payload.value)
    return ServiceRead.model_validate(service)


async def set_service_active(db: AsyncSession, service_id: str, active: bool) -> ServiceRead:
    service = await _get(db, service_id)
    if not active:
        await ledger.ensure_service_deactivatable(db, service)
    service = await crud.update_service(db, service, active=active)
    logger.info("Service %s %s", service.id, "activated" if active else "deactivated")
    return ServiceRead.model_validate(service)


async def delete_service(db: AsyncSession, service_id: str) -> None:
    service = await _get(db, service_id)
    await ledger.ensure_service_deletable(db, service)
    await crud.delete_service(db, service)
    logger.info("Service %s deleted", service_id)
