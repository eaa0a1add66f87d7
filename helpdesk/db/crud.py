"""Query helpers for the helpdesk models.

Helpers only ``flush``; committing belongs to the enclosing transaction
opened by ``Database.run``.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from helpdesk.models import (
    User, UserSession, TechnicianProfile, ClientProfile, Service, Call, CallService,
    ACTIVE_STATUSES,
)


# ── User ──────────────────────────────────────────────────

async def create_user(db: AsyncSession, name: str, email: str, password_hash: str, role: str) -> User:
    user = User(name=name, email=email, password_hash=password_hash, role=role)
    db.add(user)
    await db.flush()
    return user


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalars().first()


async def update_user(db: AsyncSession, user: User, **kwargs) -> User:
    for k, v in kwargs.items():
        if v is not None:
            setattr(user, k, v)
    await db.flush()
    return user


async def delete_account(db: AsyncSession, profile: TechnicianProfile | ClientProfile) -> None:
    """Delete a profile, its user and the user's login sessions."""
    user = profile.user
    result = await db.execute(select(UserSession).where(UserSession.user_id == user.id))
    for session in result.scalars().all():
        await db.delete(session)
    await db.delete(profile)
    await db.flush()
    await db.delete(user)
    await db.flush()


# ── TechnicianProfile ────────────────────────────────────

async def create_technician(db: AsyncSession, user: User, availability: list[str]) -> TechnicianProfile:
    tech = TechnicianProfile(user_id=user.id, availability=list(availability))
    db.add(tech)
    await db.flush()
    await db.refresh(tech, ["user"])
    return tech


async def get_technician(db: AsyncSession, technician_id: str) -> TechnicianProfile | None:
    return await db.get(TechnicianProfile, technician_id)


async def get_technician_by_user(db: AsyncSession, user_id: str) -> TechnicianProfile | None:
    result = await db.execute(select(TechnicianProfile).where(TechnicianProfile.user_id == user_id))
    return result.scalars().first()


async def lock_technician(db: AsyncSession, technician_id: str) -> TechnicianProfile | None:
    """Row-lock a technician for the rest of the transaction (no-op on SQLite)."""
    result = await db.execute(
        select(TechnicianProfile)
        .where(TechnicianProfile.id == technician_id)
        .with_for_update()
    )
    return result.scalars().first()


async def list_technicians(
    db: AsyncSession, search: str | None = None, offset: int = 0, limit: int = 10,
) -> tuple[list[TechnicianProfile], int]:
    stmt = select(TechnicianProfile).join(User, TechnicianProfile.user_id == User.id)
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))
    total = await db.scalar(select(func.count()).select_from(stmt.subquery()))
    result = await db.execute(stmt.order_by(User.name, TechnicianProfile.id).offset(offset).limit(limit))
    return list(result.scalars().all()), total or 0


async def update_technician_availability(
    db: AsyncSession, tech: TechnicianProfile, availability: list[str],
) -> TechnicianProfile:
    tech.availability = list(availability)
    await db.flush()
    return tech


# ── ClientProfile ────────────────────────────────────────

async def create_client(db: AsyncSession, user: User) -> ClientProfile:
    client = ClientProfile(user_id=user.id)
    db.add(client)
    await db.flush()
    await db.refresh(client, ["user"])
    return client


async def get_client_by_user(db: AsyncSession, user_id: str) -> ClientProfile | None:
    result = await db.execute(select(ClientProfile).where(ClientProfile.user_id == user_id))
    return result.scalars().first()


async def get_client(db: AsyncSession, client_id: str) -> ClientProfile | None:
    return await db.get(ClientProfile, client_id)


async def list_clients(
    db: AsyncSession, search: str | None = None, offset: int = 0, limit: int = 10,
) -> tuple[list[ClientProfile], int]:
    stmt = select(ClientProfile).join(User, ClientProfile.user_id == User.id)
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))
    total = await db.scalar(select(func.count()).select_from(stmt.subquery()))
    result = await db.execute(stmt.order_by(User.name, ClientProfile.id).offset(offset).limit(limit))
    return list(result.scalars().all()), total or 0


# ── Service ───────────────────────────────────────────────

async def create_service(db: AsyncSession, name: str, value: Decimal, active: bool = True) -> Service:
    service = Service(name=name, value=value, active=active)
    db.add(service)
    await db.flush()
    return service


async def get_service(db: AsyncSession, service_id: str) -> Service | None:
    return await db.get(Service, service_id)


async def get_service_by_name(db: AsyncSession, name: str) -> Service | None:
    result = await db.execute(select(Service).where(Service.name == name))
    return result.scalars().first()


async def get_services_by_ids(db: AsyncSession, service_ids: list[str]) -> list[Service]:
    if not service_ids:
        return []
    result = await db.execute(select(Service).where(Service.id.in_(service_ids)))
    return list(result.scalars().all())


async def list_services(
    db: AsyncSession,
    active: bool | None = None,
    search: str | None = None,
    offset: int = 0,
    limit: int | None = None,
) -> tuple[list[Service], int]:
    stmt = select(Service)
    if active is not None:
        stmt = stmt.where(Service.active == active)
    if search:
        stmt = stmt.where(func.lower(Service.name).like(f"%{search.lower()}%"))
    total = await db.scalar(select(func.count()).select_from(stmt.subquery()))
    stmt = stmt.order_by(Service.name, Service.id).offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all()), total or 0


async def update_service(db: AsyncSession, service: Service, **kwargs) -> Service:
    for k, v in kwargs.items():
        if v is not None:
            setattr(service, k, v)
    await db.flush()
    return service


async def delete_service(db: AsyncSession, service: Service) -> None:
    await db.delete(service)
    await db.flush()


async def count_associations_for_service(db: AsyncSession, service_id: str) -> int:
    result = await db.scalar(
        select(func.count()).select_from(CallService).where(CallService.service_id == service_id)
    )
    return result or 0


async def count_active_calls_using_service(db: AsyncSession, service_id: str) -> int:
    result = await db.scalar(
        select(func.count())
        .select_from(CallService)
        .join(Call, CallService.call_id == Call.id)
        .where(CallService.service_id == service_id, Call.status.in_(ACTIVE_STATUSES))
    )
    return result or 0


# ── Call ──────────────────────────────────────────────────

def _call_detail_options():
    return (
        selectinload(Call.client).selectinload(ClientProfile.user),
        selectinload(Call.technician).selectinload(TechnicianProfile.user),
        selectinload(Call.services).selectinload(CallService.service),
    )


async def create_call(db: AsyncSession, **fields) -> Call:
    call = Call(**fields)
    db.add(call)
    await db.flush()
    return call


async def get_call(db: AsyncSession, call_id: str) -> Call | None:
    return await db.get(Call, call_id)


async def get_call_for_update(db: AsyncSession, call_id: str) -> Call | None:
    result = await db.execute(select(Call).where(Call.id == call_id).with_for_update())
    return result.scalars().first()


async def get_call_detail(db: AsyncSession, call_id: str) -> Call | None:
    """Call with client, technician and services loaded, refreshed from the store."""
    result = await db.execute(
        select(Call)
        .where(Call.id == call_id)
        .options(*_call_detail_options())
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def list_calls(
    db: AsyncSession,
    status: str | None = None,
    client_id: str | None = None,
    technician_id: str | None = None,
    offset: int = 0,
    limit: int = 10,
) -> tuple[list[Call], int]:
    conditions = []
    if status is not None:
        conditions.append(Call.status == status)
    if client_id is not None:
        conditions.append(Call.client_id == client_id)
    if technician_id is not None:
        conditions.append(Call.technician_id == technician_id)

    total = await db.scalar(select(func.count(Call.id)).where(*conditions))
    result = await db.execute(
        select(Call)
        .where(*conditions)
        .options(*_call_detail_options())
        .order_by(Call.created_at.desc(), Call.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def count_active_calls(
    db: AsyncSession, client_id: str | None = None, technician_id: str | None = None,
) -> int:
    conditions = [Call.status.in_(ACTIVE_STATUSES)]
    if client_id is not None:
        conditions.append(Call.client_id == client_id)
    if technician_id is not None:
        conditions.append(Call.technician_id == technician_id)
    result = await db.scalar(select(func.count(Call.id)).where(*conditions))
    return result or 0


async def delete_calls_for(
    db: AsyncSession, client_id: str | None = None, technician_id: str | None = None,
) -> int:
    """Delete every call of a client or technician, service lines included."""
    if client_id is None and technician_id is None:
        raise ValueError("client_id or technician_id is required")
    conditions = []
    if client_id is not None:
        conditions.append(Call.client_id == client_id)
    if technician_id is not None:
        conditions.append(Call.technician_id == technician_id)
    result = await db.execute(select(Call).where(*conditions).options(selectinload(Call.services)))
    calls = list(result.scalars().all())
    for call in calls:
        await db.delete(call)
    await db.flush()
    return len(calls)


async def find_other_in_progress_call(db: AsyncSession, technician_id: str, exclude_call_id: str) -> Call | None:
    result = await db.execute(
        select(Call).where(
            Call.technician_id == technician_id,
            Call.status == "in_progress",
            Call.id != exclude_call_id,
        )
    )
    return result.scalars().first()


async def delete_call(db: AsyncSession, call: Call) -> None:
    await db.delete(call)
    await db.flush()


# ── CallService ───────────────────────────────────────────

async def list_associations(db: AsyncSession, call_id: str) -> list[CallService]:
    result = await db.execute(
        select(CallService)
        .where(CallService.call_id == call_id)
        .order_by(CallService.position)
    )
    return list(result.scalars().all())


async def get_association(db: AsyncSession, call_id: str, service_id: str) -> CallService | None:
    return await db.get(CallService, (call_id, service_id))


async def next_position(db: AsyncSession, call_id: str) -> int:
    current = await db.scalar(
        select(func.max(CallService.position)).where(CallService.call_id == call_id)
    )
    return 0 if current is None else current + 1


async def create_association(
    db: AsyncSession, call_id: str, service_id: str, assigned_value: Decimal, position: int,
) -> CallService:
    assoc = CallService(
        call_id=call_id, service_id=service_id,
        assigned_value=assigned_value, position=position,
    )
    db.add(assoc)
    await db.flush()
    return assoc


async def delete_association(db: AsyncSession, assoc: CallService) -> None:
    await db.delete(assoc)
    await db.flush()


async def delete_associations_except(db: AsyncSession, call_id: str, keep_service_id: str | None) -> None:
    for assoc in await list_associations(db, call_id):
        if assoc.service_id != keep_service_id:
            await db.delete(assoc)
    await db.flush()
