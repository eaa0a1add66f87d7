"""Technician, client and admin accounts, and the signed-in user's profile."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.db import crud
from helpdesk.errors import (
    AccountInUse, ClientNotFound, Conflict, Forbidden, InvalidPassword, ProfileNotFound,
    TechnicianNotFound,
)
from helpdesk.models import TechnicianProfile, ClientProfile, User, UserRole
from helpdesk.schemas.client import ClientCreate, ClientPage, ClientRead
from helpdesk.schemas.common import Pagination
from helpdesk.schemas.technician import TechnicianCreate, TechnicianPage, TechnicianRead, TechnicianUpdate
from helpdesk.schemas.user import AccountUpdate, PasswordChange, ProfileRead
from helpdesk.services.auth import AuthContext, hash_password, verify_password

logger = logging.getLogger(__name__)


def normalize_slots(slots: Iterable[str]) -> list[str]:
    """Availability as stored: sorted, without duplicates."""
    return sorted(set(slots))


def technician_read(tech: TechnicianProfile) -> TechnicianRead:
    return TechnicianRead(
        id=tech.id,
        name=tech.user.name,
        email=tech.user.email,
        availability=list(tech.availability or []),
        created_at=tech.created_at,
    )


def client_read(client: ClientProfile) -> ClientRead:
    return ClientRead(
        id=client.id, name=client.user.name, email=client.user.email, created_at=client.created_at,
    )


async def _new_user(db: AsyncSession, name: str, email: str, password: str, role: UserRole) -> User:
    if await crud.get_user_by_email(db, email):
        raise Conflict("A user with this email already exists.")
    return await crud.create_user(db, name, email, hash_password(password), role.value)


async def _edit_user(db: AsyncSession, user: User, payload: AccountUpdate) -> User:
    if payload.email and payload.email != user.email:
        if await crud.get_user_by_email(db, payload.email):
            raise Conflict("A user with this email already exists.")
    return await crud.update_user(db, user, name=payload.name, email=payload.email)


async def create_admin(db: AsyncSession, name: str, email: str, password: str) -> User:
    user = await _new_user(db, name, email.strip().lower(), password, UserRole.ADMIN)
    logger.info("Admin %s created", user.id)
    return user


# ── Technicians ───────────────────────────────────────────

async def register_technician(
    db: AsyncSession, payload: TechnicianCreate, default_availability: Sequence[str],
) -> TechnicianRead:
    """New technician account; empty availability falls back to commercial hours."""
    user = await _new_user(db, payload.name, payload.email, payload.password, UserRole.TECHNICIAN)
    availability = normalize_slots(payload.availability or default_availability)
    tech = await crud.create_technician(db, user, availability)
    logger.info("Technician %s registered with %d availability slot(s)", tech.id, len(availability))
    return technician_read(tech)


async def _technician(db: AsyncSession, technician_id: str) -> TechnicianProfile:
    tech = await crud.get_technician(db, technician_id)
    if not tech:
        raise TechnicianNotFound()
    return tech


async def get_technician(db: AsyncSession, actor: AuthContext, technician_id: str) -> TechnicianRead:
    tech = await _technician(db, technician_id)
    if not actor.is_admin and tech.user_id != actor.user_id:
        raise Forbidden("You can only view your own technician profile.")
    return technician_read(tech)


async def list_technicians(
    db: AsyncSession, search: str | None, page: int, per_page: int,
) -> TechnicianPage:
    techs, total = await crud.list_technicians(db, search, (page - 1) * per_page, per_page)
    return TechnicianPage(
        technicians=[technician_read(t) for t in techs],
        pagination=Pagination.build(page, per_page, total),
    )


async def update_availability(
    db: AsyncSession, actor: AuthContext, technician_id: str, availability: Sequence[str],
) -> TechnicianRead:
    tech = await _technician(db, technician_id)
    if not actor.is_admin and tech.user_id != actor.user_id:
        raise Forbidden("Only an administrator or the technician can change availability.")
    tech = await crud.update_technician_availability(db, tech, normalize_slots(availability))
    logger.info("Technician %s availability set to %s", tech.id, tech.availability)
    return technician_read(tech)


async def update_technician(
    db: AsyncSession, technician_id: str, payload: TechnicianUpdate,
) -> TechnicianRead:
    tech = await _technician(db, technician_id)
    await _edit_user(db, tech.user, payload)
    if payload.availability is not None:
        await crud.update_technician_availability(db, tech, normalize_slots(payload.availability))
    logger.info("Technician %s updated", tech.id)
    return technician_read(tech)


async def delete_technician(db: AsyncSession, technician_id: str) -> None:
    """Remove a technician with no open or in-progress calls, and their closed calls."""
    tech = await crud.lock_technician(db, technician_id)
    if not tech:
        raise TechnicianNotFound()
    if await crud.count_active_calls(db, technician_id=tech.id):
        raise AccountInUse("The technician still has open or in-progress calls.")
    removed = await crud.delete_calls_for(db, technician_id=tech.id)
    await crud.delete_account(db, tech)
    logger.info("Technician %s deleted with %d closed call(s)", technician_id, removed)


# ── Clients ───────────────────────────────────────────────

async def register_client(db: AsyncSession, payload: ClientCreate) -> ClientRead:
    user = await _new_user(db, payload.name, payload.email, payload.password, UserRole.CLIENT)
    client = await crud.create_client(db, user)
    logger.info("Client %s registered", client.id)
    return client_read(client)


async def _client(db: AsyncSession, client_id: str) -> ClientProfile:
    client = await crud.get_client(db, client_id)
    if not client:
        raise ClientNotFound()
    return client


async def get_client(db: AsyncSession, client_id: str) -> ClientRead:
    return client_read(await _client(db, client_id))


async def list_clients(db: AsyncSession, search: str | None, page: int, per_page: int) -> ClientPage:
    clients, total = await crud.list_clients(db, search, (page - 1) * per_page, per_page)
    return ClientPage(
        clients=[client_read(c) for c in clients],
        pagination=Pagination.build(page, per_page, total),
    )


async def update_client(db: AsyncSession, client_id: str, payload: AccountUpdate) -> ClientRead:
    client = await _client(db, client_id)
    await _edit_user(db, client.user, payload)
    logger.info("Client %s updated", client.id)
    return client_read(client)


async def delete_client(db: AsyncSession, client_id: str) -> None:
    """Remove a client with no open or in-progress calls, and their closed calls."""
    client = await _client(db, client_id)
    if await crud.count_active_calls(db, client_id=client.id):
        raise AccountInUse("The client still has open or in-progress calls.")
    removed = await crud.delete_calls_for(db, client_id=client.id)
    await crud.delete_account(db, client)
    logger.info("Client %s deleted with %d closed call(s)", client_id, removed)


# ── Profile ───────────────────────────────────────────────

async def _profile_user(db: AsyncSession, actor: AuthContext) -> User:
    user = await crud.get_user(db, actor.user_id)
    if not user:
        raise ProfileNotFound()
    return user


async def _profile_read(db: AsyncSession, user: User) -> ProfileRead:
    availability = None
    if user.role == UserRole.TECHNICIAN.value:
        tech = await crud.get_technician_by_user(db, user.id)
        availability = list(tech.availability or []) if tech else []
    return ProfileRead(
        id=user.id, name=user.name, email=user.email, role=user.role,
        created_at=user.created_at, availability=availability,
    )


async def get_profile(db: AsyncSession, actor: AuthContext) -> ProfileRead:
    return await _profile_read(db, await _profile_user(db, actor))


async def update_profile(db: AsyncSession, actor: AuthContext, payload: AccountUpdate) -> ProfileRead:
    user = await _edit_user(db, await _profile_user(db, actor), payload)
    logger.info("User %s updated their profile", user.id)
    return await _profile_read(db, user)


async def change_password(db: AsyncSession, actor: AuthContext, payload: PasswordChange) -> None:
    user = await _profile_user(db, actor)
    if not verify_password(payload.old_password, user.password_hash):
        raise InvalidPassword()
    if payload.new_password == payload.old_password:
        raise InvalidPassword("The new password must differ from the current one.")
    await crud.update_user(db, user, password_hash=hash_password(payload.new_password))
    logger.info("User %s changed their password", user.id)
