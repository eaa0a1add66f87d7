from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from helpdesk.config import StoreConfig
from helpdesk.db import crud
from helpdesk.db.engine import Database
from helpdesk.errors import CallNotFound, Conflict, DuplicateAssociation, StoreConflict
from helpdesk.schemas import CallCreate
from helpdesk.services import calls
from tests.helpers import NOW


def _locked():
    return OperationalError("UPDATE calls", {}, Exception("database is locked"))


async def test_run_retries_store_conflicts(database):
    attempts = []

    async def flaky(db):
        attempts.append(1)
        if len(attempts) < 3:
            raise _locked()
        return "done"

    assert await database.run(flaky) == "done"
    assert len(attempts) == 3


async def test_run_gives_up_after_max_attempts(database):
    attempts = []

    async def always_locked(db):
        attempts.append(1)
        raise _locked()

    with pytest.raises(StoreConflict) as exc_info:
        await database.run(always_locked)
    assert len(attempts) == database.config.max_attempts
    assert exc_info.value.retryable


async def test_domain_errors_are_not_retried(database):
    attempts = []

    async def missing(db):
        attempts.append(1)
        raise CallNotFound()

    with pytest.raises(CallNotFound):
        await database.run(missing)
    assert len(attempts) == 1


async def test_closed_database_refuses_sessions():
    db = Database(StoreConfig(url="sqlite+aiosqlite:///:memory:"))
    with pytest.raises(RuntimeError):
        db.session_factory


async def test_duplicate_association_maps_to_domain_error(database, factory):
    _, client_ctx = await factory.client()
    await factory.technician("Ana Tech")
    repair = await factory.service("Repair")
    backup = await factory.service("Backup")
    payload = CallCreate(name="Printer", description="The office printer keeps jamming", service_ids=[repair.id])
    call = await database.run(calls.create_call, client_ctx, payload, NOW, 30)

    async def attach_backup(db):
        await crud.create_association(db, call.id, backup.id, Decimal("10.00"), 5)

    await database.run(attach_backup)
    with pytest.raises(DuplicateAssociation):
        await database.run(attach_backup)


async def test_duplicate_email_maps_to_conflict(database):
    async def two_users(db):
        await crud.create_user(db, "Ana", "ana@example.com", "x", "client")
        await crud.create_user(db, "Ana Again", "ana@example.com", "x", "client")

    with pytest.raises(Conflict) as exc_info:
        await database.run(two_users)
    assert exc_info.value.code == "CONFLICT"
    assert "email" in exc_info.value.message


async def test_duplicate_service_name_maps_to_conflict(database):
    async def two_services(db):
        await crud.create_service(db, "Repair", Decimal("10.00"))
        await crud.create_service(db, "Repair", Decimal("20.00"))

    with pytest.raises(Conflict):
        await database.run(two_services)


async def test_unrecognized_constraint_maps_to_store_conflict(database, factory):
    repair = await factory.service("Repair")

    attempts = []

    async def orphan_line(db):
        attempts.append(1)
        await crud.create_association(db, "no-such-call", repair.id, Decimal("10.00"), 0)

    with pytest.raises(StoreConflict):
        await database.run(orphan_line)
    assert len(attempts) == 1
