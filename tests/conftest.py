"""Shared pytest fixtures: a file-backed store, a pinned clock and record factories."""

from __future__ import annotations

from decimal import Decimal

import pytest
import pytest_asyncio

from helpdesk.clock import FixedClock
from helpdesk.db import crud
from helpdesk.db.engine import Database
from helpdesk.schemas import ClientCreate, ServiceCreate, TechnicianCreate
from helpdesk.services import accounts, catalog
from helpdesk.services.auth import AuthContext, context_for
from tests.helpers import NOW, PASSWORD, store_config


@pytest_asyncio.fixture
async def database(tmp_path):
    """File-backed SQLite store, so concurrent transactions use separate connections."""
    db = Database(store_config(tmp_path))
    await db.open()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def db(database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(NOW)


class Factory:
    """Creates committed records through ``Database.run``."""

    def __init__(self, database: Database):
        self.database = database

    async def context(self, email: str) -> AuthContext:
        async with self.database.session_factory() as db:
            return context_for(await crud.get_user_by_email(db, email))

    async def technician(self, name: str, availability=("09:00",)):
        email = f"{name.lower().replace(' ', '.')}@example.com"
        payload = TechnicianCreate(name=name, email=email, password=PASSWORD, availability=list(availability))
        tech = await self.database.run(accounts.register_technician, payload, list(availability))
        return tech, await self.context(email)

    async def client(self, name: str = "Carla Client"):
        email = f"{name.lower().replace(' ', '.')}@example.com"
        payload = ClientCreate(name=name, email=email, password=PASSWORD)
        client = await self.database.run(accounts.register_client, payload)
        return client, await self.context(email)

    async def admin(self, name: str = "Ada Admin") -> AuthContext:
        email = f"{name.lower().replace(' ', '.')}@example.com"
        await self.database.run(accounts.create_admin, name, email, PASSWORD)
        return await self.context(email)

    async def service(self, name: str, value: str = "100.00"):
        return await self.database.run(
            catalog.create_service, ServiceCreate(name=name, value=Decimal(value)),
        )


@pytest.fixture
def factory(database):
    return Factory(database)
