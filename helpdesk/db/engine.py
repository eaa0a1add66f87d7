"""Async SQLAlchemy engine and session factory behind an explicit store handle."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy import event
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from helpdesk.config import StoreConfig
from helpdesk.errors import Conflict, DuplicateAssociation, HelpdeskError, StoreConflict, TechnicianBusy

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SQLITE_PREFIX = "sqlite+aiosqlite:///"

# Constraint markers as they appear in SQLite and PostgreSQL error messages.
_INTEGRITY_ERRORS: list[tuple[tuple[str, ...], Callable[[], HelpdeskError]]] = [
    (("call_services.call_id", "call_services_pkey"), DuplicateAssociation),
    (("calls.technician_id", "uq_calls_technician_in_progress"), TechnicianBusy),
    (("users.email", "ix_users_email"), lambda: Conflict("A user with this email already exists.")),
    (("services.name", "ix_services_name"), lambda: Conflict("A service with this name already exists.")),
]


def integrity_error_to_domain(exc: IntegrityError) -> HelpdeskError:
    """Domain error for a constraint violation; StoreConflict when unrecognized."""
    message = str(exc.orig)
    for markers, factory in _INTEGRITY_ERRORS:
        if any(marker in message for marker in markers):
            return factory()
    return StoreConflict()


def _install_sqlite_hooks(engine: AsyncEngine) -> None:
    """Serialize SQLite writers and turn on foreign keys.

    aiosqlite's implicit BEGIN is disabled so every transaction starts with
    BEGIN IMMEDIATE and takes the write lock before its first read.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """Store handle: owns the engine, hands out sessions and transactions.

    Opened once at process start and closed at shutdown.
    """

    def __init__(self, config: StoreConfig):
        self.config = config
        self._engine: AsyncEngine | None = None
        self._factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not open")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._factory is None:
            raise RuntimeError("Database is not open")
        return self._factory

    async def open(self, create_schema: bool = True) -> None:
        url = self.config.url
        connect_args: dict[str, Any] = {}
        if url.startswith(_SQLITE_PREFIX):
            db_path = url.replace(_SQLITE_PREFIX, "")
            if db_path and db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            connect_args["timeout"] = self.config.busy_timeout_seconds

        self._engine = create_async_engine(url, echo=self.config.echo, connect_args=connect_args)
        if self._engine.dialect.name == "sqlite":
            _install_sqlite_hooks(self._engine)
        self._factory = async_sessionmaker(self._engine, class_=AsyncSession, expire_on_commit=False)

        if create_schema:
            await self.create_all()
        logger.info("Store opened: %s", self._engine.url.render_as_string(hide_password=True))

    async def create_all(self) -> None:
        from helpdesk.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Store closed")
        self._engine = None
        self._factory = None

    async def run(
        self,
        operation: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Run ``operation(session, *args, **kwargs)`` in a single transaction.

        Commits on success and rolls back on any exception. Lock timeouts,
        deadlocks and serialization failures re-run the whole operation up to
        ``max_attempts`` times before surfacing as StoreConflict. Domain
        errors propagate untouched, and constraint violations are
        raised as the matching domain error.
        """
        attempts = max(1, self.config.max_attempts)
        for attempt in range(1, attempts + 1):
            try:
                async with self.session_factory() as session:
                    async with session.begin():
                        return await operation(session, *args, **kwargs)
            except IntegrityError as exc:
                error = integrity_error_to_domain(exc)
                logger.info(
                    "Constraint violation in %s mapped to %s: %s",
                    operation.__name__, error.code, exc.orig,
                )
                raise error from exc
            except DBAPIError as exc:
                if attempt >= attempts:
                    logger.error(
                        "Store conflict in %s after %d attempts: %s",
                        operation.__name__, attempt, exc.orig,
                    )
                    raise StoreConflict() from exc
                logger.warning(
                    "Store conflict in %s (attempt %d/%d), retrying: %s",
                    operation.__name__, attempt, attempts, exc.orig,
                )
                await asyncio.sleep(self.config.retry_backoff_seconds * attempt)
        raise StoreConflict()
