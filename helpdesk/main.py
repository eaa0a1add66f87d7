"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from helpdesk.api.router import api_router
from helpdesk.clock import Clock, SystemClock
from helpdesk.config import Settings, get_settings
from helpdesk.db.engine import Database
from helpdesk.errors import HelpdeskError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    database = Database(settings.store)
    await database.open()
    app.state.database = database
    yield
    await database.close()


async def _helpdesk_error_handler(request: Request, exc: HelpdeskError) -> JSONResponse:
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(settings: Settings | None = None, clock: Clock | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title="Helpdesk Dispatch",
        description="Technician auto-assignment and call status engine for a helpdesk.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.clock = clock or SystemClock(settings.assignment.timezone)

    app.add_exception_handler(HelpdeskError, _helpdesk_error_handler)
    app.include_router(api_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
