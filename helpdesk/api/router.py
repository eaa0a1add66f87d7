"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from helpdesk.api.sessions import router as sessions_router
from helpdesk.api.users import router as users_router
from helpdesk.api.clients import router as clients_router
from helpdesk.api.technicians import router as technicians_router
from helpdesk.api.services import router as services_router
from helpdesk.api.calls import router as calls_router

api_router = APIRouter()
api_router.include_router(sessions_router)
api_router.include_router(users_router)
api_router.include_router(clients_router)
api_router.include_router(technicians_router)
api_router.include_router(services_router)
api_router.include_router(calls_router)
