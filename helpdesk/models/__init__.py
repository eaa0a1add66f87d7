"""SQLAlchemy ORM models."""

from helpdesk.models.base import Base
from helpdesk.models.user import User, UserRole, UserSession
from helpdesk.models.technician import TechnicianProfile
from helpdesk.models.client import ClientProfile
from helpdesk.models.service import Service
from helpdesk.models.call import Call, CallService, CallStatus, ACTIVE_STATUSES

__all__ = [
    "Base",
    "User", "UserRole", "UserSession",
    "TechnicianProfile", "ClientProfile",
    "Service",
    "Call", "CallService", "CallStatus", "ACTIVE_STATUSES",
]
