"""Pydantic request/response schemas."""

from helpdesk.schemas.common import Pagination, PersonRef
from helpdesk.schemas.user import AccountUpdate, PasswordChange, ProfileRead
from helpdesk.schemas.service import ServiceCreate, ServiceUpdate, ServiceStatusUpdate, ServiceRead, ServicePage
from helpdesk.schemas.technician import (
    TechnicianCreate, TechnicianUpdate, TechnicianRead, TechnicianPage, AvailabilityUpdate,
    TechnicianAvailability, AvailabilityReport,
)
from helpdesk.schemas.client import ClientCreate, ClientRead, ClientPage
from helpdesk.schemas.call import (
    CallCreate, StatusUpdate, AddServiceRequest, AdditionalServiceItem,
    AdditionalServicesUpdate, CallFilter, ServiceLine, CallRead, CallSummary, CallPage,
)
from helpdesk.schemas.session import LoginRequest, LoginResponse

__all__ = [
    "Pagination", "PersonRef",
    "AccountUpdate", "PasswordChange", "ProfileRead",
    "ServiceCreate", "ServiceUpdate", "ServiceStatusUpdate", "ServiceRead", "ServicePage",
    "TechnicianCreate", "TechnicianUpdate", "TechnicianRead", "TechnicianPage", "AvailabilityUpdate",
    "TechnicianAvailability", "AvailabilityReport",
    "ClientCreate", "ClientRead", "ClientPage",
    "CallCreate", "StatusUpdate", "AddServiceRequest", "AdditionalServiceItem",
    "AdditionalServicesUpdate", "CallFilter", "ServiceLine", "CallRead", "CallSummary", "CallPage",
    "LoginRequest", "LoginResponse",
]
