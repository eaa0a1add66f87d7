"""Domain exception classes.

Each error carries a stable ``code``, the HTTP status it maps to at the API
boundary and a ``kind`` telling callers whether the request can be fixed by
the client or is worth retrying later.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CLIENT = "client"
    TRANSIENT = "transient"


class HelpdeskError(Exception):
    """Base exception for helpdesk operations."""

    code = "HELPDESK_ERROR"
    status_code = 400
    kind = ErrorKind.CLIENT
    default_message = "Request could not be completed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        return self.kind is ErrorKind.TRANSIENT

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code, "retryable": self.retryable}


# ── Lookups and access ────────────────────────────────────

class NotFound(HelpdeskError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found."


class CallNotFound(NotFound):
    code = "CALL_NOT_FOUND"
    default_message = "Call not found."


class TechnicianNotFound(NotFound):
    code = "TECHNICIAN_NOT_FOUND"
    default_message = "Technician not found."


class ServiceNotFound(NotFound):
    code = "SERVICE_NOT_FOUND"
    default_message = "Service not found."


class ClientNotFound(NotFound):
    code = "CLIENT_NOT_FOUND"
    default_message = "Client not found."


class ProfileNotFound(NotFound):
    code = "PROFILE_NOT_FOUND"
    default_message = "Profile not found for the authenticated user."


class Forbidden(HelpdeskError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "You are not allowed to perform this action."


class Conflict(HelpdeskError):
    code = "CONFLICT"
    status_code = 409
    default_message = "Resource already exists."


# ── Accounts ──────────────────────────────────────────────

class AccountInUse(HelpdeskError):
    code = "ACCOUNT_IN_USE"
    status_code = 409
    default_message = "The account still has open or in-progress calls."


class InvalidPassword(HelpdeskError):
    code = "INVALID_PASSWORD"
    status_code = 400
    default_message = "The current password is incorrect."


# ── Assignment ────────────────────────────────────────────

class NoTechniciansRegistered(HelpdeskError):
    code = "NO_TECHNICIANS_REGISTERED"
    status_code = 503
    kind = ErrorKind.TRANSIENT
    default_message = "No technicians are registered."


class NoAvailableTechnician(HelpdeskError):
    code = "NO_AVAILABLE_TECHNICIAN"
    status_code = 503
    kind = ErrorKind.TRANSIENT
    default_message = "No technician is available right now. Please try again later."


# ── Lifecycle ─────────────────────────────────────────────

class TechnicianBusy(HelpdeskError):
    code = "TECHNICIAN_BUSY"
    status_code = 409
    default_message = (
        "This technician already has a call in progress. "
        "Close the current call before starting another."
    )


class InvalidTransition(HelpdeskError):
    code = "INVALID_TRANSITION"
    status_code = 409
    default_message = "Status transition not allowed."


# ── Ledger / catalog ──────────────────────────────────────

class DuplicateAssociation(HelpdeskError):
    code = "DUPLICATE_ASSOCIATION"
    status_code = 409
    default_message = "This service is already attached to the call."


class AssociationNotFound(HelpdeskError):
    code = "ASSOCIATION_NOT_FOUND"
    status_code = 404
    default_message = "This service is not attached to the call."


class BaseServiceProtected(HelpdeskError):
    code = "BASE_SERVICE_PROTECTED"
    status_code = 409
    default_message = "The base service of a call cannot be removed."


class InactiveOrMissingService(HelpdeskError):
    code = "INACTIVE_OR_MISSING_SERVICE"
    status_code = 400
    default_message = "One or more services were not found or are inactive."


class ServiceInUse(HelpdeskError):
    code = "SERVICE_IN_USE"
    status_code = 409
    default_message = "The service is referenced by existing calls."


# ── Store ─────────────────────────────────────────────────

class StoreConflict(HelpdeskError):
    code = "STORE_CONFLICT"
    status_code = 503
    kind = ErrorKind.TRANSIENT
    default_message = "The request conflicted with a concurrent update. Please retry."
