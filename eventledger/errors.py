"""
Domain Errors
Expected outcomes of ledger operations, each with an HTTP status and a stable code
"""

from fastapi import status


class LedgerError(Exception):
    """Base class for errors callers are expected to branch on"""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "ledger_error"
    default_message = "Request could not be completed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(LedgerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"
    default_message = "Could not validate credentials"


class InvalidCredentials(Unauthorized):
    code = "invalid_credentials"
    default_message = "Invalid email or password"


class Forbidden(LedgerError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "You do not have permission to perform this action"


class NotFound(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found"


class ValidationError(LedgerError):
    code = "validation_error"
    default_message = "Invalid input"


class DuplicateEmail(LedgerError):
    code = "duplicate_email"
    default_message = "Email already exists"


class DuplicateRegistration(LedgerError):
    code = "duplicate_registration"
    default_message = "This email is already registered for the event"


class EventFull(LedgerError):
    code = "event_full"
    default_message = "Event is full"


class NotRegistered(LedgerError):
    code = "not_registered"
    default_message = "No registration found for this event"


class AlreadyCheckedIn(LedgerError):
    code = "already_checked_in"
    default_message = "Already checked in"


class UpstreamServiceError(LedgerError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "upstream_unavailable"
    default_message = "Insight service unavailable"


class StorageError(LedgerError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "storage_error"
    default_message = "Internal server error"
