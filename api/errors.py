"""
Error types for the matching service.

Every failure the service can report maps to one of these classes; the
application renders them as ``{"error": message}`` with the class's
HTTP status code.
"""


class NannyMatchError(Exception):
    """Base class for all service errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class StateTransitionError(NannyMatchError):
    """The job's current state does not allow the requested operation."""

    status_code = 400


class AuthenticationRequired(NannyMatchError):
    status_code = 401


class PermissionDenied(NannyMatchError):
    status_code = 403


class NotFound(NannyMatchError):
    status_code = 404


class SelectionConflict(NannyMatchError):
    """Another selection locked the job first."""

    status_code = 409


class StoreError(NannyMatchError):
    """A read or write against the database failed."""

    status_code = 500
