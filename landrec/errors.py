# landrec/errors.py
"""
Error kinds shared by the service, the client and the capture session.

Every error carries a short user-facing ``message``. The HTTP layer maps
each kind to a status code (see ``landrec.main``); the capture session and
history browser surface them as ``last_error`` instead of crashing.
"""


class LandRecError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LandRecError):
    """Missing or malformed input, rejected before any network call."""
    status_code = 400


class AuthError(LandRecError):
    """Bearer token absent, invalid, or no signed-in identity."""
    status_code = 401


class DeviceError(LandRecError):
    """Camera or geolocation unavailable, denied, or timed out."""
    status_code = 503


class PersistenceError(LandRecError):
    """The record store was unreachable or rejected the operation."""
    status_code = 500


class NotFoundError(LandRecError):
    """No such record is owned by the caller."""
    status_code = 404


class ActionInProgressError(LandRecError):
    """The same action is already in flight for this session."""
    status_code = 409
