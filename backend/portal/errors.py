"""Error types raised by the verification and identity services.

Every error carries the HTTP status it maps to; the API blueprint turns
them into ``{"error": message}`` responses.
"""


class PortalError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message}


class ValidationError(PortalError):
    status_code = 400
    message = 'Invalid request'


class InvalidCode(ValidationError):
    message = 'Invalid or expired verification code'


class CodeExpired(ValidationError):
    message = 'Verification code has expired'


class InvalidUsername(ValidationError):
    message = 'Username must be between 3 and 20 characters'


class Unauthenticated(PortalError):
    status_code = 401
    message = 'Not authenticated'


class Conflict(PortalError):
    status_code = 400
    message = 'Conflict'


class UsernameTaken(Conflict):
    message = 'Username already taken'


class NotFound(PortalError):
    status_code = 404
    message = 'Not found'


class UpstreamFailure(PortalError):
    status_code = 500
    message = 'Upstream service failure'
