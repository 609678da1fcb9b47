"""
Typed errors raised by the service layer.

Services raise these; the handlers registered in ``create_app`` turn them into
``{'error': message}`` JSON bodies with the matching status code.
"""


class ServiceError(Exception):
    status_code = 500
    default_message = 'Server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Missing or malformed input. ``message`` may be a list of problems."""
    status_code = 400
    default_message = 'Invalid request'


class AuthError(ServiceError):
    status_code = 401
    default_message = 'Authentication required'


class ForbiddenError(ServiceError):
    status_code = 403
    default_message = 'Access denied'


class NotFoundError(ServiceError):
    status_code = 404
    default_message = 'Not found'


class ConflictError(ServiceError):
    status_code = 409
    default_message = 'Conflict'


class InternalError(ServiceError):
    """Persistence or storage failure. The message is logged, never returned."""
    status_code = 500
