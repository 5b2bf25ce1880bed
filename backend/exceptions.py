class AttendanceError(Exception):
    """Base error for the attendance core. Carries the HTTP status the gateway maps it to."""
    status_code = 500
    kind = 'ERROR'
    default_message = 'An unexpected error occurred.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'status': self.status_code, 'kind': self.kind, 'message': self.message}


class BadRequestError(AttendanceError):
    status_code = 400
    kind = 'BAD_REQUEST'
    default_message = 'Malformed or missing input.'


class UnauthorizedError(AttendanceError):
    status_code = 401
    kind = 'UNAUTHORIZED'
    default_message = 'Authentication required.'


class ForbiddenError(AttendanceError):
    status_code = 403
    kind = 'FORBIDDEN'
    default_message = 'Forbidden: Insufficient permissions'


class NotFoundError(AttendanceError):
    status_code = 404
    kind = 'NOT_FOUND'
    default_message = 'Resource not found.'


class ConflictError(AttendanceError):
    status_code = 409
    kind = 'CONFLICT'
    default_message = 'Request conflicts with the current state.'


class InvalidStateError(AttendanceError):
    # 400 rather than 409 so readers can tell it apart from a duplicate scan
    status_code = 400
    kind = 'INVALID_STATE'
    default_message = 'Operation not allowed in the current state.'
