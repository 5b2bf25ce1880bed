import logging
from functools import wraps

from flask import g, request
from flask_login import current_user

from exceptions import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

ADMIN = 'ADMIN'
PCOORD = 'PCOORD'
TEACHER = 'TEACHER'

# Roles allowed to invoke each operation
OPERATION_ROLES = {
    'session.start': {TEACHER, PCOORD, ADMIN},
    'session.close': {TEACHER, PCOORD, ADMIN},
    'session.list_active': {PCOORD, ADMIN},
    'session.view': {TEACHER, PCOORD, ADMIN},
    'session.teacher_instances': {TEACHER, PCOORD, ADMIN},
    'attendance.snapshot': {TEACHER, PCOORD, ADMIN},
    'attendance.report': {TEACHER, PCOORD, ADMIN},
}

# Roles that may act on sessions they do not own
OWNERSHIP_EXEMPT_ROLES = frozenset({ADMIN, PCOORD})


def is_ownership_restricted(role):
    return role not in OWNERSHIP_EXEMPT_ROLES


def roles_required(operation):
    """Require a bearer-authenticated caller whose role may perform ``operation``."""
    allowed = OPERATION_ROLES[operation]

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                raise UnauthorizedError('Authentication required.')
            if current_user.role not in allowed:
                logger.warning('Role %s denied for %s', current_user.role, operation)
                raise ForbiddenError('Forbidden: Insufficient permissions')
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def device_required(f):
    """Authenticate scanning hardware by its MAC and shared secret headers."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from models import Device

        mac = (request.headers.get('x-device-mac') or '').strip()
        secret = request.headers.get('x-device-secret') or ''
        if not mac or not secret:
            raise UnauthorizedError('Device credentials are required.')
        device = Device.query.filter_by(mac_addr=mac).first()
        if device is None or not device.check_secret(secret):
            logger.warning('Rejected device credentials for %s', mac)
            raise UnauthorizedError('Invalid device credentials.')
        g.device = device
        return f(*args, **kwargs)
    return decorated_function
