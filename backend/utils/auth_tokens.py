import logging
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app
from flask_login import UserMixin

logger = logging.getLogger(__name__)


class AuthUser(UserMixin):
    """Caller identity carried by a bearer token. Nothing is stored server-side."""

    def __init__(self, user_id, role, faculty_id=None):
        self.id = user_id
        self.role = (role or '').upper()
        self.faculty_id = faculty_id

    def __repr__(self):
        return f'<AuthUser {self.id} {self.role} faculty={self.faculty_id}>'


def encode_token(user_id, role, faculty_id=None, expires_in=None):
    if expires_in is None:
        expires_in = timedelta(hours=current_app.config.get('JWT_EXPIRY_HOURS', 12))
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(user_id),
        'role': role,
        'facultyId': faculty_id,
        'iat': int(now.timestamp()),
        'exp': int((now + expires_in).timestamp()),
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET_KEY'], algorithm=current_app.config['JWT_ALGORITHM'])


def decode_token(token):
    """Return the token's claims; raises jwt.InvalidTokenError when it doesn't verify."""
    return jwt.decode(
        token,
        current_app.config['JWT_SECRET_KEY'],
        algorithms=[current_app.config['JWT_ALGORITHM']],
    )


def load_user_from_request(request):
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    try:
        claims = decode_token(token.strip())
    except jwt.ExpiredSignatureError:
        logger.info('Rejected expired bearer token')
        return None
    except jwt.InvalidTokenError as exc:
        logger.warning('Rejected invalid bearer token: %s', exc)
        return None

    faculty_id = claims.get('facultyId')
    if faculty_id is not None:
        try:
            faculty_id = int(faculty_id)
        except (TypeError, ValueError):
            faculty_id = None
    return AuthUser(claims.get('sub'), claims.get('role'), faculty_id)
