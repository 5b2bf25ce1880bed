from datetime import date, datetime

from exceptions import BadRequestError


def json_body(req):
    """The request JSON as a dict; an absent or unparsable body counts as empty."""
    data = req.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequestError('Request body must be a JSON object.')
    return data


def payload_value(payload, *keys, default=None):
    if not isinstance(payload, dict):
        return default
    for key in keys:
        if key in payload and payload[key] not in (None, ''):
            return payload[key]
    return default


def coerce_int(value, field):
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise BadRequestError(f'Invalid {field}.')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequestError(f'Invalid {field}.')


def parse_date(value, field='date') -> date:
    try:
        return datetime.strptime(value or '', '%Y-%m-%d').date()
    except ValueError:
        raise BadRequestError(f'{field} must be in YYYY-MM-DD format.')
