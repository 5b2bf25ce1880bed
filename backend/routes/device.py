import logging

from flask import Blueprint, current_app, g, jsonify, request

from decorators import device_required
from exceptions import BadRequestError, UnauthorizedError
from extensions import device_rate_key, limiter
from models import Faculty
from utils.broadcaster import broadcaster
from utils.request_parsing import json_body, payload_value

logger = logging.getLogger(__name__)

device_bp = Blueprint('device', __name__, url_prefix='/device')


@device_bp.route('/authenticate-teacher', methods=['POST'])
@limiter.limit(lambda: current_app.config['DEVICE_AUTH_RATE_LIMIT'], key_func=device_rate_key)
@device_required
def authenticate_teacher():
    """A teacher taps their card on a reader to unlock it for scanning."""
    data = json_body(request)
    teacher_rfid = payload_value(data, 'teacherRfidUid', 'teacher_rfid_uid')
    if not teacher_rfid:
        raise BadRequestError('Teacher RFID UID is required.')

    mac = g.device.mac_addr
    teacher = Faculty.query.filter_by(rfid_uid=str(teacher_rfid).strip()).first()
    if teacher is None:
        logger.warning('Device %s presented an unknown teacher card', mac)
        broadcaster.publish_device_auth(mac, None, 'Teacher authentication failed.')
        raise UnauthorizedError('Teacher RFID not recognised.')

    message = f'Device {mac} authenticated by {teacher.name}.'
    logger.info(message)
    broadcaster.publish_device_auth(mac, teacher, message)
    return jsonify({'message': 'Teacher authenticated successfully.', 'teacher': teacher.to_summary()})
