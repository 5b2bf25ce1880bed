import logging

from flask import Blueprint, current_app, g, jsonify, request

from decorators import device_required
from exceptions import BadRequestError
from extensions import device_rate_key, limiter
from utils.attendance_ledger import AttendanceLedger
from utils.broadcaster import broadcaster
from utils.request_parsing import coerce_int, json_body, payload_value

logger = logging.getLogger(__name__)

scan_bp = Blueprint('scan', __name__, url_prefix='/scan')


def _scan_rate_limit():
    return current_app.config['SCAN_RATE_LIMIT']


@scan_bp.route('/rfid', methods=['POST'])
@limiter.limit(_scan_rate_limit, key_func=device_rate_key)
@device_required
def rfid_scan():
    """Record a student's card tap from an authenticated reader.

    Body: ``{"rfidUid": "04A1B2C3", "sessionId": 1}``. Ledger errors are
    returned unchanged so readers can tell a duplicate (409) from a closed
    session (400).
    """
    data = json_body(request)
    rfid_uid = payload_value(data, 'rfidUid', 'rfid_uid')
    session_id = coerce_int(payload_value(data, 'sessionId', 'session_id'), 'sessionId')
    if not rfid_uid or not session_id:
        raise BadRequestError('RFID UID and Session ID are required for scan.')

    record = AttendanceLedger.record_scan(str(rfid_uid).strip(), g.device.mac_addr, session_id)
    attendance = record.to_dict()

    try:
        snapshot = AttendanceLedger.get_snapshot(session_id)
    except Exception:
        logger.exception('Could not build snapshot for session %s after scan', session_id)
    else:
        broadcaster.publish_snapshot(session_id, snapshot)

    return jsonify({
        'message': 'RFID scan processed and attendance logged successfully.',
        'attendance': attendance,
    })


@scan_bp.route('/enrollment-rfid', methods=['POST'])
@limiter.limit(_scan_rate_limit, key_func=device_rate_key)
def enrollment_scan():
    data = json_body(request)
    rfid_uid = payload_value(data, 'rfidUid', 'rfid_uid')
    token = payload_value(data, 'token')
    if not rfid_uid:
        raise BadRequestError('RFID UID is required for enrollment.')
    if not token:
        raise BadRequestError('Enrollment token is required.')

    delivered = broadcaster.deliver_enrollment_scan(str(token), str(rfid_uid).strip())
    if not delivered:
        logger.info('No viewer waiting on enrollment token; scan dropped')
    return jsonify({
        'message': 'RFID UID delivered for enrollment.' if delivered else 'No enrollment listener for this token.',
        'rfidUid': rfid_uid,
        'delivered': delivered,
    })
