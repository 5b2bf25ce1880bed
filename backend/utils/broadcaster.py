"""Real-time fan-out of session and attendance events over Socket.IO.

Every push is a Socket.IO ``message`` carrying a JSON object with a
``type`` field. Publishing is fire-and-forget: a transport failure is
logged and never reaches the request that triggered it. There is no
replay; a client that reconnects re-fetches the snapshot over HTTP.
"""
import logging
import threading

from extensions import socketio

logger = logging.getLogger(__name__)

SESSION_STATUS_UPDATE = 'SESSION_STATUS_UPDATE'
ATTENDANCE_SNAPSHOT_UPDATE = 'ATTENDANCE_SNAPSHOT_UPDATE'
DEVICE_AUTH_STATUS_UPDATE = 'DEVICE_AUTH_STATUS_UPDATE'

START_RFID_ENROLLMENT = 'START_RFID_ENROLLMENT'
STOP_RFID_ENROLLMENT = 'STOP_RFID_ENROLLMENT'
RFID_ENROLLMENT_READY = 'RFID_ENROLLMENT_READY'
RFID_SCANNED = 'RFID_SCANNED'


class EnrollmentRegistry:
    """Token to connection map for one-shot RFID enrollment deliveries."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_token = {}

    def register(self, token, sid):
        with self._lock:
            self._by_token[token] = sid
        logger.debug('Enrollment token registered for %s', sid)

    def unregister(self, token, sid=None):
        """Drop ``token``; when ``sid`` is given only if it still belongs to that connection."""
        with self._lock:
            if sid is not None and self._by_token.get(token) != sid:
                return False
            removed = self._by_token.pop(token, None) is not None
        if removed:
            logger.debug('Enrollment token removed')
        return removed

    def discard_connection(self, sid):
        with self._lock:
            tokens = [token for token, owner in self._by_token.items() if owner == sid]
            for token in tokens:
                del self._by_token[token]
        if tokens:
            logger.debug('Dropped %d enrollment token(s) for closed connection %s', len(tokens), sid)
        return len(tokens)

    def consume(self, token):
        with self._lock:
            return self._by_token.pop(token, None)

    def __len__(self):
        with self._lock:
            return len(self._by_token)


class EventBroadcaster:
    def __init__(self, registry=None):
        self.registry = registry or EnrollmentRegistry()

    def publish(self, event_type, payload):
        message = {'type': event_type}
        message.update(payload or {})
        try:
            socketio.send(message)
        except Exception:
            logger.exception('Failed to broadcast %s', event_type)

    def publish_session_status(self, session_dict):
        self.publish(SESSION_STATUS_UPDATE, {'session': session_dict})

    def publish_snapshot(self, session_id, snapshot):
        self.publish(ATTENDANCE_SNAPSHOT_UPDATE, {'sessionId': session_id, 'data': snapshot})

    def publish_device_auth(self, device_mac, teacher=None, message=None):
        self.publish(DEVICE_AUTH_STATUS_UPDATE, {
            'deviceMacAddress': device_mac,
            'isAuth': teacher is not None,
            'authenticatedBy': teacher.name if teacher else None,
            'authenticatedTeacherId': teacher.id if teacher else None,
            'message': message,
        })

    def deliver_enrollment_scan(self, token, rfid_uid):
        """Send a scanned card UID to the single viewer waiting on ``token``.

        The registration is consumed whether or not the send succeeds.
        """
        sid = self.registry.consume(token)
        if sid is None:
            return False
        try:
            socketio.send({'type': RFID_SCANNED, 'rfidUid': rfid_uid}, to=sid)
        except Exception:
            logger.exception('Failed to deliver enrollment scan to %s', sid)
            return False
        return True


broadcaster = EventBroadcaster()
