"""Socket.IO handlers for viewer connections.

Viewers only listen for broadcasts, except for the RFID enrollment
side-channel where a client asks to receive the next card scanned under
a token it chose.
"""
import json
import logging

from flask import request
from flask_socketio import send

from extensions import socketio
from utils.broadcaster import (
    RFID_ENROLLMENT_READY,
    START_RFID_ENROLLMENT,
    STOP_RFID_ENROLLMENT,
    broadcaster,
)

logger = logging.getLogger(__name__)


def _parse_message(raw):
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, (str, bytes)):
        try:
            parsed = json.loads(raw)
        except ValueError:
            return None
        return parsed if isinstance(parsed, dict) else None
    return None


@socketio.on('connect')
def handle_connect(auth=None):
    logger.debug('Viewer connected: %s', request.sid)


@socketio.on('disconnect')
def handle_disconnect(reason=None):
    broadcaster.registry.discard_connection(request.sid)
    logger.debug('Viewer disconnected: %s', request.sid)


@socketio.on('message')
def handle_message(raw):
    message = _parse_message(raw)
    if message is None:
        logger.warning('Ignoring malformed message from %s', request.sid)
        return

    message_type = message.get('type')
    token = message.get('token')
    if message_type == START_RFID_ENROLLMENT:
        if not token:
            send({'type': 'ERROR', 'message': 'Enrollment token is required.'})
            return
        broadcaster.registry.register(str(token), request.sid)
        send({'type': RFID_ENROLLMENT_READY, 'token': token})
    elif message_type == STOP_RFID_ENROLLMENT:
        if token:
            broadcaster.registry.unregister(str(token), request.sid)
    else:
        logger.debug('Unhandled message type %r from %s', message_type, request.sid)
