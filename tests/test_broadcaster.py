import threading

from extensions import socketio
from utils.broadcaster import (
    ATTENDANCE_SNAPSHOT_UPDATE,
    RFID_ENROLLMENT_READY,
    RFID_SCANNED,
    EnrollmentRegistry,
    broadcaster,
)


def messages(socket_client):
    return [packet['args'] for packet in socket_client.get_received() if packet['name'] == 'message']


def test_registry_consume_is_single_use():
    registry = EnrollmentRegistry()
    registry.register('tok', 'sid-1')

    assert registry.consume('tok') == 'sid-1'
    assert registry.consume('tok') is None


def test_registry_unregister_only_for_owner():
    registry = EnrollmentRegistry()
    registry.register('tok', 'sid-1')

    assert registry.unregister('tok', 'sid-2') is False
    assert len(registry) == 1
    assert registry.unregister('tok', 'sid-1') is True
    assert len(registry) == 0


def test_registry_discard_connection_drops_all_its_tokens():
    registry = EnrollmentRegistry()
    registry.register('a', 'sid-1')
    registry.register('b', 'sid-1')
    registry.register('c', 'sid-2')

    assert registry.discard_connection('sid-1') == 2
    assert len(registry) == 1
    assert registry.consume('c') == 'sid-2'


def test_registry_concurrent_consume_delivers_once():
    registry = EnrollmentRegistry()
    registry.register('tok', 'sid-1')
    winners = []

    def grab():
        if registry.consume('tok') is not None:
            winners.append(1)

    threads = [threading.Thread(target=grab) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert winners == [1]


def test_publish_fans_out_to_connected_viewers(app, socket_client):
    broadcaster.publish_snapshot(7, {'presentCount': 0})

    assert messages(socket_client) == [
        {'type': ATTENDANCE_SNAPSHOT_UPDATE, 'sessionId': 7, 'data': {'presentCount': 0}}
    ]


def test_publish_failure_is_swallowed(app, monkeypatch):
    def broken_send(*args, **kwargs):
        raise RuntimeError('transport down')

    monkeypatch.setattr(socketio, 'send', broken_send)
    broadcaster.publish_session_status({'id': 1})


def test_enrollment_round_trip(app, client, socket_client):
    socket_client.send({'type': 'START_RFID_ENROLLMENT', 'token': 'enroll-42'})
    assert messages(socket_client) == [{'type': RFID_ENROLLMENT_READY, 'token': 'enroll-42'}]

    response = client.post('/scan/enrollment-rfid', json={'rfidUid': 'NEWCARD', 'token': 'enroll-42'})
    assert response.status_code == 200
    assert response.get_json()['delivered'] is True
    assert messages(socket_client) == [{'type': RFID_SCANNED, 'rfidUid': 'NEWCARD'}]

    again = client.post('/scan/enrollment-rfid', json={'rfidUid': 'NEWCARD', 'token': 'enroll-42'})
    assert again.get_json()['delivered'] is False
    assert messages(socket_client) == []


def test_enrollment_accepts_json_text_messages(app, socket_client):
    socket_client.send('{"type": "START_RFID_ENROLLMENT", "token": "text-token"}')
    assert messages(socket_client) == [{'type': RFID_ENROLLMENT_READY, 'token': 'text-token'}]
    assert len(broadcaster.registry) == 1


def test_stop_enrollment_unregisters(app, socket_client):
    socket_client.send({'type': 'START_RFID_ENROLLMENT', 'token': 'tok'})
    socket_client.send({'type': 'STOP_RFID_ENROLLMENT', 'token': 'tok'})

    assert len(broadcaster.registry) == 0


def test_disconnect_releases_tokens(app, socket_client):
    socket_client.send({'type': 'START_RFID_ENROLLMENT', 'token': 'tok'})
    assert len(broadcaster.registry) == 1

    socket_client.disconnect()

    assert len(broadcaster.registry) == 0


def test_enrollment_scan_requires_uid_and_token(app, client):
    assert client.post('/scan/enrollment-rfid', json={'token': 'x'}).status_code == 400
    assert client.post('/scan/enrollment-rfid', json={'rfidUid': 'x'}).status_code == 400
