from datetime import timedelta

import pytest

from decorators import ADMIN, PCOORD, TEACHER
from utils.request_parsing import payload_value

from conftest import MONDAY_MORNING


def error_kind(response):
    return response.get_json()['error']['kind']


def start(client, headers, **body):
    return client.post('/session/start', json=body, headers=headers)


def test_start_requires_a_token(client, directory):
    response = client.post('/session/start', json={})
    assert response.status_code == 401
    assert response.get_json()['error'] == {
        'status': 401, 'kind': 'UNAUTHORIZED', 'message': 'Authentication required.'
    }


def test_expired_or_forged_tokens_are_rejected(client, directory, auth_headers):
    expired = auth_headers(TEACHER, directory.teacher_id, expires_in=timedelta(seconds=-5))
    response = client.post('/session/start', json={}, headers=expired)
    assert response.status_code == 401

    response = client.post('/session/start', json={}, headers={'Authorization': 'Bearer not-a-jwt'})
    assert response.status_code == 401


def test_teacher_starts_own_session(client, directory, auth_headers, at_monday_morning, socket_client):
    response = start(client, auth_headers(TEACHER, directory.teacher_id), facultyId=directory.teacher_id)

    assert response.status_code == 201
    body = response.get_json()
    assert body['message'] == 'Session started successfully'
    assert body['session']['subjectInstanceId'] == directory.instance_id
    assert body['session']['startedAt'] == '2026-10-12T09:30:00'

    pushed = [packet['args'] for packet in socket_client.get_received()]
    assert [message['type'] for message in pushed] == ['SESSION_STATUS_UPDATE']
    assert pushed[0]['session']['id'] == body['session']['id']


def test_teacher_facultyid_defaults_to_token(client, directory, auth_headers, at_monday_morning):
    response = start(client, auth_headers(TEACHER, directory.teacher_id))
    assert response.status_code == 201


def test_teacher_cannot_start_for_someone_else(client, directory, auth_headers, at_monday_morning):
    response = start(client, auth_headers(TEACHER, directory.other_teacher_id), facultyId=directory.teacher_id)

    assert response.status_code == 403
    assert response.get_json()['error']['message'] == 'Forbidden: Teachers can only start sessions for themselves.'


def test_coordinator_starts_for_a_teacher(client, directory, auth_headers, at_monday_morning):
    response = start(client, auth_headers(PCOORD), facultyId=directory.teacher_id, scheduledClassId=directory.slot_id)
    assert response.status_code == 201
    assert response.get_json()['session']['teacherId'] == directory.teacher_id


def test_second_start_conflicts(client, directory, auth_headers, at_monday_morning):
    headers = auth_headers(TEACHER, directory.teacher_id)
    assert start(client, headers).status_code == 201

    response = start(client, headers)
    assert response.status_code == 409
    assert error_kind(response) == 'CONFLICT'


def test_start_outside_schedule_is_invalid_state(client, directory, auth_headers, monkeypatch):
    monkeypatch.setattr('utils.session_scheduler.local_now_naive', lambda: MONDAY_MORNING.replace(hour=18))

    response = start(client, auth_headers(TEACHER, directory.teacher_id))

    assert response.status_code == 400
    assert error_kind(response) == 'INVALID_STATE'


def test_start_with_bad_ids_is_bad_request(client, directory, auth_headers):
    response = start(client, auth_headers(ADMIN), facultyId='abc')
    assert response.status_code == 400
    assert error_kind(response) == 'BAD_REQUEST'


def test_close_flow_and_ownership(client, directory, auth_headers, at_monday_morning):
    session_id = start(client, auth_headers(TEACHER, directory.teacher_id)).get_json()['session']['id']

    response = client.post(f'/session/close/{session_id}', headers=auth_headers(TEACHER, directory.other_teacher_id))
    assert response.status_code == 403

    response = client.post(f'/session/close/{session_id}', headers=auth_headers(TEACHER, directory.teacher_id))
    assert response.status_code == 200
    assert response.get_json()['session']['isClosed'] is True

    response = client.post(f'/session/close/{session_id}', headers=auth_headers(ADMIN))
    assert response.status_code == 409

    response = client.post('/session/close/999', headers=auth_headers(ADMIN))
    assert response.status_code == 404


def test_list_active_is_for_coordinators(client, directory, auth_headers, at_monday_morning):
    start(client, auth_headers(TEACHER, directory.teacher_id))

    assert client.get('/session/active', headers=auth_headers(TEACHER, directory.teacher_id)).status_code == 403
    response = client.get('/session/active', headers=auth_headers(PCOORD))
    assert response.status_code == 200
    assert len(response.get_json()) == 1


def test_active_by_teacher_needs_device_credentials(client, directory, auth_headers, device_headers, at_monday_morning):
    start(client, auth_headers(TEACHER, directory.teacher_id))
    url = f'/session/active-by-teacher/{directory.teacher_id}'

    assert client.get(url).status_code == 401
    bad_secret = dict(device_headers, **{'x-device-secret': 'wrong'})
    assert client.get(url, headers=bad_secret).status_code == 401

    response = client.get(url, headers=device_headers)
    assert response.status_code == 200
    assert response.get_json()['teacherId'] == directory.teacher_id

    response = client.get(f'/session/active-by-teacher/{directory.other_teacher_id}', headers=device_headers)
    assert response.status_code == 404


def test_view_session_respects_ownership(client, directory, auth_headers, at_monday_morning):
    session_id = start(client, auth_headers(TEACHER, directory.teacher_id)).get_json()['session']['id']

    assert client.get(f'/session/{session_id}', headers=auth_headers(TEACHER, directory.teacher_id)).status_code == 200
    assert client.get(f'/session/{session_id}', headers=auth_headers(TEACHER, directory.other_teacher_id)).status_code == 403
    assert client.get(f'/session/{session_id}', headers=auth_headers(ADMIN)).status_code == 200
    assert client.get('/session/999', headers=auth_headers(ADMIN)).status_code == 404


@pytest.mark.parametrize('role, query, expected', [
    (TEACHER, '', 200),
    (ADMIN, '', 400),
    (ADMIN, '?facultyId={teacher_id}', 200),
])
def test_teacher_instances(client, directory, auth_headers, role, query, expected):
    faculty_id = directory.teacher_id if role == TEACHER else None
    url = '/session/teacher-instances' + query.format(teacher_id=directory.teacher_id)

    response = client.get(url, headers=auth_headers(role, faculty_id))

    assert response.status_code == expected
    if expected == 200:
        assert response.get_json()[0]['id'] == directory.instance_id


def test_unknown_role_is_forbidden(client, directory, auth_headers):
    response = client.get('/session/active', headers=auth_headers('STUDENT'))
    assert response.status_code == 403


def test_unknown_route_uses_error_envelope(client):
    response = client.get('/no/such/route')
    assert response.status_code == 404
    assert response.get_json()['error']['kind'] == 'NOT_FOUND'


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json()['status'] == 'ok'


@pytest.mark.parametrize('body', [['facultyId'], 'facultyId'])
def test_start_body_must_be_an_object(client, directory, auth_headers, body):
    response = client.post('/session/start', json=body, headers=auth_headers(TEACHER, directory.teacher_id))

    assert response.status_code == 400
    assert error_kind(response) == 'BAD_REQUEST'
    assert response.get_json()['error']['message'] == 'Request body must be a JSON object.'


def test_payload_value_ignores_non_object_payloads():
    assert payload_value(['facultyId'], 'facultyId') is None
    assert payload_value('facultyId', 'facultyId', default=7) == 7
    assert payload_value({'faculty_id': 3}, 'facultyId', 'faculty_id') == 3
