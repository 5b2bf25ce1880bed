from flask import Blueprint, jsonify, request
from flask_login import current_user

from decorators import device_required, is_ownership_restricted, roles_required
from exceptions import BadRequestError, ForbiddenError, NotFoundError
from utils.request_parsing import coerce_int, json_body, payload_value
from utils.session_manager import SessionManager
from utils.session_scheduler import SessionScheduler


session_bp = Blueprint('session', __name__, url_prefix='/session')


@session_bp.route('/start', methods=['POST'])
@roles_required('session.start')
def start_session():
    data = json_body(request)
    faculty_id = coerce_int(payload_value(data, 'facultyId', 'faculty_id'), 'facultyId')
    scheduled_class_id = coerce_int(payload_value(data, 'scheduledClassId', 'scheduled_class_id'), 'scheduledClassId')

    if faculty_id is None:
        if current_user.faculty_id is None:
            raise BadRequestError('Faculty ID is required.')
        faculty_id = current_user.faculty_id
    if is_ownership_restricted(current_user.role) and current_user.faculty_id != faculty_id:
        raise ForbiddenError('Forbidden: Teachers can only start sessions for themselves.')

    session = SessionScheduler.resolve_and_start(faculty_id, scheduled_class_id)
    return jsonify({'message': 'Session started successfully', 'session': session.to_dict()}), 201


@session_bp.route('/close/<int:session_id>', methods=['POST'])
@roles_required('session.close')
def close_session(session_id):
    session = SessionManager.close(session_id, current_user.faculty_id, current_user.role)
    return jsonify({'message': 'Session closed successfully', 'session': session.to_dict()})


@session_bp.route('/active', methods=['GET'])
@roles_required('session.list_active')
def list_active_sessions():
    return jsonify([session.to_dict() for session in SessionManager.list_active()])


@session_bp.route('/active-by-teacher/<int:teacher_id>', methods=['GET'])
@device_required
def active_session_for_teacher(teacher_id):
    """Readers poll this after a teacher taps their card to learn which session to scan into."""
    session = SessionManager.get_active_for_teacher(teacher_id)
    if session is None:
        raise NotFoundError(f'No active session found for teacher ID {teacher_id}.')
    return jsonify(session.to_dict())


@session_bp.route('/teacher-instances', methods=['GET'])
@roles_required('session.teacher_instances')
def teacher_instances():
    if is_ownership_restricted(current_user.role):
        faculty_id = current_user.faculty_id
    else:
        faculty_id = coerce_int(request.args.get('facultyId'), 'facultyId')
    if not faculty_id:
        raise BadRequestError('Faculty ID is required.')
    return jsonify(SessionScheduler.teacher_subject_instances(faculty_id))


@session_bp.route('/<int:session_id>', methods=['GET'])
@roles_required('session.view')
def get_session(session_id):
    session = SessionManager.get_by_id(session_id)
    if is_ownership_restricted(current_user.role) and current_user.faculty_id != session.teacher_id:
        raise ForbiddenError('Forbidden: You can only view your own sessions.')
    return jsonify(session.to_dict())
