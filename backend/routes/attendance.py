from flask import Blueprint, jsonify, request
from flask_login import current_user

from decorators import is_ownership_restricted, roles_required
from exceptions import BadRequestError, ForbiddenError
from utils.attendance_ledger import AttendanceLedger
from utils.request_parsing import coerce_int, parse_date


attendance_bp = Blueprint('attendance', __name__, url_prefix='/attendance')


@attendance_bp.route('/snapshot/<int:session_id>', methods=['GET'])
@roles_required('attendance.snapshot')
def session_snapshot(session_id):
    """Live present/absent split for a session, recomputed on every call."""
    return jsonify(AttendanceLedger.get_snapshot(session_id))


@attendance_bp.route('/session-report/<int:session_id>', methods=['GET'])
@roles_required('attendance.report')
def session_report(session_id):
    return jsonify(AttendanceLedger.session_report(session_id))


@attendance_bp.route('/teacher-report', methods=['GET'])
@roles_required('attendance.report')
def teacher_report():
    faculty_id = current_user.faculty_id
    if not is_ownership_restricted(current_user.role) and request.args.get('facultyId'):
        faculty_id = coerce_int(request.args.get('facultyId'), 'facultyId')
    if not faculty_id:
        raise ForbiddenError('Forbidden: faculty profile required or facultyId must be specified.')

    subject_id = coerce_int(request.args.get('subjectId'), 'subjectId')
    section_id = coerce_int(request.args.get('sectionId'), 'sectionId')
    raw_date = request.args.get('date')
    if subject_id is None or section_id is None or not raw_date:
        raise BadRequestError('subjectId, sectionId and date are required query parameters.')

    day = parse_date(raw_date, 'Date')
    return jsonify(AttendanceLedger.teacher_day_report(faculty_id, subject_id, section_id, day))


@attendance_bp.route('/aggregate/<int:section_id>', methods=['GET'])
@roles_required('attendance.report')
def aggregate_report(section_id):
    raw_from = request.args.get('from')
    raw_to = request.args.get('to')
    if not raw_from or not raw_to:
        raise BadRequestError("'from' and 'to' are required query parameters.")
    start = parse_date(raw_from, 'from')
    end = parse_date(raw_to, 'to')
    if start > end:
        raise BadRequestError("'from' must not be after 'to'.")
    subject_id = coerce_int(request.args.get('subjectId'), 'subjectId')
    return jsonify(AttendanceLedger.aggregate_report(section_id, start, end, subject_id))
