"""Absence request API."""
from flask import Blueprint

from student_attendance.container import current_container
from student_attendance.exceptions import Unauthorized, ValidationError
from student_attendance.models.absent_request import Decision, RequestStatus
from student_attendance.models.principal import PrincipalRole
from student_attendance.utils.decorators import current_principal, role_required
from student_attendance.utils.helpers import success_response
from student_attendance.utils.validators import (
    parse_pagination,
    require_json,
    validate_required_fields,
)

absent_requests_bp = Blueprint("absent_requests", __name__)

STAFF = (PrincipalRole.ADMIN, PrincipalRole.TEACHER)


def _workflow():
    return current_container().absent_requests


def _page_response(page, message):
    return success_response(message=message, **page.to_dict())


@absent_requests_bp.route("", methods=["POST"])
@role_required(PrincipalRole.STUDENT)
def create_request():
    """Submit a request. Any client-supplied status is ignored."""
    data = require_json()
    validate_required_fields(data, ["request_date", "reason"])
    _, student_id = current_principal()

    request = _workflow().create(student_id, data["request_date"], data["reason"])
    return success_response(
        data=request.to_dict(),
        message="Absent request created successfully",
        status_code=201,
    )


@absent_requests_bp.route("/<int:request_id>", methods=["GET"])
@role_required()
def get_request(request_id):
    role, identity_key = current_principal()
    request = _workflow().get(request_id)
    if role is PrincipalRole.STUDENT and request.student_id != identity_key:
        raise Unauthorized("You can only view your own absent requests")
    return success_response(data=request.to_dict())


@absent_requests_bp.route("/<int:request_id>", methods=["PUT"])
@role_required(PrincipalRole.STUDENT)
def update_request(request_id):
    """Owner edits date/reason while the request is pending."""
    data = require_json()
    _, student_id = current_principal()
    request = _workflow().update_own(request_id, student_id, data)
    return success_response(data=request.to_dict(), message="Absent request updated successfully")


def _decide(request_id, decision):
    _, teacher_id = current_principal()
    request = _workflow().decide(request_id, teacher_id, decision)
    return success_response(
        data=request.to_dict(),
        message=f"Absent request {request.status.value} successfully",
    )


@absent_requests_bp.route("/<int:request_id>/approve", methods=["PUT"])
@role_required(PrincipalRole.TEACHER)
def approve_request(request_id):
    return _decide(request_id, Decision.APPROVE)


@absent_requests_bp.route("/<int:request_id>/reject", methods=["PUT"])
@role_required(PrincipalRole.TEACHER)
def reject_request(request_id):
    return _decide(request_id, Decision.REJECT)


@absent_requests_bp.route("/<int:request_id>/status", methods=["PATCH"])
@role_required(PrincipalRole.TEACHER)
def update_status(request_id):
    """Decide through a status value: approved or rejected."""
    data = require_json()
    validate_required_fields(data, ["status"])
    decisions = {
        RequestStatus.APPROVED.value: Decision.APPROVE,
        RequestStatus.REJECTED.value: Decision.REJECT,
    }
    decision = decisions.get(str(data["status"]).strip().lower())
    if decision is None:
        raise ValidationError("Status must be approved or rejected")
    return _decide(request_id, decision)


@absent_requests_bp.route("/<int:request_id>", methods=["DELETE"])
@role_required()
def delete_request(request_id):
    role, actor = current_principal()
    _workflow().soft_delete(request_id, role, actor)
    return success_response(message="Absent request deleted successfully")


@absent_requests_bp.route("/pending", methods=["GET"])
@role_required(*STAFF)
def list_pending():
    limit, offset = parse_pagination()
    page = _workflow().list_pending(limit, offset)
    return _page_response(page, "Pending absent requests retrieved successfully")


@absent_requests_bp.route("/me", methods=["GET"])
@role_required(PrincipalRole.STUDENT)
def list_mine():
    _, student_id = current_principal()
    limit, offset = parse_pagination()
    page = _workflow().list_by_student(student_id, limit, offset)
    return _page_response(page, "Absent requests retrieved successfully")


@absent_requests_bp.route("/student-id/<student_id>", methods=["GET"])
@role_required()
def list_by_student(student_id):
    role, identity_key = current_principal()
    if role is PrincipalRole.STUDENT and student_id != identity_key:
        raise Unauthorized("You can only view your own absent requests")

    limit, offset = parse_pagination()
    page = _workflow().list_by_student(student_id, limit, offset)
    return _page_response(page, "Absent requests retrieved successfully")


@absent_requests_bp.route("/class-id/<int:class_id>", methods=["GET"])
@role_required(*STAFF)
def list_by_class(class_id):
    limit, offset = parse_pagination()
    page = _workflow().list_by_class(class_id, limit, offset)
    return _page_response(page, "Absent requests retrieved successfully")


@absent_requests_bp.route("/teacher-id/<teacher_id>", methods=["GET"])
@role_required(*STAFF)
def list_by_teacher(teacher_id):
    limit, offset = parse_pagination()
    page = _workflow().list_by_teacher(teacher_id, limit, offset)
    return _page_response(page, "Absent requests retrieved successfully")
