"""Attendance API: student self check-in and staff corrections."""
from flask import Blueprint

from student_attendance import limiter
from student_attendance.container import current_container
from student_attendance.models.principal import PrincipalRole
from student_attendance.utils.decorators import current_principal, role_required
from student_attendance.utils.helpers import success_response
from student_attendance.utils.validators import require_json, require_strings, validate_required_fields

attendance_bp = Blueprint("attendance", __name__)


@attendance_bp.route("/mark", methods=["POST"])
@limiter.limit("5 per minute")
def mark():
    """Student marks themself present; needs the password, not a session."""
    data = require_json()
    validate_required_fields(data, ["student_id", "password"])
    require_strings(data, ["password"])

    student_name, record = current_container().attendance.mark_self(
        str(data["student_id"]).strip(), data["password"]
    )
    return success_response(
        data=record.to_dict(),
        message="Attendance marked successfully",
        status_code=201,
        student_name=student_name,
    )


@attendance_bp.route("/<int:record_id>", methods=["GET"])
@role_required(PrincipalRole.ADMIN, PrincipalRole.TEACHER)
def get_record(record_id):
    record = current_container().attendance.get(record_id)
    return success_response(data=record.to_dict())


@attendance_bp.route("/<int:record_id>", methods=["PUT"])
@role_required(PrincipalRole.ADMIN)
def update_record(record_id):
    """Admin correction of a record."""
    data = require_json()
    _, admin_email = current_principal()
    record = current_container().attendance.update(record_id, data, admin_email)
    return success_response(data=record.to_dict(), message="Attendance updated successfully")


@attendance_bp.route("/<int:record_id>", methods=["DELETE"])
@role_required(PrincipalRole.ADMIN, PrincipalRole.TEACHER)
def delete_record(record_id):
    _, actor = current_principal()
    current_container().attendance.soft_delete(record_id, actor)
    return success_response(message="Attendance deleted successfully")
