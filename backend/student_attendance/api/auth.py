"""Authentication API: login, logout and password management."""
from flask import Blueprint
from flask_jwt_extended import set_access_cookies, unset_jwt_cookies

from student_attendance import limiter
from student_attendance.container import current_container
from student_attendance.models.principal import PrincipalRole
from student_attendance.utils.decorators import current_principal, role_required
from student_attendance.utils.helpers import success_response
from student_attendance.utils.validators import (
    parse_role,
    require_json,
    require_strings,
    validate_required_fields,
)

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Login for any role; the token is returned and set as a cookie."""
    data = require_json()
    validate_required_fields(data, ["user_type", "user_id", "password"])
    require_strings(data, ["password"])
    role = parse_role(data["user_type"])

    container = current_container()
    session = container.authenticator.login(role, str(data["user_id"]).strip(), data["password"])

    response, status = success_response(message="Login successful", **session.to_dict())
    set_access_cookies(
        response,
        session.token,
        max_age=int(container.settings.session_ttl.total_seconds()),
    )
    return response, status


@auth_bp.route("/logout", methods=["POST"])
@role_required()
def logout():
    role, identity_key = current_principal()
    current_container().authenticator.logout(role, identity_key)

    response, status = success_response(message="Logout successful")
    unset_jwt_cookies(response)
    return response, status


@auth_bp.route("/me", methods=["GET"])
@role_required()
def me():
    """Return the authenticated principal."""
    role, identity_key = current_principal()
    record = current_container().authenticator.current(role, identity_key)
    return success_response(data={
        "user_type": record.role.value,
        "user_id": record.identity_key,
        "name": record.display_name,
        "is_active": record.active,
    })


@auth_bp.route("/password", methods=["PUT"])
@role_required()
def change_password():
    data = require_json()
    validate_required_fields(data, ["old_password", "new_password"])
    require_strings(data, ["old_password", "new_password"])
    role, identity_key = current_principal()

    current_container().authenticator.change_password(
        role, identity_key, data["old_password"], data["new_password"]
    )
    return success_response(message="Password updated successfully")


@auth_bp.route("/<user_type>/<identity_key>/reset-password", methods=["PUT"])
@role_required(PrincipalRole.ADMIN)
def reset_password(user_type, identity_key):
    """Admin-only reset; the generated password is shown once."""
    role = parse_role(user_type)
    new_password = current_container().authenticator.reset_password(role, identity_key)
    return success_response(
        data={
            "user_type": role.value,
            "user_id": identity_key,
            "new_password": new_password,
        },
        message="Password reset successfully",
    )
