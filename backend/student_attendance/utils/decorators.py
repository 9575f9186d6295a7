"""Custom decorators for authorization."""
from functools import wraps
from typing import Tuple

from flask_jwt_extended import get_jwt, get_jwt_identity, jwt_required

from student_attendance.models.principal import PrincipalRole
from student_attendance.utils.helpers import error_response


def current_principal() -> Tuple[PrincipalRole, str]:
    """Role and identity key of the authenticated caller."""
    return PrincipalRole.parse(get_jwt().get('role')), get_jwt_identity()


def role_required(*roles: PrincipalRole):
    """Require a valid session whose role is one of ``roles``."""
    def decorator(f):
        @wraps(f)
        @jwt_required()
        def decorated_function(*args, **kwargs):
            try:
                role, _ = current_principal()
            except ValueError:
                return error_response("Invalid token role", 401)

            if roles and role not in roles:
                names = ' or '.join(r.value for r in roles)
                return error_response(f"{names.capitalize()} access required", 403)

            return f(*args, **kwargs)
        return decorated_function
    return decorator
