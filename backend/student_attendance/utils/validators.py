"""Validation utilities for request payloads."""
from typing import Any, Dict, List, Optional, Tuple

from flask import request

from student_attendance.exceptions import ValidationError
from student_attendance.models.principal import PrincipalRole

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128


def require_json() -> Dict[str, Any]:
    """Return the JSON body or raise ValidationError."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON")
    return data


def validate_required_fields(data: Dict, required_fields: List[str]) -> None:
    """Validate required fields in data."""
    missing = [
        field for field in required_fields
        if data.get(field) is None or (isinstance(data[field], str) and not data[field].strip())
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def require_strings(data: Dict, fields: List[str]) -> None:
    """Reject present fields whose JSON value is not a string."""
    wrong = [field for field in fields if field in data and not isinstance(data[field], str)]
    if wrong:
        raise ValidationError(f"Fields must be strings: {', '.join(wrong)}")


def validate_password(password: Any) -> None:
    """Validate password length."""
    if not password or not isinstance(password, str):
        raise ValidationError("Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password) > MAX_PASSWORD_LENGTH:
        raise ValidationError("Password is too long")


def parse_role(value: Any) -> PrincipalRole:
    try:
        return PrincipalRole.parse(str(value) if value is not None else '')
    except ValueError as e:
        allowed = ', '.join(role.value for role in PrincipalRole)
        raise ValidationError(f"Invalid user type. Must be one of: {allowed}") from e


def _int_arg(name: str) -> Optional[int]:
    raw = request.args.get(name)
    if raw is None or raw == '':
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError(f"{name} must be an integer") from e


def parse_pagination() -> Tuple[Optional[int], Optional[int]]:
    """Read ``limit`` and ``offset`` query arguments; clamping is left to the service."""
    return _int_arg('limit'), _int_arg('offset')
