"""Models package with all models."""
from .base import BaseModel
from .principal import PrincipalRole, Admin, Teacher, Student
from .classroom import ClassRoom
from .attendance import AttendanceRecord, AttendanceStatus
from .absent_request import AbsentRequest, RequestStatus, Decision

__all__ = [
    'BaseModel', 'PrincipalRole', 'Admin', 'Teacher', 'Student',
    'ClassRoom', 'AttendanceRecord', 'AttendanceStatus',
    'AbsentRequest', 'RequestStatus', 'Decision',
]
