"""Service wiring, built once per application."""
from dataclasses import dataclass

from flask import current_app

from student_attendance.services.absent_request_service import AbsenceRequestWorkflow
from student_attendance.services.attendance_service import AttendanceRecorder
from student_attendance.services.auth_service import Authenticator
from student_attendance.services.credential_providers import CredentialProviders
from student_attendance.services.passwords import PasswordHasher
from student_attendance.services.session_cache import SessionCache
from student_attendance.services.token_service import TokenIssuer
from student_attendance.settings import Settings

EXTENSION_KEY = 'student_attendance'


@dataclass(frozen=True)
class Container:
    settings: Settings
    sessions: SessionCache
    providers: CredentialProviders
    hasher: PasswordHasher
    tokens: TokenIssuer

    authenticator: Authenticator
    attendance: AttendanceRecorder
    absent_requests: AbsenceRequestWorkflow


def build_container(*, settings: Settings, sessions: SessionCache) -> Container:
    providers = CredentialProviders.default()
    hasher = PasswordHasher(settings.password_hash_method)
    tokens = TokenIssuer(settings)

    authenticator = Authenticator(providers, hasher, tokens, sessions)
    attendance = AttendanceRecorder(authenticator)
    absent_requests = AbsenceRequestWorkflow(settings)

    return Container(
        settings=settings,
        sessions=sessions,
        providers=providers,
        hasher=hasher,
        tokens=tokens,
        authenticator=authenticator,
        attendance=attendance,
        absent_requests=absent_requests,
    )


def current_container() -> Container:
    """Container of the application handling the current request."""
    return current_app.extensions[EXTENSION_KEY]
