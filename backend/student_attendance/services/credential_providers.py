"""Per-role credential lookup.

Admins, teachers and students live in separate tables keyed by different
identifiers. Each role gets one provider; the authenticator only ever talks
to the registry, so adding a role means adding a provider, not a branch.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, Optional, Type

from student_attendance import db
from student_attendance.exceptions import ConfigurationError, NotFound
from student_attendance.models.principal import Admin, PrincipalRole, Student, Teacher


@dataclass(frozen=True)
class PrincipalRecord:
    """What authentication needs to know about a principal."""
    role: PrincipalRole
    identity_key: str
    id: int
    display_name: str
    credential_hash: str
    active: bool


class CredentialProvider:
    """Looks up principals of one role by their identity key."""

    role: PrincipalRole
    model: Type[db.Model]
    identity_column: str

    def normalize(self, identity_key: str) -> str:
        return identity_key.strip()

    def _query_row(self, identity_key: str):
        column = getattr(self.model, self.identity_column)
        return self.model.query.filter(column == self.normalize(identity_key)).first()

    def lookup(self, identity_key: str) -> Optional[PrincipalRecord]:
        row = self._query_row(identity_key)
        if row is None:
            return None
        return PrincipalRecord(
            role=self.role,
            identity_key=row.identity_key,
            id=row.id,
            display_name=row.display_name,
            credential_hash=row.password_hash,
            active=bool(row.is_active),
        )

    def set_password_hash(self, identity_key: str, password_hash: str) -> None:
        row = self._query_row(identity_key)
        if row is None:
            raise NotFound(f"{self.role.value.capitalize()} not found")
        row.update(password_hash=password_hash)

    def record_login(self, identity_key: str, when: datetime) -> None:
        """Hook for roles that track their last login."""


class AdminCredentials(CredentialProvider):
    role = PrincipalRole.ADMIN
    model = Admin
    identity_column = 'email'

    def normalize(self, identity_key: str) -> str:
        # Emails are stored lowercased
        return identity_key.strip().lower()

    def record_login(self, identity_key: str, when: datetime) -> None:
        admin = self._query_row(identity_key)
        if admin is not None:
            admin.update(last_login=when)


class TeacherCredentials(CredentialProvider):
    role = PrincipalRole.TEACHER
    model = Teacher
    identity_column = 'teacher_id'


class StudentCredentials(CredentialProvider):
    role = PrincipalRole.STUDENT
    model = Student
    identity_column = 'student_id'


class CredentialProviders:
    """Registry holding exactly one provider per role."""

    def __init__(self, providers: Iterable[CredentialProvider]):
        self._providers: Dict[PrincipalRole, CredentialProvider] = {}
        for provider in providers:
            self._providers[provider.role] = provider

        missing = set(PrincipalRole) - set(self._providers)
        if missing:
            names = ', '.join(sorted(role.value for role in missing))
            raise ConfigurationError(f"No credential provider for role(s): {names}")

    @classmethod
    def default(cls) -> 'CredentialProviders':
        return cls([AdminCredentials(), TeacherCredentials(), StudentCredentials()])

    def for_role(self, role: PrincipalRole) -> CredentialProvider:
        return self._providers[role]

    def lookup(self, role: PrincipalRole, identity_key: str) -> Optional[PrincipalRecord]:
        return self.for_role(role).lookup(identity_key)
