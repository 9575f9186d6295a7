"""Authentication service: login, logout and credential maintenance."""
import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from student_attendance import db
from student_attendance.exceptions import (
    AccountDeactivated,
    InvalidCredentials,
    NotFound,
    ValidationError,
)
from student_attendance.models.base import utcnow
from student_attendance.models.principal import PrincipalRole
from student_attendance.services.credential_providers import CredentialProviders, PrincipalRecord
from student_attendance.services.passwords import PasswordHasher
from student_attendance.services.session_cache import SessionCache
from student_attendance.services.token_service import Session, TokenIssuer
from student_attendance.utils.validators import validate_password

logger = logging.getLogger(__name__)


class Authenticator:
    """Verifies credentials for any role and manages the session lifecycle.

    The flow is identical for every role; role-specific lookups live in the
    credential providers.
    """

    def __init__(
        self,
        providers: CredentialProviders,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        sessions: SessionCache,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.providers = providers
        self.hasher = hasher
        self.tokens = tokens
        self.sessions = sessions
        self.clock = clock

    def verify_credentials(
        self, role: PrincipalRole, identity_key: str, password: str
    ) -> PrincipalRecord:
        """Check a password against the stored hash, then the active flag.

        The hash comparison runs whether or not the principal exists, and
        the active flag is only consulted after it succeeds.
        """
        record = self.providers.lookup(role, identity_key)
        matched = self.hasher.verify(record.credential_hash if record else None, password)
        if record is None or not matched:
            raise InvalidCredentials()
        if not record.active:
            raise AccountDeactivated()
        return record

    def login(self, role: PrincipalRole, identity_key: str, password: str) -> Session:
        """Authenticate and open a session, replacing any previous one."""
        record = self.verify_credentials(role, identity_key, password)

        session = self.tokens.issue(role, record.identity_key)
        self.sessions.store(role, record.identity_key, session.token)
        self._record_login(role, record.identity_key)

        logger.info("%s %s logged in", role.value, record.identity_key)
        return session

    def _record_login(self, role: PrincipalRole, identity_key: str) -> None:
        try:
            self.providers.for_role(role).record_login(identity_key, self.clock())
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning("Could not record last login for %s %s: %s", role.value, identity_key, e)

    def logout(self, role: PrincipalRole, identity_key: str) -> None:
        """Drop the cached session. Succeeds when none exists."""
        self.sessions.delete(role, identity_key)
        logger.info("%s %s logged out", role.value, identity_key)

    def current(self, role: PrincipalRole, identity_key: str) -> PrincipalRecord:
        record = self.providers.lookup(role, identity_key)
        if record is None:
            raise NotFound(f"{role.value.capitalize()} not found")
        return record

    def change_password(
        self, role: PrincipalRole, identity_key: str, old_password: str, new_password: str
    ) -> None:
        """Replace the caller's own password after re-checking the old one."""
        self.verify_credentials(role, identity_key, old_password)
        validate_password(new_password)
        if new_password == old_password:
            raise ValidationError("New password must be different from the current password")

        self.providers.for_role(role).set_password_hash(identity_key, self.hasher.hash(new_password))
        logger.info("%s %s changed password", role.value, identity_key)

    def reset_password(self, role: PrincipalRole, identity_key: str) -> str:
        """Generate and store a random password; the plain value is returned once."""
        provider = self.providers.for_role(role)
        new_password = self.hasher.generate()
        provider.set_password_hash(identity_key, self.hasher.hash(new_password))
        # Any session opened with the old password is no longer valid
        self.sessions.delete(role, provider.normalize(identity_key))
        logger.info("Password reset for %s %s", role.value, identity_key)
        return new_password
