"""Signed session tokens.

Tokens are JWTs minted through Flask-JWT-Extended so the same secret and
algorithm are used for issuing here and for verifying in ``jwt_required``.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import jwt as pyjwt
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from student_attendance.exceptions import ConfigurationError, InvalidCredentials
from student_attendance.models.principal import PrincipalRole
from student_attendance.settings import Settings


@dataclass(frozen=True)
class Session:
    """A freshly issued token and its validity window."""
    role: PrincipalRole
    identity_key: str
    token: str
    issued_at: datetime
    expires_at: datetime

    def to_dict(self) -> dict:
        return {
            'token': self.token,
            'user_type': self.role.value,
            'user_id': self.identity_key,
            'expires_at': self.expires_at.isoformat(),
        }


@dataclass(frozen=True)
class TokenClaims:
    role: PrincipalRole
    identity_key: str
    expires_at: datetime


def _from_timestamp(value: int) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


class TokenIssuer:
    """Creates and validates tokens carrying {identity, role, expiry}."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _require_secret(self) -> None:
        if not self.settings.jwt_secret_key:
            raise ConfigurationError("JWT signing key is not configured")

    def issue(self, role: PrincipalRole, identity_key: str) -> Session:
        """Sign a token for the principal, valid for the session TTL."""
        self._require_secret()
        token = create_access_token(
            identity=identity_key,
            additional_claims={'role': role.value},
            expires_delta=self.settings.session_ttl,
        )
        claims = decode_token(token, allow_expired=True)
        return Session(
            role=role,
            identity_key=identity_key,
            token=token,
            issued_at=_from_timestamp(claims['iat']),
            expires_at=_from_timestamp(claims['exp']),
        )

    @staticmethod
    def same_session(cached_token: Optional[str], claims: Mapping[str, Any]) -> bool:
        """True when ``claims`` were decoded from ``cached_token``."""
        if not cached_token:
            return False
        try:
            cached_claims = decode_token(cached_token, allow_expired=True)
        except (pyjwt.PyJWTError, JWTExtendedException):
            return False
        return cached_claims.get('jti') == claims.get('jti')

    def decode(self, token: str) -> TokenClaims:
        """Verify signature and expiry; raises InvalidCredentials otherwise."""
        self._require_secret()
        try:
            claims = decode_token(token)
            role = PrincipalRole.parse(claims.get('role'))
        except (pyjwt.PyJWTError, JWTExtendedException, ValueError) as e:
            raise InvalidCredentials("Invalid or expired token") from e
        return TokenClaims(
            role=role,
            identity_key=claims['sub'],
            expires_at=_from_timestamp(claims['exp']),
        )
