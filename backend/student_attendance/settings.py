"""Immutable runtime settings built once by the application factory."""
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Settings:
    """Values the services need, copied out of the Flask config at startup."""

    jwt_secret_key: Optional[str]
    session_ttl: timedelta = timedelta(hours=1)
    password_hash_method: str = 'scrypt'
    default_page_size: int = 10
    max_page_size: int = 100
    request_date_format: str = '%Y-%m-%d'
    enforce_teacher_class_ownership: bool = False

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> 'Settings':
        """Build settings from a Flask config mapping."""
        return cls(
            jwt_secret_key=config.get('JWT_SECRET_KEY') or None,
            session_ttl=config.get('SESSION_TTL', timedelta(hours=1)),
            password_hash_method=config.get('PASSWORD_HASH_METHOD', 'scrypt'),
            default_page_size=int(config.get('DEFAULT_PAGE_SIZE', 10)),
            max_page_size=int(config.get('MAX_PAGE_SIZE', 100)),
            request_date_format=config.get('REQUEST_DATE_FORMAT', '%Y-%m-%d'),
            enforce_teacher_class_ownership=bool(
                config.get('ENFORCE_TEACHER_CLASS_OWNERSHIP', False)
            ),
        )
