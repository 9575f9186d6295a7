"""Redis-backed cache of the one valid token per (role, identity)."""
import logging
from datetime import timedelta
from typing import Optional

import redis

from student_attendance.exceptions import StorageError
from student_attendance.models.principal import PrincipalRole

logger = logging.getLogger(__name__)


class SessionCache:
    """Flask extension wrapping a Redis client.

    Writes are plain SETEX overwrites: two concurrent logins for the same
    principal leave whichever token was written last.
    """

    def __init__(self, app=None, client: Optional[redis.Redis] = None):
        self.client = client
        self.ttl = timedelta(hours=1)
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        # Redis.from_url does not connect until the first command
        self.client = redis.Redis.from_url(
            app.config['REDIS_URL'],
            decode_responses=True,
            socket_timeout=app.config.get('REDIS_SOCKET_TIMEOUT'),
            socket_connect_timeout=app.config.get('REDIS_SOCKET_TIMEOUT'),
        )
        self.ttl = app.config.get('SESSION_TTL', self.ttl)
        app.extensions['session_cache'] = self

    @staticmethod
    def key(role: PrincipalRole, identity_key: str) -> str:
        return f"token:{role.value}:{identity_key}"

    def store(self, role: PrincipalRole, identity_key: str, token: str) -> None:
        try:
            self.client.setex(self.key(role, identity_key), self.ttl, token)
        except redis.RedisError as e:
            logger.error("Failed to cache session for %s:%s: %s", role.value, identity_key, e)
            raise StorageError("Failed to store session") from e

    def get(self, role: PrincipalRole, identity_key: str) -> Optional[str]:
        try:
            return self.client.get(self.key(role, identity_key))
        except redis.RedisError as e:
            logger.error("Failed to read session for %s:%s: %s", role.value, identity_key, e)
            raise StorageError("Failed to read session") from e

    def delete(self, role: PrincipalRole, identity_key: str) -> None:
        """Remove the session; succeeds when nothing is cached."""
        try:
            self.client.delete(self.key(role, identity_key))
        except redis.RedisError as e:
            logger.error("Failed to delete session for %s:%s: %s", role.value, identity_key, e)
            raise StorageError("Failed to delete session") from e
