"""Testing configuration."""
from .base import Config


class TestingConfig(Config):
    """Testing configuration class."""

    DEBUG = False
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length'

    # Database (in-memory SQLite for testing)
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # The test suite swaps in an in-memory client
    REDIS_URL = 'redis://localhost:6379/15'

    # Cheap hashing keeps the suite fast
    PASSWORD_HASH_METHOD = 'pbkdf2:sha256:1000'

    # Test client talks plain HTTP
    JWT_COOKIE_SECURE = False

    # Rate Limiting (disabled for testing)
    RATELIMIT_ENABLED = False

    # Logging
    LOG_LEVEL = 'WARNING'
