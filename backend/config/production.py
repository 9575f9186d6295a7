"""Production configuration."""
import os

from .base import Config


class ProductionConfig(Config):
    """Production configuration class."""

    DEBUG = False
    TESTING = False

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_size': int(os.getenv('DB_POOL_SIZE', '10')),
        # Store deadline: seconds to wait for a pooled connection
        'pool_timeout': int(os.getenv('DB_POOL_TIMEOUT', '10')),
        # PostgreSQL statement deadline in milliseconds
        'connect_args': {
            'options': f"-c statement_timeout={os.getenv('DB_STATEMENT_TIMEOUT_MS', '5000')}",
        },
    }

    # Rate Limiting shares the session Redis
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', Config.REDIS_URL)

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', '/app/logs/app.log')
