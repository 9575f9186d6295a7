"""Student Attendance Service - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)

# Models imported by the cache need db to exist first
from student_attendance.services.session_cache import SessionCache  # noqa: E402

session_cache = SessionCache()


def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
    session_cache.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Wire services
    register_services(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)
    register_session_callbacks(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'Student Attendance Service',
            'version': '1.0.0'
        })

    return app


def register_services(app: Flask) -> None:
    """Build the immutable settings and the service container."""
    from student_attendance.container import EXTENSION_KEY, build_container
    from student_attendance.settings import Settings

    settings = Settings.from_mapping(app.config)
    if not settings.jwt_secret_key:
        app.logger.warning('JWT_SECRET_KEY is not set; logins will fail')

    app.extensions[EXTENSION_KEY] = build_container(settings=settings, sessions=session_cache)


def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from student_attendance.api.auth import auth_bp
    from student_attendance.api.attendance import attendance_bp
    from student_attendance.api.absent_requests import absent_requests_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')
    app.register_blueprint(absent_requests_bp, url_prefix='/api/absent-requests')


def register_error_handlers(app: Flask) -> None:
    """Map every typed error to the JSON error envelope."""
    from sqlalchemy.exc import SQLAlchemyError
    from werkzeug.exceptions import HTTPException
    from student_attendance.exceptions import AttendanceError, StorageError
    from student_attendance.utils.helpers import handle_error

    @app.errorhandler(AttendanceError)
    def attendance_error(error):
        if error.status_code >= 500:
            app.logger.error('%s: %s', type(error).__name__, error.message, exc_info=error)
        else:
            app.logger.info('%s: %s', type(error).__name__, error.message)
        return handle_error(error, error.status_code)

    @app.errorhandler(SQLAlchemyError)
    def database_error(error):
        db.session.rollback()
        app.logger.error('Database error: %s', error, exc_info=error)
        return handle_error(StorageError(), 500)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error('Unhandled error: %s', error)
        return handle_error('Internal server error', 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e, e.code)


def register_session_callbacks(app: Flask) -> None:
    """JWT error responses and the session-cache revocation check."""
    from student_attendance.container import current_container
    from student_attendance.models.principal import PrincipalRole
    from student_attendance.utils.helpers import error_response

    @jwt.token_in_blocklist_loader
    def session_revoked(jwt_header, jwt_payload):
        # Only the token currently cached for (role, identity) is accepted
        try:
            role = PrincipalRole.parse(jwt_payload.get('role'))
        except ValueError:
            return True
        container = current_container()
        cached = container.sessions.get(role, jwt_payload['sub'])
        return not container.tokens.same_session(cached, jwt_payload)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return error_response('Token has expired', 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return error_response('Invalid token', 401)

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return error_response('Authorization token required', 401)

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return error_response('Session has ended, please log in again', 401)


def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        app.logger.info('Student Attendance Service startup')


def setup_database(app: Flask) -> None:
    """Register every model with the metadata."""
    with app.app_context():
        from student_attendance.models import (  # noqa: F401
            Admin, Teacher, Student, ClassRoom, AttendanceRecord, AbsentRequest
        )


def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    from student_attendance.cli import register_cli
    register_cli(app)
