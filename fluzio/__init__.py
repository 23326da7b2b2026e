"""
Fluzio Rules Service
Flask application factory
"""
import os
import logging
from flask import Flask
from flask_cors import CORS

from .extensions import db, migrate
from .config import get_config, validate_config
from .utils.logging_config import setup_logging
from .utils.errors import error_response, not_found, conflict, unavailable, internal_error
from .utils.exceptions import (
    FluzioError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DataAccessError,
)

logger = logging.getLogger(__name__)


def create_app(config_name: str = None) -> Flask:
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration environment (development, production, testing)

    Returns:
        Configured Flask application
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    validate_config(config_name)
    config = get_config(config_name)

    # Setup logging before anything else
    setup_logging(config.LOG_LEVEL)

    app = Flask(__name__)
    app.config.from_object(config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Models must be imported for migrations and create_all
    from . import models  # noqa: F401

    # Configure CORS - allow frontend origins
    cors_origins = os.getenv('CORS_ORIGINS', 'http://localhost:5173').split(',')
    CORS(app, origins=cors_origins, allow_headers=['Content-Type', 'Authorization', 'X-Admin-Id'])

    # Register blueprints
    register_blueprints(app)

    # Register CLI commands
    from .commands import init_app as init_commands
    init_commands(app)

    # Register error handlers
    register_error_handlers(app)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'service': 'fluzio-rules'}

    logger.info('Fluzio rules service started (%s)', config_name)
    return app


def register_blueprints(app: Flask) -> None:
    """Register all API blueprints."""
    from .api.levels import levels_bp
    from .api.entitlements import entitlements_bp
    from .api.redemptions import redemptions_bp

    app.register_blueprint(levels_bp)
    app.register_blueprint(entitlements_bp)
    app.register_blueprint(redemptions_bp)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""

    @app.errorhandler(NotFoundError)
    def handle_not_found(error):
        return not_found(error.message, error.code)

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        return error_response(error.message, error.code, 400, log_error=False)

    @app.errorhandler(ConflictError)
    def handle_conflict(error):
        return conflict(error.message, error.code)

    @app.errorhandler(DataAccessError)
    def handle_data_access_error(error):
        return unavailable(
            'Storage temporarily unavailable, please try again',
            details={'error': str(error.original_error) if error.original_error else error.message},
        )

    @app.errorhandler(FluzioError)
    def handle_fluzio_error(error):
        return error_response(error.message, error.code, 500)

    @app.errorhandler(404)
    def handle_404(error):
        return not_found('Resource not found')

    @app.errorhandler(500)
    def handle_500(error):
        return internal_error()
