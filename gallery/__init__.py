"""
Image Gallery - Application Factory

This module provides the Flask application factory pattern for creating
and configuring the application instance.
"""

import logging
import os

from flask import Flask, redirect, render_template, request, session, url_for
from flask_login import current_user
from werkzeug.exceptions import RequestEntityTooLarge

from gallery.config import Config
from gallery.extensions import db, login_manager
from gallery.sessions import DatabaseSessionInterface

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Referrer-Policy': 'same-origin',
    'Content-Security-Policy': (
        "default-src 'self'; img-src 'self' data:; style-src 'self' 'unsafe-inline'; "
        "frame-ancestors 'none'; form-action 'self'"
    ),
}


def create_app(config_class=Config):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use (default: Config)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.session_interface = DatabaseSessionInterface()

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)

    # Register blueprints
    from gallery.public import public_bp
    from gallery.auth import auth_bp
    from gallery.admin import admin_bp

    app.register_blueprint(public_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)

    @app.context_processor
    def inject_is_admin_flag():
        """Inject `is_admin` flag into templates."""
        return dict(is_admin=current_user.is_authenticated)

    @login_manager.user_loader
    def load_user(user_id):
        from gallery.models import Admin
        return db.session.get(Admin, int(user_id))

    @app.after_request
    def set_security_headers(response):
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    _register_error_handlers(app)

    from gallery.services.storage import init_image_store
    init_image_store(app)

    # Create database tables
    with app.app_context():
        os.makedirs(app.instance_path, exist_ok=True)
        _ensure_sqlite_directory(app.config['SQLALCHEMY_DATABASE_URI'])
        db.create_all()
        _ensure_default_data(app)

    return app


def _register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(e):
        return render_template('errors/404.html'), 404

    @app.errorhandler(500)
    def internal_error(e):
        original = getattr(e, 'original_exception', None)
        logger.error('Unhandled error on %s %s', request.method, request.path,
                     exc_info=original or e)
        db.session.rollback()
        return render_template('errors/500.html'), 500

    @app.errorhandler(RequestEntityTooLarge)
    def request_too_large(e):
        # The body is rejected before the form is parsed, so the upload
        # route never runs; report it the same way the validator would.
        if request.endpoint == 'admin.upload' and current_user.is_authenticated:
            from gallery.services.session import CSRF_SESSION_KEY, set_flash
            from gallery.services.validation import format_size_limit

            session.pop(CSRF_SESSION_KEY, None)
            limit = format_size_limit(app.config['MAX_UPLOAD_BYTES'])
            set_flash('error', f'The file is too large. The limit is {limit}.')
            logger.info('Rejected upload body larger than %s bytes', app.config['MAX_CONTENT_LENGTH'])
            return redirect(url_for('admin.dashboard'))
        return e


def _ensure_default_data(app):
    """Ensure the admin account from the configuration exists."""
    from gallery.services.credentials import ensure_admin

    ensure_admin(app.config.get('ADMIN_EMAIL'), app.config.get('ADMIN_PASSWORD'))


def _ensure_sqlite_directory(uri):
    """Create the folder of a file-based SQLite database."""
    prefix = 'sqlite:///'
    if uri.startswith(prefix) and ':memory:' not in uri:
        directory = os.path.dirname(uri[len(prefix):])
        if directory:
            os.makedirs(directory, exist_ok=True)
