import atexit
from flask import Flask, jsonify, render_template
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from core.config import Config
from core.database import Storage
from core.exceptions import AppException, ConfigurationException
from core.logger import log
from web.extensions import db, login_manager, limiter, migrate
from web.middlewares.auth import load_user

# Импорт всех моделей обязателен до db.create_all()
from models.admin import Administrator, AdminRole
from models.admin_session import AdminSession
from models.audit_log import AuditLog
from models.user import User
from models.post import Post

from services.registry import AppServices


def create_app(test_config=None):
    app = Flask(__name__,
                template_folder='templates',
                static_folder='static',
                static_url_path='/static')

    app.config.from_object(Config)

    if test_config is not None:
        app.config.from_mapping(test_config)

    # No fallback secret: a forged admin_session cookie would be trivial
    if not app.config.get('SECRET_KEY'):
        raise ConfigurationException("SECRET_KEY is not set. Set SECRET_KEY (or SESSION_SECRET) in the environment.")

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    login_manager.login_view = 'admin.login'
    login_manager.user_loader(load_user)

    with app.app_context():
        storage = Storage(db, engine=db.engine)
    app.extensions['admin_services'] = AppServices(storage, app.config)
    atexit.register(storage.dispose)

    _register_error_handlers(app)

    @app.template_filter('timestamp_to_date')
    def timestamp_to_date_filter(dt):
        if not dt:
            return '—'
        return dt.strftime('%d.%m.%Y %H:%M')

    from web.routes.public import public_bp
    from web.routes.admin import admin_bp
    from web.cli import register_commands

    app.register_blueprint(public_bp)
    app.register_blueprint(admin_bp, url_prefix='/admin')
    register_commands(app)

    with app.app_context():
        db.create_all()

        _maybe_create_initial_admin(app)

    log.info("Flask application created successfully")
    return app


def _register_error_handlers(app):
    @app.errorhandler(AppException)
    def handle_app_exception(error):
        return jsonify({'success': False, 'error': error.message}), error.status_code

    @app.errorhandler(500)
    def handle_server_error(error):
        db.session.rollback()
        log.error(f"Unhandled error: {getattr(error, 'original_exception', error)}")
        return render_template('error.html'), 500


def _maybe_create_initial_admin(app):
    """Create the initial super admin if no administrators exist yet (race-safe)."""
    admin_email = app.config.get('ADMIN_EMAIL')
    admin_hash = app.config.get('ADMIN_PASSWORD_HASH')
    if not admin_email or not admin_hash:
        return
    try:
        if db.session.execute(select(Administrator.id).limit(1)).first():
            return
        admin = Administrator(
            name=app.config.get('ADMIN_NAME') or 'Administrator',
            email=admin_email.strip().lower(),
            role=AdminRole.SUPER_ADMIN,
        )
        admin.password_hash = admin_hash
        db.session.add(admin)
        db.session.commit()
        log.info(f"Initial admin created: {admin_email}")
    except IntegrityError:
        db.session.rollback()
        log.info("Initial admin already exists (concurrent creation)")
