import logging
import os
from logging.handlers import RotatingFileHandler

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_compress import Compress
from flask_cors import CORS
from marshmallow import ValidationError as SchemaValidationError
from sqlalchemy import inspect
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from scisubmit.security_utils import log_structured
from scisubmit.utils.logging_utils import clear_log_context, get_logger, init_logger

load_dotenv()

from .config import config, Config  # noqa: E402
from .errors import WorkflowError  # noqa: E402
from .extensions import jwt, db, migrate, ma  # noqa: E402
from .security import init_jwt_callbacks  # noqa: E402
from .models import *  # noqa: E402,F401,F403
from .models.User import User  # noqa: E402
from .models.enumerations import Role, UserStatus  # noqa: E402
from .utils.clock import install_clock  # noqa: E402

from .commands.setup_commands import setup_command, create_admin_command  # noqa: E402
from .commands.seed_commands import seed_command  # noqa: E402
from .commands.scheduler_commands import refresh_conference_status_command  # noqa: E402
from .routes import register_blueprints  # noqa: E402


def configure_logging(app):
    """Size-rotated LOG_FILE on ``app.logger`` plus the categorized ``scisubmit.*`` loggers."""
    level_name = str(app.config.get('LOG_LEVEL', 'INFO')).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    if not app.logger.handlers:
        path = app.config['LOG_FILE']
        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=app.config['LOG_MAX_BYTES'],
            backupCount=app.config['LOG_BACKUP_COUNT'],
            delay=True,
        )
        handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s in %(module)s: %(message)s"))
        handler.setLevel(level)
        app.logger.addHandler(handler)
    app.logger.setLevel(level)

    init_logger(app)
    app.logger.info("Logging ready (level=%s, categories in %s)", level_name, app.config.get('LOGGING_BASE_DIR'))


def _bootstrap_admin(app):
    """Create the ADMIN_* account once tables exist; no-op without ADMIN_PASSWORD."""
    password = app.config.get('ADMIN_PASSWORD')
    if not password:
        app.logger.info("ADMIN_PASSWORD not set; admin bootstrap disabled")
        return
    with app.app_context():
        try:
            if 'users' not in set(inspect(db.engine).get_table_names()):
                app.logger.info("Bootstrap skip: users table missing (run `flask setup` or migrations)")
                return
            email = (app.config.get('ADMIN_EMAIL') or '').strip().lower()
            if User.query.filter_by(email=email).first():
                app.logger.info("Admin %s already present; bootstrap skipped", email)
                return
            admin = User(
                email=email,
                first_name=app.config.get('ADMIN_FIRST_NAME', 'Conference'),
                last_name=app.config.get('ADMIN_LAST_NAME', 'Admin'),
                role=Role.ADMIN,
                status=UserStatus.ACTIVE,
                is_verified=True,
            )
            admin.set_password(password)
            db.session.add(admin)
            db.session.commit()
            app.logger.info("Admin user bootstrapped: %s", email)
        except Exception as e:
            db.session.rollback()
            app.logger.exception("Admin bootstrap failed: %s", e)


def register_error_handlers(app):
    error_logger = get_logger("error")

    @app.errorhandler(WorkflowError)
    def _workflow_error(exc):
        db.session.rollback()
        error_logger.warning("%s %s -> %s %s", request.method, request.path, exc.code, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(SchemaValidationError)
    def _schema_error(exc):
        return jsonify({
            "error": "validation_error",
            "message": "Invalid request data",
            "details": exc.messages,
        }), 400

    @app.errorhandler(404)
    def _not_found(e):
        return jsonify({"error": "not_found", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def _method_not_allowed(e):
        return jsonify({"error": "method_not_allowed", "message": "Method not allowed"}), 405

    @app.errorhandler(413)
    def _too_large(e):
        return jsonify({"error": "file_too_large", "message": "The uploaded file is too large"}), 413

    @app.errorhandler(500)
    def _server_error(e):
        db.session.rollback()
        error_logger.exception("Unhandled server error on %s %s", request.method, request.path)
        return jsonify({"error": "internal_server_error", "message": "Unexpected error"}), 500

    @app.errorhandler(Exception)
    def _unhandled(e):
        if isinstance(e, HTTPException):
            return jsonify({"error": e.name.lower().replace(" ", "_"), "message": e.description}), e.code
        db.session.rollback()
        error_logger.exception("Unhandled exception on %s %s", request.method, request.path)
        return jsonify({"error": "internal_server_error", "message": "Unexpected error"}), 500


def create_app(config_name=None, config_overrides=None):
    config_class = config.get(config_name or os.getenv("SCISUBMIT_CONFIG", "default"), Config)

    app = Flask(__name__)
    app.config.from_object(config_class)
    if config_overrides:
        app.config.update(config_overrides)

    config_class.init_app(app)

    configure_logging(app)
    get_logger("app").info("Application startup with config %s", config_class.__name__)

    # PROXY_FIX_NUM = number of trusted reverse proxies in front of the app
    try:
        num_proxies = int(os.environ.get('PROXY_FIX_NUM', '0'))
    except ValueError:
        num_proxies = 0
    if num_proxies > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=num_proxies, x_proto=num_proxies, x_host=num_proxies)
        app.logger.info("ProxyFix enabled for %d proxies", num_proxies)

    db.init_app(app)
    migrate.init_app(app, db)
    ma.init_app(app)
    jwt.init_app(app)
    init_jwt_callbacks(jwt)
    install_clock(app)

    app.cli.add_command(setup_command)
    app.cli.add_command(create_admin_command)
    app.cli.add_command(seed_command)
    app.cli.add_command(refresh_conference_status_command)

    @app.before_request
    def _log_request():
        log_structured("request", method=request.method, path=request.path, ip=request.remote_addr,
                       args=dict(request.args))

    @app.after_request
    def _security_headers(resp):
        resp.headers.setdefault('X-Content-Type-Options', 'nosniff')
        resp.headers.setdefault('X-Frame-Options', 'DENY')
        resp.headers.setdefault('Referrer-Policy', 'no-referrer')
        return resp

    @app.teardown_request
    def _reset_log_context(exc):
        clear_log_context()

    register_error_handlers(app)

    Compress(app)
    CORS(app, origins=app.config.get('CORS_ORIGINS', '*'))
    app.logger.info("Middleware loaded: Compress, CORS")

    _bootstrap_admin(app)

    register_blueprints(app)
    app.logger.info("Blueprints registered.")

    @app.route('/api/v1/health', methods=['GET'])
    def health():
        return jsonify({"status": "ok", "app": app.config.get('APP_NAME'), "version": app.config.get('APP_VERSION')})

    app.logger.info("Flask app created successfully.")
    return app
