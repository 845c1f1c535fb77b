import os
import secrets
import tempfile
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _env(name, default=None):
    value = os.getenv(name)
    return default if value is None or value == "" else value


def env_int(name, default):
    try:
        return int(_env(name, default))
    except (TypeError, ValueError):
        return default


def env_bool(name, default):
    return str(_env(name, default)).strip().lower() in ("true", "1", "yes", "on")


def env_set(name, default):
    """Comma separated value as a set of lower-cased items."""
    return {item.strip().lower() for item in _env(name, default).split(",") if item.strip()}


def database_uri(*names, default="sqlite:///scisubmit.db"):
    """First non-empty of ``names``; Heroku-style ``postgres://`` is normalised."""
    uri = next((os.getenv(n) for n in names if os.getenv(n)), default)
    if uri.startswith("postgres://"):
        uri = "postgresql://" + uri[len("postgres://"):]
    return uri


_TEST_TMP = os.path.join(tempfile.gettempdir(), "scisubmit_test")


class Config:
    ENVIRONMENT = _env("SCISUBMIT_ENV", "production")
    DEBUG = env_bool("DEBUG", False)
    TESTING = False

    # Secrets fall back to per-process random values; set them in production.
    SECRET_KEY = _env("SECRET_KEY") or secrets.token_urlsafe(32)
    JWT_SECRET_KEY = _env("JWT_SECRET_KEY") or secrets.token_urlsafe(32)

    SQLALCHEMY_DATABASE_URI = database_uri("DATABASE_URI")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True, "pool_recycle": 300}

    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=env_int("JWT_ACCESS_TOKEN_MINUTES", 60))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(minutes=env_int("JWT_REFRESH_TOKEN_MINUTES", 7 * 24 * 60))

    # e-mail verification and password reset links
    VERIFICATION_TOKEN_HOURS = env_int("VERIFICATION_TOKEN_HOURS", 48)
    RESET_TOKEN_MINUTES = env_int("RESET_TOKEN_MINUTES", 60)
    FRONTEND_BASE_URL = _env("FRONTEND_BASE_URL", "http://localhost:5173")

    # first admin, created on startup only when ADMIN_PASSWORD is set
    ADMIN_EMAIL = _env("ADMIN_EMAIL", "admin@example.com")
    ADMIN_PASSWORD = _env("ADMIN_PASSWORD")
    ADMIN_FIRST_NAME = _env("ADMIN_FIRST_NAME", "Conference")
    ADMIN_LAST_NAME = _env("ADMIN_LAST_NAME", "Admin")

    # paper files
    UPLOAD_FOLDER = _env("UPLOAD_FOLDER", os.path.join(os.getcwd(), "uploads"))
    ALLOWED_EXTENSIONS = env_set("ALLOWED_EXTENSIONS", "pdf,doc,docx")
    MAX_CONTENT_LENGTH = env_int("MAX_CONTENT_LENGTH_MB", 50) * 1024 * 1024

    # Flask app log file
    LOG_LEVEL = _env("LOG_LEVEL", "INFO")
    LOG_FILE = _env("LOG_FILE", "/tmp/scisubmit/app.log")
    LOG_MAX_BYTES = env_int("LOG_MAX_BYTES", 10 * 1024 * 1024)
    LOG_BACKUP_COUNT = env_int("LOG_BACKUP_COUNT", 5)
    # per-category files, see utils.logging_utils
    LOGGING_BASE_DIR = _env("LOGGING_BASE_DIR", "/tmp/scisubmit/logs")
    LOGGING_ROTATION_WHEN = _env("LOGGING_ROTATION_WHEN", "midnight")
    LOGGING_ROTATION_BACKUP_COUNT = env_int("LOGGING_ROTATION_BACKUP_COUNT", 14)
    LOGGING_DEFAULT_LEVEL = _env("LOGGING_DEFAULT_LEVEL", "INFO")
    LOGGING_CONSOLE_ENABLED = env_bool("LOGGING_CONSOLE_ENABLED", True)
    LOGGING_JSON_FORMAT = env_bool("LOGGING_JSON_FORMAT", False)

    # outgoing mail gateway; MAIL_FLAG=false only logs the messages
    MAIL_FLAG = env_bool("MAIL_FLAG", True)
    MAIL_API_URL = _env("MAIL_API_URL", "")
    MAIL_API_TOKEN = _env("MAIL_API_TOKEN", "")
    MAIL_TIMEOUT_SECONDS = env_int("MAIL_TIMEOUT_SECONDS", 10)

    APP_NAME = _env("APP_NAME", "SciSubmit")
    APP_VERSION = _env("APP_VERSION", "1.0.0")
    API_PREFIX = _env("API_PREFIX", "/api/v1")
    CORS_ORIGINS = _env("CORS_ORIGINS", "*").split(",")

    @staticmethod
    def init_app(app):
        os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)


class DevelopmentConfig(Config):
    ENVIRONMENT = "development"
    DEBUG = True

    SQLALCHEMY_DATABASE_URI = database_uri("DEVELOPMENT_DATABASE_URI", default="sqlite:///dev.db")

    LOG_LEVEL = _env("DEV_LOG_LEVEL", "DEBUG")
    LOGGING_DEFAULT_LEVEL = LOG_LEVEL

    MAIL_FLAG = env_bool("DEV_MAIL_FLAG", False)
    ADMIN_PASSWORD = _env("DEV_ADMIN_PASSWORD", "DevAdmin123")


class TestingConfig(Config):
    ENVIRONMENT = "testing"
    TESTING = True

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}

    SECRET_KEY = "scisubmit-test-secret"
    JWT_SECRET_KEY = "scisubmit-test-jwt-secret-long-enough"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(minutes=10)

    ADMIN_PASSWORD = None
    MAIL_FLAG = False

    UPLOAD_FOLDER = os.path.join(_TEST_TMP, "uploads")
    LOG_FILE = os.path.join(_TEST_TMP, "app.log")
    LOGGING_BASE_DIR = os.path.join(_TEST_TMP, "logs")
    LOGGING_CONSOLE_ENABLED = False
    LOG_LEVEL = "WARNING"


class ProductionConfig(Config):
    ENVIRONMENT = "production"
    DEBUG = False

    SQLALCHEMY_DATABASE_URI = database_uri("PRODUCTION_DATABASE_URI", "DATABASE_URI")
    LOGGING_JSON_FORMAT = env_bool("LOGGING_JSON_FORMAT", True)

    @staticmethod
    def init_app(app):
        Config.init_app(app)
        if not os.getenv("JWT_SECRET_KEY"):
            app.logger.warning("JWT_SECRET_KEY not set; tokens will not survive a restart")


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
