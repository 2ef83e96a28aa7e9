"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Placeholder secrets that must never reach production.
PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset(
    {
        "CHANGE_ME",
        "CHANGE_ME_ACCESS",
        "CHANGE_ME_REFRESH",
        "CHANGE_ME_EMAIL",
        "CHANGE_ME_RESET",
    }
)

# Loads .env in development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse a positive integer from an environment variable.

    Falls back to ``default`` when the variable is unset, blank, or not a
    positive integer.
    """
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Not used for tokens; every token purpose has its own key.
    JWT_ACCESS_SECRET, JWT_REFRESH_SECRET, JWT_EMAIL_SECRET, JWT_PASSWORD_RESET_SECRET: str
        Signing keys, one per token purpose.
    ACCESS_TOKEN_TTL_MINUTES, REFRESH_TOKEN_TTL_DAYS: int
        Lifetimes of the session token pair.
    EMAIL_VERIFICATION_TTL_HOURS, PASSWORD_RESET_TTL_HOURS: int
        Lifetimes of the single-purpose email tokens.
    SKIP_EMAIL_VERIFICATION: bool
        When ``True`` registration marks accounts verified and logs them in.
    ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE: str
        Cookie names carrying the token pair.
    COOKIE_SECURE: bool
        Adds the ``Secure`` flag to auth cookies.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    REDIS_URL: str | None
        Optional Redis used for rate-limit counters and health reporting.
    AUTH_RATE_LIMIT: str
        Flask-Limiter expression applied to authentication endpoints.
    SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASSWORD, SMTP_SECURITY, MAIL_FROM:
        Outbound mail settings. ``SMTP_SECURITY`` is ``starttls``, ``ssl`` or
        ``none``.
    MAILDEV_HOST, MAILDEV_PORT:
        Local mail catcher used when ``SMTP_HOST`` is unset. Only development
        sets a host; elsewhere an unset ``SMTP_HOST`` means links are only
        logged (without the token).
    FRONTEND_BASE_URL: str
        Base URL used to build verification and reset links.
    PASSWORD_HASH_METHOD: str
        ``werkzeug.security`` hashing method.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    USE_PROXYFIX, PROXY_HOPS:
        Trust ``X-Forwarded-*`` headers from this many proxies.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "CHANGE_ME_ACCESS")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "CHANGE_ME_REFRESH")
    JWT_EMAIL_SECRET = os.getenv("JWT_EMAIL_SECRET", "CHANGE_ME_EMAIL")
    JWT_PASSWORD_RESET_SECRET = os.getenv("JWT_PASSWORD_RESET_SECRET", "CHANGE_ME_RESET")

    # Token lifetimes
    ACCESS_TOKEN_TTL_MINUTES = env_int("ACCESS_TOKEN_TTL_MINUTES", 15)
    REFRESH_TOKEN_TTL_DAYS = env_int("REFRESH_TOKEN_TTL_DAYS", 7)
    EMAIL_VERIFICATION_TTL_HOURS = env_int("EMAIL_VERIFICATION_TTL_HOURS", 24)
    PASSWORD_RESET_TTL_HOURS = env_int("PASSWORD_RESET_TTL_HOURS", 1)
    SKIP_EMAIL_VERIFICATION = env_bool("SKIP_EMAIL_VERIFICATION", False)

    # Token transport
    ACCESS_TOKEN_COOKIE = os.getenv("ACCESS_TOKEN_COOKIE", "access_token")
    REFRESH_TOKEN_COOKIE = os.getenv("REFRESH_TOKEN_COOKIE", "refresh_token")
    COOKIE_SECURE = env_bool("COOKIE_SECURE", False)
    COOKIE_SAMESITE = "Lax"

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Redis & rate limiting
    REDIS_URL = os.getenv("REDIS_URL") or None
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI") or REDIS_URL or "memory://"
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "5 per minute")

    # Outbound mail
    SMTP_HOST = os.getenv("SMTP_HOST") or None
    SMTP_PORT = env_int("SMTP_PORT", 587)
    SMTP_USER = os.getenv("SMTP_USER") or None
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD") or None
    SMTP_SECURITY = os.getenv("SMTP_SECURITY", "starttls").strip().lower()
    MAIL_FROM = os.getenv("MAIL_FROM", "Auth Boilerplate <noreply@example.com>")
    FRONTEND_BASE_URL = os.getenv("FRONTEND_BASE_URL", "http://localhost:4205")
    MAILDEV_HOST: str | None = None
    MAILDEV_PORT = env_int("MAILDEV_PORT", 1025)

    # Credential hashing
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:4205")

    # Reverse proxy
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXY_HOPS = env_int("PROXY_HOPS", 1)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes
    MAILDEV_HOST = os.getenv("MAILDEV_HOST", "localhost")


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses fixed, distinct signing secrets and disables rate limiting.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = True

    JWT_ACCESS_SECRET = "test_access_secret"
    JWT_REFRESH_SECRET = "test_refresh_secret"
    JWT_EMAIL_SECRET = "test_email_secret"
    JWT_PASSWORD_RESET_SECRET = "test_password_reset_secret"

    SKIP_EMAIL_VERIFICATION = False
    REDIS_URL = None
    RATELIMIT_STORAGE_URI = "memory://"
    RATELIMIT_ENABLED = False
    SMTP_HOST = None
    # Cheap hashing keeps the suite fast
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled, forces secure cross-site cookies and
    is checked by :func:`validate_config` at startup.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    COOKIE_SECURE = True
    COOKIE_SAMESITE = "None"


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: Mapping[str, object]) -> None:
    """Refuse unsafe signing configuration outside development and testing.

    :param config: Loaded Flask config mapping.
    :raises RuntimeError: When a token secret is missing, still a placeholder,
        or shared between two purposes in a non-debug, non-testing app.
    """
    if config.get("DEBUG") or config.get("TESTING"):
        return

    keys = (
        "JWT_ACCESS_SECRET",
        "JWT_REFRESH_SECRET",
        "JWT_EMAIL_SECRET",
        "JWT_PASSWORD_RESET_SECRET",
    )
    values = [str(config.get(key) or "") for key in keys]
    for key, value in zip(keys, values):
        if not value or value in PLACEHOLDER_SECRETS:
            raise RuntimeError(f"{key} must be set to a real secret in production.")
    if len(set(values)) != len(values):
        raise RuntimeError("Each token purpose requires a distinct signing secret.")
