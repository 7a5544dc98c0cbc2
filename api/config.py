"""
Environment-aware configuration.
Token secrets and lifetimes, database URL, CORS and logging come from the
environment (.env is read if present). Each environment gets its own class.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _seconds(name: str, default: int) -> timedelta:
    return timedelta(seconds=int(os.getenv(name, str(default))))


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///blog.db")
    SQL_ECHO = False
    # Access and refresh tokens are signed with distinct keys
    ACCESS_SECRET = os.getenv("ACCESS_SECRET", "")
    REFRESH_SECRET = os.getenv("REFRESH_SECRET", "")
    ACCESS_TTL = _seconds("ACCESS_TTL", 3600)
    REFRESH_TTL = _seconds("REFRESH_TTL", 7 * 24 * 3600)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "blog-api")
    # 0 disables the cap
    MAX_ACTIVE_REFRESH_TOKENS = int(os.getenv("MAX_ACTIVE_REFRESH_TOKENS", "10"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")
    ACCESS_SECRET = BaseConfig.ACCESS_SECRET or "dev-access-secret-change-me"
    REFRESH_SECRET = BaseConfig.REFRESH_SECRET or "dev-refresh-secret-change-me"


class TestingConfig(BaseConfig):
    TESTING = True
    APP_ENV = "test"
    DATABASE_URL = "sqlite://"
    ACCESS_SECRET = "test-access-secret-0123456789abcdef"
    REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"
    ACCESS_TTL = timedelta(minutes=15)
    REFRESH_TTL = timedelta(days=1)
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    if name:
        name = name.lower()
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig


def validate_config(config) -> None:
    """Refuse to start without two distinct token secrets."""
    access = config.get("ACCESS_SECRET")
    refresh = config.get("REFRESH_SECRET")
    if not access or not refresh:
        raise RuntimeError("ACCESS_SECRET and REFRESH_SECRET must be set")
    if access == refresh:
        raise RuntimeError("REFRESH_SECRET must differ from ACCESS_SECRET")
    for key in ("ACCESS_TTL", "REFRESH_TTL"):
        if config[key].total_seconds() <= 0:
            raise RuntimeError(f"{key} must be a positive number of seconds")
