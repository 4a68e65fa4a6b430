import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


def env_flag(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Editing session (JWT in cookies)
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY") or SECRET_KEY
    JWT_TOKEN_LOCATION = ["cookies", "headers"]
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        seconds=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES", "1800"))
    )
    JWT_COOKIE_SECURE = env_flag("JWT_COOKIE_SECURE", False)
    JWT_COOKIE_SAMESITE = "Lax"
    JWT_COOKIE_CSRF_PROTECT = True
    JWT_CSRF_CHECK_FORM = True

    # Page edit restore
    RESTORE_SALT = os.getenv("RESTORE_SALT") or SECRET_KEY
    RESTORE_STAGING_DIR = os.getenv("RESTORE_STAGING_DIR")
    RESTORE_PING_SECONDS = int(os.getenv("RESTORE_PING_SECONDS", "300"))
    RESTORE_VALIDATE_USER_COOKIE = env_flag("RESTORE_VALIDATE_USER_COOKIE", True)
    RESTORE_VALIDATE_POST_COOKIE = env_flag("RESTORE_VALIDATE_POST_COOKIE", True)
    RESTORE_LOG_ENABLED = env_flag("RESTORE_LOG_ENABLED", False)
    RESTORE_LOG_PATH = os.getenv("RESTORE_LOG_PATH")
    RESTORE_DEBUG = env_flag("RESTORE_DEBUG", False)


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URI", "sqlite:///pagerestore-dev.db")
    RESTORE_LOG_ENABLED = env_flag("RESTORE_LOG_ENABLED", True)


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "testing-jwt-secret-key-0123456789abcdef"
    JWT_COOKIE_CSRF_PROTECT = False


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI")
    JWT_COOKIE_SECURE = env_flag("JWT_COOKIE_SECURE", True)


config_by_name = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig
}
