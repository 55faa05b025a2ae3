import os
from datetime import timedelta


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    ENV = os.getenv("APP_ENV", "development")

    # access and refresh tokens are signed with different keys
    ACCESS_TOKEN_SECRET = os.environ.get("ACCESS_TOKEN_SECRET", "dev-access-secret-change-me")
    REFRESH_TOKEN_SECRET = os.environ.get("REFRESH_TOKEN_SECRET", "dev-refresh-secret-change-me")
    ACCESS_TOKEN_EXPIRES = timedelta(minutes=15)
    REFRESH_TOKEN_EXPIRES = timedelta(days=7)

    REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
    STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY")
    CLIENT_URL = os.environ.get("CLIENT_URL", "http://localhost:5173")
    CURRENCY = "usd"

    # Injected collaborators; None means "build the real client from the URL/key above"
    CACHE_CLIENT = None
    PAYMENT_GATEWAY = None

    COOKIE_SECURE = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    @staticmethod
    def init_app(app):
        if not os.getenv("DATABASE_URL"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config.setdefault(
                "SQLALCHEMY_DATABASE_URI",
                f"sqlite:///{os.path.join(app.instance_path, 'app.db')}",
            )
        else:
            app.config.setdefault("SQLALCHEMY_DATABASE_URI", os.getenv("DATABASE_URL"))


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")


class ProductionConfig(Config):
    ENV = "production"
    COOKIE_SECURE = True


class TestingConfig(Config):
    ENV = "testing"
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    ACCESS_TOKEN_SECRET = "test-access-secret-0123456789abcdef"
    REFRESH_TOKEN_SECRET = "test-refresh-secret-0123456789abcdef"
    CLIENT_URL = "http://client.test"
    LOG_LEVEL = "WARNING"


CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(name=None):
    return CONFIGS.get((name or os.getenv("APP_ENV") or "development").lower(), DevelopmentConfig)
