"""
Environment-aware configuration.

Values are read from the environment (and .env, if present) when a config
object is built, so create_app() builds exactly one and passes its values
down to every component. Every option has a default, which lets the service
start locally with no configuration at all.
"""
import os

from dotenv import load_dotenv
from sqlalchemy.engine import URL


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_bool(key: str, default: bool = False) -> bool:
    return os.getenv(key, str(default)).lower() in ("1", "true", "yes")


class BaseConfig:
    DEBUG = False
    TESTING = False
    DEFAULT_LOG_LEVEL = "INFO"

    def __init__(self, **overrides):
        load_dotenv()  # Read .env if present

        self.APP_ENV = os.getenv("APP_ENV", "dev")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", self.DEFAULT_LOG_LEVEL).upper()
        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = _env_int("PORT", 3000)
        self.SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
        # CORS: '*' by default, otherwise a comma-separated list of origins
        self.CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
        self.TRUST_PROXY = _env_bool("TRUST_PROXY")

        # Database
        self.DB_DRIVER = os.getenv("DB_DRIVER", "mysql+pymysql")
        self.DB_HOST = os.getenv("DB_HOST", "localhost")
        self.DB_PORT = _env_int("DB_PORT", 3306)
        self.DB_USER = os.getenv("DB_USER", "testuser")
        self.DB_PASSWORD = os.getenv("DB_PASSWORD", "testpassword")
        self.DB_NAME = os.getenv("DB_NAME", "testdb")
        self.DATABASE_URL = os.getenv("DATABASE_URL")
        self.SQLALCHEMY_ECHO = _env_bool("SQLALCHEMY_ECHO")

        # Tokens
        self.JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_ISSUER = os.getenv("JWT_ISSUER", "file-vault-api")
        self.ACCESS_TOKEN_EXPIRES_SECONDS = _env_int("ACCESS_TOKEN_EXPIRES_SECONDS", 600)
        self.REFRESH_TOKEN_EXPIRES_DAYS = _env_int("REFRESH_TOKEN_EXPIRES_DAYS", 7)
        self.MAX_DEVICES_PER_USER = _env_int("MAX_DEVICES_PER_USER", 5)

        # Password hashing (argon2-cffi defaults)
        self.ARGON2_TIME_COST = _env_int("ARGON2_TIME_COST", 3)
        self.ARGON2_MEMORY_COST = _env_int("ARGON2_MEMORY_COST", 65536)
        self.ARGON2_PARALLELISM = _env_int("ARGON2_PARALLELISM", 4)

        # Uploads
        self.UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(os.getcwd(), "uploads"))
        self.MAX_UPLOAD_BYTES = _env_int("MAX_UPLOAD_BYTES", 50 * 1024 * 1024)

        for key, value in overrides.items():
            setattr(self, key, value)

        if not self.DATABASE_URL:
            self.DATABASE_URL = self.default_database_url()
        # Flask rejects larger request bodies with 413
        self.MAX_CONTENT_LENGTH = self.MAX_UPLOAD_BYTES

    def default_database_url(self) -> str:
        return URL.create(
            self.DB_DRIVER,
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        ).render_as_string(hide_password=False)


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    DEFAULT_LOG_LEVEL = "DEBUG"

    def default_database_url(self) -> str:
        # Zero-config local startup: SQLite file in the working directory
        return "sqlite:///file-vault.db"


class ProductionConfig(BaseConfig):
    DEBUG = False


class TestingConfig(BaseConfig):
    TESTING = True
    DEFAULT_LOG_LEVEL = "WARNING"

    def default_database_url(self) -> str:
        return "sqlite://"


def get_config(name: str | None = None, **overrides) -> BaseConfig:
    """
    Build the configuration object.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/prod/test).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig(**overrides)
    if env in ["test", "testing"]:
        return TestingConfig(**overrides)
    return DevelopmentConfig(**overrides)
