import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./slotbook.db")

CORS_ORIGINS = _get_list(os.getenv("CORS_ORIGINS"), ["http://localhost:3000"])

ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")

SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "change-me")
SESSION_ALGORITHM = os.getenv("SESSION_ALGORITHM", "HS256")
SESSION_EXPIRES_MINUTES = int(os.getenv("SESSION_EXPIRES_MINUTES", "720"))
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session")
SESSION_COOKIE_SECURE = _get_bool(os.getenv("SESSION_COOKIE_SECURE"), default=False)

def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production":
        if SESSION_SECRET_KEY == "change-me":
            raise RuntimeError("SESSION_SECRET_KEY must be set in production.")
        if not ADMIN_PASSWORD:
            raise RuntimeError("ADMIN_PASSWORD must be set in production.")
