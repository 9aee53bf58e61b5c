import os
from datetime import datetime

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
SQL_ECHO = _get_bool(os.getenv("SQL_ECHO"), default=False)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./scheduling.db")

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:5173"])

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

# Clinic-wide fallback used for doctors without their own working hours row.
DEFAULT_WORK_START = os.getenv("DEFAULT_WORK_START", "09:00")
DEFAULT_WORK_END = os.getenv("DEFAULT_WORK_END", "17:00")
DEFAULT_BREAK_START = os.getenv("DEFAULT_BREAK_START", "12:00")
DEFAULT_BREAK_END = os.getenv("DEFAULT_BREAK_END", "13:00")

SLOT_DURATION_MINUTES = int(os.getenv("SLOT_DURATION_MINUTES", "30"))
UPCOMING_LIMIT = int(os.getenv("UPCOMING_LIMIT", "20"))
STATS_TREND_MONTHS = int(os.getenv("STATS_TREND_MONTHS", "6"))


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")

    try:
        start, end, break_start, break_end = (
            datetime.strptime(value, "%H:%M").time()
            for value in (DEFAULT_WORK_START, DEFAULT_WORK_END, DEFAULT_BREAK_START, DEFAULT_BREAK_END)
        )
    except ValueError as exc:
        raise RuntimeError("Default working hours must use HH:MM.") from exc

    if not start < end or not break_start <= break_end:
        raise RuntimeError("Default working hours are inconsistent.")

    if SLOT_DURATION_MINUTES <= 0:
        raise RuntimeError("SLOT_DURATION_MINUTES must be positive.")
