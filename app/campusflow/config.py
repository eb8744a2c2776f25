import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str
    log_level: str

    gemini_api_key: str
    gemini_model: str
    theme_generation_timeout: int


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///campusflow.db"),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        gemini_api_key=_getenv("GEMINI_API_KEY", ""),
        gemini_model=_getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        theme_generation_timeout=_getenv_int("THEME_GENERATION_TIMEOUT", 30),
    )


def load_config() -> dict:
    s = load_settings()
    is_production = s.env in ("prod", "production")
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "LOG_LEVEL": s.log_level,
        "GEMINI_API_KEY": s.gemini_api_key,
        "GEMINI_MODEL": s.gemini_model,
        "THEME_GENERATION_TIMEOUT": s.theme_generation_timeout,
        # session cookie carries the signed-in user id
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production,
        # JSON bodies only; nothing here needs large uploads
        "MAX_CONTENT_LENGTH": 1 * 1024 * 1024,
    }
