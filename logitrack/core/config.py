# Fichier: logitrack/core/config.py
from pydantic_settings import BaseSettings
from typing import List
from pydantic import ValidationError, field_validator
import sys

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./logitrack_local.db"

    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    ENVIRONMENT: str = "development"

    # La clé secrète pour signer les jetons de session.
    SECRET_KEY: str

    # --- Session ---
    # Durée de vie du marqueur de session (24h comme le cookie d'origine)
    SESSION_MAX_AGE_SECONDS: int = 24 * 60 * 60
    SESSION_COOKIE_NAME: str = "access_token"
    SESSION_USER_KEY: str = "user"

    # --- Notifications & recherche ---
    NOTIFICATION_FETCH_LIMIT: int = 50
    SEARCH_MIN_QUERY_LENGTH: int = 2
    SEARCH_FETCH_LIMIT: int = 20
    SEARCH_CATEGORY_LIMIT: int = 5

    # Performance instrumentation
    SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS: int = 300

    # Administrateur créé au démarrage s'il n'existe pas
    DEFAULT_ADMIN_EMAIL: str = "admin@logitrack.app"
    DEFAULT_ADMIN_PASSWORD: str | None = None

    class Config:
        env_file = ".env"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        """Ensure Postgres URLs always use the asyncpg driver.

        Hosted Postgres providers (Supabase included) still expose database
        URLs using the legacy ``postgres://`` scheme, which SQLAlchemy no
        longer understands. Those URLs, as well as ``postgresql://`` and the
        psycopg variants, are upgraded to ``postgresql+asyncpg://`` while SQLite
        and other backends are left untouched.
        """

        if not isinstance(value, str):
            return value

        if "+asyncpg" in value:
            return value

        replacements = {
            "postgres://": "postgresql+asyncpg://",
            "postgresql://": "postgresql+asyncpg://",
            "postgresql+psycopg2://": "postgresql+asyncpg://",
            "postgresql+psycopg://": "postgresql+asyncpg://",
        }

        for prefix, target in replacements.items():
            if value.startswith(prefix):
                return target + value[len(prefix) :]

        return value

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

def _log_settings_validation_error(exc: ValidationError) -> None:
    """Pretty-print missing or invalid environment variables.

    Pydantic raises a ValidationError during module import when a variable is
    missing, which makes the culprit hard to spot in server logs. The
    structured error payload is printed before the exception is re-raised.
    """

    header = "Configuration error while loading environment variables:"
    print(header, file=sys.stderr)

    details = exc.errors()
    if details:
        for error in details:
            location = ".".join(str(part) for part in error.get("loc", ()))
            message = error.get("msg", "Unknown validation error")
            type_name = error.get("type")
            hint_parts = [message]
            if type_name:
                hint_parts.append(f"(type={type_name})")
            hint = " ".join(hint_parts)
            print(f"  - {location}: {hint}", file=sys.stderr)
    else:
        print(exc, file=sys.stderr)


try:
    settings = Settings()
except ValidationError as exc:  # pragma: no cover - exercised at runtime
    _log_settings_validation_error(exc)
    raise
