# meeting_scheduler/core/config.py
from enum import Enum
from functools import lru_cache

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OrganizerPolicy(str, Enum):
    """
    What happens to a meeting's organizer fields when someone else saves it.

    KEEP            organizer is fixed at creation time.
    ADMIN_REASSIGN  an admin who saves the meeting becomes its organizer.
    LAST_EDITOR     whoever saves the meeting becomes its organizer.
    """

    KEEP = "keep"
    ADMIN_REASSIGN = "admin_reassign"
    LAST_EDITOR = "last_editor"


class StoreBackend(str, Enum):
    SQL = "sql"
    MEMORY = "memory"


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables (or a local .env file) at runtime.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    APP_NAME: str = "Meeting Scheduler"
    APP_ENV: str = Field("local", description="Environment name: local/test/dev/stage/prod")
    LOG_LEVEL: str = Field("INFO", description="Root log level for the process.")

    DB_URL: str = Field(
        "sqlite+aiosqlite:///./meeting_scheduler.db",
        description="SQLAlchemy-compatible async database URL",
    )
    STORE_BACKEND: StoreBackend = Field(
        StoreBackend.SQL,
        description="Record store implementation: 'sql' (DB_URL) or 'memory'.",
    )

    INTERNAL_API_KEY: str | None = Field(
        default=None,
        description="API key required for hitting /internal endpoints",
    )

    # --- Week grid ---
    GRID_HOUR_START: int = Field(7, ge=0, le=23, description="First hour shown on the grid.")
    GRID_HOUR_END: int = Field(22, ge=1, le=24, description="Hour at which the grid ends.")
    MIN_BLOCK_MINUTES: int = Field(
        20,
        ge=0,
        description="Minimum rendered height (in minutes) of a meeting block.",
    )

    ORGANIZER_POLICY: OrganizerPolicy = Field(
        OrganizerPolicy.KEEP,
        description=(
            "How organizer fields behave when a meeting is edited by someone "
            "other than its organizer."
        ),
    )

    # --- SMTP / Email configuration ---
    SMTP_HOST: str | None = Field(
        default=None,
        description="SMTP server hostname for sending meeting invitations.",
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port (usually 587 for TLS).",
    )
    SMTP_USERNAME: str | None = Field(
        default=None,
        description="SMTP username (if authentication is required).",
    )
    SMTP_PASSWORD: str | None = Field(
        default=None,
        description="SMTP password (if authentication is required).",
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Whether to use STARTTLS when connecting to SMTP.",
    )
    SMTP_FROM_ADDRESS: str | None = Field(
        default=None,
        description="From address used in invitation emails.",
    )

    # --- Push webhook ---
    PUSH_WEBHOOK_URL: AnyHttpUrl | None = Field(
        default=None,
        description="Optional endpoint receiving push notification payloads.",
    )
    PUSH_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        description="Timeout applied to push webhook requests.",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Using LRU cache ensures settings are read and validated only once,
    while still being easily importable across the app.
    """
    return Settings()
