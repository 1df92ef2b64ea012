"""Human-friendly configuration loader.

The ``AppSettings`` class centralises every environment variable the tracker
relies on:

*What:* The database connection string, the listening address, logging and
the handful of knobs the device page uses.
*When:* Read once at startup through :func:`get_settings`; nothing is
reconfigured while the process runs.
*Why:* One place to look instead of ``os.getenv`` calls sprinkled around.
*How:* pydantic-settings reads the process environment (plus optional
``.env`` files) and validates each value.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Iterable

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_SEED_DEVICES = (
    "Samsung Galaxy S5",
    "Samsung Galaxy S5 Ultra",
    "Samsung Galaxy Tab S11",
    "iPhone 15",
    "iPhone 16 Pro Max",
    "iPhone 13 Mini",
    "Google Pixel 8A",
)


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    APP_NAME: str = "G'day Test Device Tracker"
    # Header logo on the device page; empty hides it.
    LOGO_URL: str = (
        "https://careers.gdaygroup.com.au/files/images/_450x450_fit_center-center_none/logo_gday-group.webp"
    )
    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent)
    TEMPLATES_DIR: Path | None = None

    # Hosted Postgres providers export either name, so accept both.
    DB_URL: str = Field(
        default="sqlite:///./devices.db",
        validation_alias=AliasChoices("DATABASE_URL", "POSTGRES_URL", "DB_URL"),
    )
    DB_POOL_SIZE: int = 10
    DB_CONNECT_TIMEOUT: int = 10
    DB_SSLMODE: str | None = None  # "require" for Supabase

    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    CORS_ALLOW_ORIGIN: str = "*"
    POLL_INTERVAL_SECONDS: int = Field(default=30, ge=1)
    SEED_DEVICES: Annotated[list[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_SEED_DEVICES))

    @property
    def templates_dir(self) -> Path:
        return self.TEMPLATES_DIR if self.TEMPLATES_DIR is not None else self.BASE_DIR / "templates"

    @field_validator("DB_URL", mode="after")
    @classmethod
    def normalize_db_url(cls, value: str) -> str:
        # SQLAlchemy refuses the legacy ``postgres://`` scheme and we ship psycopg 3.
        value = value.strip()
        for prefix in ("postgres://", "postgresql://"):
            if value.startswith(prefix):
                return "postgresql+psycopg://" + value[len(prefix):]
        return value

    @field_validator("SEED_DEVICES", mode="before")
    @classmethod
    def parse_seed_devices(cls, value: Any) -> list[str]:
        if value in (None, ""):
            return list(DEFAULT_SEED_DEVICES)
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("SEED_DEVICES must be a comma separated string or list")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()
