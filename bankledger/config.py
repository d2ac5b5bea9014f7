"""Application configuration using pydantic-settings."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class LedgerSettings(BaseSettings):
    """Configuration values for the ledger."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    app_name: str = Field(default="Bank Ledger")
    currency: str = Field(default="USD", min_length=3, max_length=3)
    amount_places: int = Field(default=2, ge=0, le=8)
    account_id_prefix: str = Field(default="ACC")
    account_id_width: int = Field(default=4, ge=1, le=12)
    timestamp_format: str = Field(
        default="%d.%m.%Y %H:%M",
        description="strftime format used for history lines in statements.",
    )
    template_dir: Path = Field(default=PACKAGE_DIR / "templates")
    log_level: LogLevel = Field(default="INFO")

    @field_validator("currency")
    @classmethod
    def _uppercase_currency(cls, value: str) -> str:
        return value.upper()

    @field_validator("log_level", mode="before")
    @classmethod
    def _uppercase_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


_settings: LedgerSettings | None = None


def get_settings() -> LedgerSettings:
    """Return a cached instance of the application settings."""

    global _settings
    if _settings is None:
        _settings = LedgerSettings()
    return _settings


__all__ = ["LedgerSettings", "get_settings"]
