"""
Configuration Management for Moni

Settings are read from the environment and an optional .env file with pydantic-settings.

DESIGN DECISION: One settings class per concern, all reachable from get_settings().
Every tunable (where the data lives, which Gemini model the advisor
talks to, how amounts are displayed) is declared in one place and
validated on first access.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MONI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".moni",
        description="Directory holding the persisted data slot"
    )
    storage_key: str = Field(
        default="moni_data_v1",
        min_length=1,
        description="Name of the slot holding the whole serialized data set"
    )
    export_prefix: str = Field(
        default="moni_backup",
        min_length=1,
        description="File name prefix for exported backups"
    )

    @field_validator('storage_key')
    @classmethod
    def validate_storage_key(cls, v: str) -> str:
        """The key becomes a file name, so path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"Storage key must not contain path separators: {v}")
        return v

    @property
    def slot_path(self) -> Path:
        """Full path of the file backing the slot."""
        return self.data_dir / f"{self.storage_key}.json"


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration for the financial advisor."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # The credential normally lives in the data set; this is the fallback
    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key used when the data set holds none"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class AppSettings(BaseSettings):
    """
    General application behaviour.

    Unprefixed variables, e.g. CURRENCY_SYMBOL or FUTURE_DATE_TOLERANCE_DAYS.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Deployment label (development, production...)"
    )
    debug_mode: bool = Field(
        default=False,
        description="Verbose behaviour for local debugging"
    )

    # Presentation collaborators
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol prefixed to formatted amounts"
    )

    # Validation thresholds
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="How many days in the future a transaction date can be "
                    "before import flags it"
    )


class Settings(BaseSettings):
    """
    Entry point to every settings group.

    Each property re-reads its group, so env changes apply after cache_clear().
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Shared Settings instance.

    Cached for the life of the process; tests call
    get_settings.cache_clear() after changing the environment.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Instantiate every settings group and report which ones fail.

    Returns {group: ok} plus a "<group>_error" message for each failure,
    suitable for a startup check.
    """
    results = {}

    settings = get_settings()
    for group in ("storage", "gemini", "app"):
        try:
            getattr(settings, group)
            results[group] = True
        except ValidationError as e:
            results[group] = False
            results[f"{group}_error"] = str(e)

    return results
