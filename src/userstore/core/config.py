"""Configuration management for the user store.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Settings are read once and cached;
the per-store configuration handed to repositories is the immutable
StoreOptions model built from them.
"""

import re
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Columns managed by the store itself; they can never be tokenized
RESERVED_COLUMNS = frozenset(
    {"id", "status", "created_at", "updated_at", "soft_deleted_at"}
)


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="USERSTORE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./us_data/userstore.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Store Settings
    user_table_name: str = "users"
    tokenized_columns: Annotated[list[str], NoDecode] = Field(default_factory=list)
    token_prefix: str = "tk_"
    automigrate_enabled: bool = False
    debug_sql: bool = False

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("tokenized_columns", mode="before")
    @classmethod
    def parse_tokenized_columns(cls, v: str | list[str]) -> list[str]:
        """Parse tokenized columns from comma-separated string or list."""
        if isinstance(v, str):
            return [column.strip() for column in v.split(",") if column.strip()]
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


class StoreOptions(BaseModel):
    """Immutable configuration injected into a user store at construction.

    Several stores with different tables or sensitive columns can coexist
    in one process because nothing here is module-level state.
    """

    model_config = ConfigDict(frozen=True)

    user_table_name: str = "users"
    tokenized_columns: tuple[str, ...] = ()
    token_prefix: str = "tk_"
    automigrate_enabled: bool = False
    debug_enabled: bool = False

    @field_validator("user_table_name")
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        """Table names are interpolated as quoted identifiers, so keep them plain."""
        if not v:
            raise ValueError("user table name is required")
        if not IDENTIFIER_PATTERN.match(v):
            raise ValueError(f"Invalid user table name: {v}")
        return v

    @field_validator("tokenized_columns", mode="before")
    @classmethod
    def parse_tokenized_columns(cls, v: str | list[str] | tuple[str, ...]) -> tuple[str, ...]:
        """Accept comma-separated strings and lists; deduplicate keeping order."""
        if isinstance(v, str):
            v = [column.strip() for column in v.split(",") if column.strip()]
        return tuple(dict.fromkeys(v))

    @field_validator("token_prefix")
    @classmethod
    def validate_token_prefix(cls, v: str) -> str:
        """An empty prefix would make every value look like a token."""
        if not v:
            raise ValueError("token prefix is required")
        return v

    @model_validator(mode="after")
    def validate_tokenized_columns(self) -> "StoreOptions":
        """Validate that tokenized columns are plain, non-reserved identifiers."""
        for column in self.tokenized_columns:
            if not IDENTIFIER_PATTERN.match(column):
                raise ValueError(f"Invalid tokenized column name: {column}")
            if column in RESERVED_COLUMNS:
                raise ValueError(f"Column '{column}' cannot be tokenized")
        return self

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "StoreOptions":
        """Build store options from application settings.

        Args:
            settings: Optional settings instance. Loaded from the environment if omitted.

        Returns:
            StoreOptions: Options mirroring the store-related settings.
        """
        settings = settings or get_settings()
        return cls(
            user_table_name=settings.user_table_name,
            tokenized_columns=tuple(settings.tokenized_columns),
            token_prefix=settings.token_prefix,
            automigrate_enabled=settings.automigrate_enabled,
            debug_enabled=settings.debug_sql,
        )

    def is_tokenized(self, column: str) -> bool:
        """Check whether a column is configured as tokenized."""
        return column in self.tokenized_columns

    def is_token(self, value: str) -> bool:
        """Check whether a stored value is a token reference."""
        return bool(value) and value.startswith(self.token_prefix)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call. Settings are loaded once at startup.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
