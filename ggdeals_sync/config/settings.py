from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from .ggdeals import GGDealsSettings

logger = logging.getLogger(__name__)


class RuntimeConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    data_dir: str = Field(
        default="./data", validation_alias=AliasChoices("GGDEALS_DATA_DIR", "DATA_DIR")
    )
    library_path: str = Field(default="./data/library.json", validation_alias="GGDEALS_LIBRARY_PATH")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> str:
        log_level = str(value or "INFO").upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if log_level not in valid_levels:
            msg = f"Invalid log level: {value}. Must be one of {valid_levels}"
            raise ValueError(msg)
        return log_level

    @field_validator("data_dir", "library_path", mode="before")
    @classmethod
    def _validate_path(cls, value: Any) -> str:
        path = str(value or "").strip()
        if not path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if "\x00" in path:
            msg = "Path contains invalid characters"
            raise ValueError(msg)
        return path

    @field_validator("log_file", mode="before")
    @classmethod
    def _validate_log_file(cls, value: Any) -> str | None:
        if value is None:
            return None
        trimmed = str(value).strip()
        return trimmed or None


@dataclass(frozen=True)
class AppConfig:
    ggdeals: GGDealsSettings
    runtime: RuntimeConfig


class Settings(BaseSettings):
    """Application settings loaded automatically from environment variables.

    Nested models are populated by matching validation_alias on each field.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    ggdeals: GGDealsSettings = Field(default_factory=GGDealsSettings)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)

    @model_validator(mode="before")
    @classmethod
    def _build_nested_from_env(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Build nested config objects from flat environment variables.

        Constructor arguments take precedence over the environment.
        """
        if not isinstance(data, dict):
            return data

        result = dict(data)
        merged_source = {**dict(os.environ), **data}

        for field_name, field_info in cls.model_fields.items():
            annotation = field_info.annotation
            if not isinstance(annotation, type) or not issubclass(annotation, BaseModel):
                continue
            if isinstance(result.get(field_name), BaseModel):
                continue

            nested_data: dict[str, Any] = {}
            for nested_field_name, nested_field in annotation.model_fields.items():
                env_value = cls._resolve_env_value(merged_source, nested_field)
                if env_value is not None:
                    nested_data[nested_field_name] = env_value

            if nested_data:
                if field_name in result and isinstance(result[field_name], dict):
                    result[field_name] = {**nested_data, **result[field_name]}
                else:
                    result[field_name] = nested_data

        return result

    @staticmethod
    def _resolve_env_value(data: dict[str, Any], field: Any) -> Any | None:
        aliases: list[str] = []
        alias = field.validation_alias
        if isinstance(alias, AliasChoices):
            aliases.extend(choice for choice in alias.choices if isinstance(choice, str))
        elif isinstance(alias, str):
            aliases.append(alias)
        if field.alias:
            aliases.append(field.alias)

        for name in aliases:
            if name in data:
                return data[name]
        return None

    def as_app_config(self) -> AppConfig:
        return AppConfig(ggdeals=self.ggdeals, runtime=self.runtime)


def load_config(**overrides: Any) -> AppConfig:
    """Load application configuration from environment variables and ``.env``.

    Args:
        **overrides: Section dictionaries (``ggdeals={...}``) taking precedence
            over the environment. Useful for tests and the CLI.

    Returns:
        Immutable AppConfig instance.

    Raises:
        RuntimeError: If configuration validation fails.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        msg = f"Configuration validation failed: {exc}"
        raise RuntimeError(msg) from exc

    if settings.ggdeals.enabled and not settings.ggdeals.auth_token:
        logger.warning("ggdeals_auth_token_missing")

    return settings.as_app_config()
