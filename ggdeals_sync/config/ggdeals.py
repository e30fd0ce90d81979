from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.gg.deals/playnite/collection/import/"


class GGDealsSettings(BaseModel):
    """GG.deals collection sync configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = Field(default=True, validation_alias="GGDEALS_ENABLED")
    api_url: str = Field(default=DEFAULT_API_URL, validation_alias="GGDEALS_API_URL")
    auth_token: str = Field(default="", validation_alias="GGDEALS_AUTH_TOKEN")
    add_links_to_games: bool = Field(
        default=False,
        validation_alias="GGDEALS_ADD_LINKS_TO_GAMES",
        description="Attach the GG.deals game page link to synced games",
    )
    skip_hidden_games: bool = Field(default=False, validation_alias="GGDEALS_SKIP_HIDDEN_GAMES")
    libraries_to_skip: tuple[str, ...] = Field(
        default=(),
        validation_alias="GGDEALS_LIBRARIES_TO_SKIP",
        description="Library plugin ids whose games are never submitted",
    )
    library_map_overrides: dict[str, str] = Field(
        default_factory=dict,
        validation_alias="GGDEALS_LIBRARY_MAP_OVERRIDES",
        description="library_id=launcher pairs overriding the default launcher table",
    )
    record_skipped_due_to_library: bool = Field(
        default=False, validation_alias="GGDEALS_RECORD_SKIPPED_DUE_TO_LIBRARY"
    )
    max_batch_size: int = Field(default=100, validation_alias="GGDEALS_MAX_BATCH_SIZE")
    max_payload_chars: int = Field(default=1_000_000, validation_alias="GGDEALS_MAX_PAYLOAD_CHARS")
    request_timeout_sec: float = Field(default=30.0, validation_alias="GGDEALS_REQUEST_TIMEOUT_SEC")
    max_retries: int = Field(default=3, validation_alias="GGDEALS_MAX_RETRIES")

    @field_validator("api_url", mode="before")
    @classmethod
    def _validate_api_url(cls, value: Any) -> str:
        url = str(value or DEFAULT_API_URL).strip()
        if not url:
            return DEFAULT_API_URL
        if not url.startswith(("http://", "https://")):
            msg = "GG.deals API URL must start with http:// or https://"
            raise ValueError(msg)
        return url

    @field_validator("auth_token", mode="before")
    @classmethod
    def _validate_auth_token(cls, value: Any) -> str:
        if value in (None, ""):
            return ""
        token = str(value).strip()
        if len(token) > 500:
            msg = "GG.deals auth token appears to be too long"
            raise ValueError(msg)
        if any(char in token for char in [" ", "\n", "\t"]):
            msg = "GG.deals auth token contains invalid characters"
            raise ValueError(msg)
        return token

    @field_validator("libraries_to_skip", mode="before")
    @classmethod
    def _parse_libraries_to_skip(cls, value: Any) -> tuple[str, ...]:
        if value in (None, ""):
            return ()
        pieces = value if isinstance(value, list | tuple | set) else str(value).split(",")
        return tuple(str(piece).strip().lower() for piece in pieces if str(piece).strip())

    @field_validator("library_map_overrides", mode="before")
    @classmethod
    def _parse_library_map_overrides(cls, value: Any) -> dict[str, str]:
        if value in (None, ""):
            return {}
        if isinstance(value, dict):
            return {str(k).strip().lower(): str(v).strip() for k, v in value.items()}

        overrides: dict[str, str] = {}
        for piece in str(value).split(","):
            if not piece.strip():
                continue
            library_id, sep, launcher = piece.partition("=")
            if not sep or not library_id.strip() or not launcher.strip():
                logger.warning("ggdeals_library_override_ignored", extra={"entry": piece})
                continue
            overrides[library_id.strip().lower()] = launcher.strip()
        return overrides

    @field_validator("max_batch_size", "max_payload_chars", "max_retries", mode="before")
    @classmethod
    def _parse_int_fields(cls, value: Any, info: ValidationInfo) -> int:
        default = cls.model_fields[info.field_name].default
        try:
            parsed = int(str(value if value not in (None, "") else default))
        except ValueError as exc:
            msg = f"{info.field_name.replace('_', ' ')} must be a valid integer"
            raise ValueError(msg) from exc
        if parsed < 0 or (parsed == 0 and info.field_name != "max_retries"):
            msg = f"{info.field_name.replace('_', ' ').capitalize()} must be positive"
            raise ValueError(msg)
        return parsed

    @field_validator("request_timeout_sec", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> float:
        try:
            timeout = float(str(value if value not in (None, "") else 30.0))
        except ValueError as exc:
            msg = "Request timeout must be a valid number"
            raise ValueError(msg) from exc
        if timeout <= 0 or timeout > 600:
            msg = "Request timeout must be between 0 and 600 seconds"
            raise ValueError(msg)
        return timeout
