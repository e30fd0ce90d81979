"""Pydantic models for the GG.deals collection import API and sync results."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class AddToCollectionResult(str, Enum):
    """Per-game outcome reported by GG.deals."""

    ADDED = "added"
    SYNCED = "synced"
    NOT_FOUND = "not_found"
    IGNORED = "ignored"
    SKIPPED_DUE_TO_LIBRARY = "skipped_due_to_library"
    ERROR = "error"


class GGLauncher(str, Enum):
    """Launcher (store) identifiers understood by GG.deals."""

    STEAM = "steam"
    EPIC = "epic"
    GOG = "gog"
    EA = "ea-app"
    UBISOFT = "ubisoft-connect"
    BATTLENET = "battle-net"
    ITCH = "itch-io"
    AMAZON = "amazon"
    MICROSOFT = "microsoft-store"
    HUMBLE = "humble"
    ROCKSTAR = "rockstar"
    DRM_FREE = "drm-free"
    OTHER = "other"


class AddResult(BaseModel):
    """Outcome of one game submission."""

    model_config = ConfigDict(frozen=True)

    result: AddToCollectionResult
    url: str | None = None
    message: str | None = None


class GameWithLauncher(BaseModel):
    """Submission record sent to GG.deals for one game."""

    id: str
    name: str
    game_id: str | None = None
    launcher: GGLauncher = GGLauncher.OTHER


class ImportRequest(BaseModel):
    """Body of the collection import request."""

    token: str
    version: str
    data: str  # JSON encoded list of GameWithLauncher


class ImportedGameResult(BaseModel):
    id: str
    status: AddToCollectionResult = AddToCollectionResult.ERROR
    url: str | None = None
    message: str | None = None

    model_config = {"extra": "ignore"}

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> AddToCollectionResult:
        try:
            return AddToCollectionResult(str(value).strip().lower())
        except ValueError:
            logger.warning("ggdeals_unknown_status", extra={"status": value})
            return AddToCollectionResult.ERROR


class ImportResponseData(BaseModel):
    result: list[ImportedGameResult] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class ImportResponse(BaseModel):
    """Body returned by the collection import endpoint."""

    success: bool = False
    data: ImportResponseData | None = None
    message: str | None = None

    model_config = {"extra": "ignore"}


class AddFailure(BaseModel):
    """Game that needs the user's attention after a sync run."""

    game_id: str
    name: str
    result: AddToCollectionResult
    message: str | None = None
    time: datetime = Field(default_factory=lambda: datetime.now(UTC))


class NotificationType(str, Enum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """User-facing message; ``id`` lets the host replace an older copy."""

    id: str
    message: str
    type: NotificationType
    action: Any = None


@dataclass(frozen=True)
class SyncRunSettings:
    """Per-run switches, distinguishing automatic runs from explicit ones."""

    add_tracked_games: bool = False
    add_not_found_games: bool = False

    @classmethod
    def default(cls) -> SyncRunSettings:
        return cls()


@dataclass
class AddGamesRunResult:
    """Summary of one ``GGDealsService.add_games_to_library`` run."""

    games_requested: int = 0
    games_submitted: int = 0
    games_filtered_out: int = 0
    batches_submitted: int = 0
    cancelled: bool = False
    outcomes: dict[AddToCollectionResult, int] = field(default_factory=dict)
    failures_recorded: int = 0
    notifications: list[str] = field(default_factory=list)
