"""Local GG.deals status of library games, stored as tags."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from ggdeals_sync.adapters.ggdeals.models import AddToCollectionResult
from ggdeals_sync.adapters.ggdeals.sync.constants import (
    TAG_IGNORED,
    TAG_NOT_FOUND,
    TAG_PREFIX,
    TAG_SYNCED,
)

if TYPE_CHECKING:
    from ggdeals_sync.adapters.ggdeals.sync.protocols import GameLibrary
    from ggdeals_sync.domain.models.game import Game

logger = logging.getLogger(__name__)

_STATUS_TAGS: dict[AddToCollectionResult, str] = {
    AddToCollectionResult.ADDED: TAG_SYNCED,
    AddToCollectionResult.SYNCED: TAG_SYNCED,
    AddToCollectionResult.NOT_FOUND: TAG_NOT_FOUND,
    AddToCollectionResult.IGNORED: TAG_IGNORED,
}

_TAG_STATUSES: dict[str, AddToCollectionResult] = {
    TAG_SYNCED: AddToCollectionResult.SYNCED,
    TAG_NOT_FOUND: AddToCollectionResult.NOT_FOUND,
    TAG_IGNORED: AddToCollectionResult.IGNORED,
}


class GameStatusService:
    def __init__(self, library: GameLibrary) -> None:
        self._library = library

    def get_status(self, game: Game) -> AddToCollectionResult | None:
        for tag in game.tags:
            status = _TAG_STATUSES.get(tag)
            if status is not None:
                return status
        return None

    def update_status(self, game: Game, result: AddToCollectionResult) -> None:
        """Replace the game's GG.deals status tag with the one for ``result``.

        Raises:
            ValueError: For outcomes that carry no local status.
        """
        tag = _STATUS_TAGS.get(result)
        if tag is None:
            msg = f"Outcome {result.value} has no local status"
            raise ValueError(msg)

        new_tags = [t for t in game.tags if not t.startswith(TAG_PREFIX)]
        new_tags.append(tag)
        if new_tags == game.tags:
            return

        self._library.update_game(replace(game, tags=new_tags))
        game.tags = new_tags
        logger.debug(
            "ggdeals_status_updated",
            extra={"game_id": game.id, "status": result.value},
        )
