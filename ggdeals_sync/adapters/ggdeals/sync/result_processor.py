"""Apply GG.deals outcomes to the local library."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ggdeals_sync.adapters.ggdeals.models import AddToCollectionResult

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ggdeals_sync.adapters.ggdeals.models import AddResult
    from ggdeals_sync.adapters.ggdeals.sync.game_status import GameStatusService
    from ggdeals_sync.adapters.ggdeals.sync.links import AddLinkService
    from ggdeals_sync.config import GGDealsSettings
    from ggdeals_sync.domain.models.game import Game

logger = logging.getLogger(__name__)


def _is_definitive(result: AddToCollectionResult) -> bool:
    """Whether the outcome is a remote decision the local status should mirror."""
    match result:
        case (
            AddToCollectionResult.ADDED
            | AddToCollectionResult.SYNCED
            | AddToCollectionResult.NOT_FOUND
            | AddToCollectionResult.IGNORED
        ):
            return True
        case AddToCollectionResult.ERROR | AddToCollectionResult.SKIPPED_DUE_TO_LIBRARY:
            return False


class AddResultProcessor:
    """Update status tags and links for each submitted game.

    Both effects are idempotent, so processing the same outcome twice leaves
    the library unchanged after the first pass.
    """

    def __init__(
        self,
        settings: GGDealsSettings,
        game_status_service: GameStatusService,
        add_link_service: AddLinkService,
    ) -> None:
        self._settings = settings
        self._status = game_status_service
        self._links = add_link_service

    def process(self, games: Sequence[Game], results: Mapping[str, AddResult]) -> None:
        status_updates = 0
        links_added = 0

        for game in games:
            add_result = results.get(game.id)
            if add_result is None:
                continue
            if not _is_definitive(add_result.result):
                continue

            self._status.update_status(game, add_result.result)
            status_updates += 1

            if self._settings.add_links_to_games and add_result.url:
                self._links.add_link(game, add_result.url)
                links_added += 1

        logger.info(
            "ggdeals_results_processed",
            extra={
                "games": len(games),
                "status_updates": status_updates,
                "links": links_added,
            },
        )
