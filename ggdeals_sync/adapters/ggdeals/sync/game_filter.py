"""Local eligibility checks run before any network call."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ggdeals_sync.adapters.ggdeals.models import AddToCollectionResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ggdeals_sync.adapters.ggdeals.models import SyncRunSettings
    from ggdeals_sync.adapters.ggdeals.sync.game_status import GameStatusService
    from ggdeals_sync.config import GGDealsSettings
    from ggdeals_sync.domain.models.game import Game

logger = logging.getLogger(__name__)


class GameToAddFilter:
    """Decide which games are worth submitting.

    Rules are checked in order and the first one that rejects wins:

    1. Games already tracked (synced or ignored) are skipped unless the run
       asks for ``add_tracked_games``; games marked not found are skipped
       unless the run asks for ``add_not_found_games``.
    2. Games from a library listed in ``libraries_to_skip`` are skipped.
    3. Games without a name are skipped.
    4. Hidden games are skipped when ``skip_hidden_games`` is set.

    Rejected games are dropped silently: no status change, no failure record.
    """

    def __init__(
        self,
        settings: GGDealsSettings,
        game_status_service: GameStatusService,
        run_settings: SyncRunSettings,
    ) -> None:
        self._settings = settings
        self._status = game_status_service
        self._run_settings = run_settings
        self._skipped_libraries = {lib.lower() for lib in settings.libraries_to_skip}

    def should_add(self, game: Game) -> bool:
        match self._status.get_status(game):
            case AddToCollectionResult.SYNCED | AddToCollectionResult.IGNORED:
                if not self._run_settings.add_tracked_games:
                    return False
            case AddToCollectionResult.NOT_FOUND:
                if not self._run_settings.add_not_found_games:
                    return False
            case _:
                pass

        if game.library_id and game.library_id.lower() in self._skipped_libraries:
            return False

        if not game.name or not game.name.strip():
            return False

        return not (self._settings.skip_hidden_games and game.hidden)

    def filter(self, games: Iterable[Game]) -> list[Game]:
        games = list(games)
        eligible = [game for game in games if self.should_add(game)]
        if len(eligible) != len(games):
            logger.info(
                "ggdeals_games_filtered_out",
                extra={"total": len(games), "eligible": len(eligible)},
            )
        return eligible
