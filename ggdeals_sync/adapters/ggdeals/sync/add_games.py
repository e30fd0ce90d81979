"""Filter, convert and batch games, then submit batches to GG.deals."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ggdeals_sync.adapters.ggdeals.models import AddResult, GameWithLauncher
    from ggdeals_sync.adapters.ggdeals.sync.batcher import RequestDataBatcher
    from ggdeals_sync.adapters.ggdeals.sync.converter import GameToGameWithLauncherConverter
    from ggdeals_sync.adapters.ggdeals.sync.game_filter import GameToAddFilter
    from ggdeals_sync.adapters.ggdeals.sync.protocols import GGDealsApiClientProtocol
    from ggdeals_sync.domain.models.game import Game

logger = logging.getLogger(__name__)


class AddGamesService:
    def __init__(
        self,
        game_filter: GameToAddFilter,
        converter: GameToGameWithLauncherConverter,
        batcher: RequestDataBatcher,
        client: GGDealsApiClientProtocol,
    ) -> None:
        self._filter = game_filter
        self._converter = converter
        self._batcher = batcher
        self._client = client

    async def check_logged_in(self) -> None:
        await self._client.check_logged_in()

    def prepare_batches(self, games: Sequence[Game]) -> list[list[GameWithLauncher]]:
        eligible = self._filter.filter(games)
        records = [self._converter.convert(game) for game in eligible]
        return self._batcher.create_batches(records)

    async def submit_batch(self, batch: Sequence[GameWithLauncher]) -> dict[str, AddResult]:
        logger.debug("ggdeals_batch_submit", extra={"size": len(batch)})
        return await self._client.import_games(batch)
