"""Protocol definitions (ports) for GG.deals sync.

The sync pipeline only knows these shapes; the HTTP client and the host
application (library database, notification area) plug in behind them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from contextlib import AbstractAsyncContextManager

    from ggdeals_sync.adapters.ggdeals.models import AddResult, GameWithLauncher, Notification
    from ggdeals_sync.config import GGDealsSettings
    from ggdeals_sync.domain.models.game import Game


class GGDealsApiClientProtocol(Protocol):
    async def check_logged_in(self) -> None: ...

    async def import_games(self, games: Sequence[GameWithLauncher]) -> dict[str, AddResult]: ...


class GGDealsApiClientFactory(Protocol):
    def __call__(
        self, settings: GGDealsSettings
    ) -> AbstractAsyncContextManager[GGDealsApiClientProtocol]: ...


class GameLibrary(Protocol):
    """Host game database."""

    def get_games(self, ids: Iterable[str]) -> list[Game]: ...

    def get_all_games(self) -> list[Game]: ...

    def update_game(self, game: Game) -> None: ...


class NotificationSink(Protocol):
    """Host notification area."""

    def add(self, notification: Notification) -> None: ...
