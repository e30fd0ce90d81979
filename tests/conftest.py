"""Pytest configuration and shared test helpers.

Test modules import the helpers directly (``from tests.conftest import ...``).
"""

from __future__ import annotations

from typing import Any

from ggdeals_sync.adapters.ggdeals.models import AddResult, AddToCollectionResult, Notification
from ggdeals_sync.config import GGDealsSettings
from ggdeals_sync.domain.models.game import Game

STEAM_LIBRARY_ID = "cb91dfc9-b977-43bf-8e70-55f46e410fab"


def make_settings(**overrides: Any) -> GGDealsSettings:
    """GG.deals settings with a token and test friendly defaults."""
    data: dict[str, Any] = {"auth_token": "test-token"}
    data.update(overrides)
    return GGDealsSettings(**data)


def make_game(game_id: str, /, name: str | None = None, **kwargs: Any) -> Game:
    return Game(id=game_id, name=name if name is not None else f"Game {game_id}", **kwargs)


def result(outcome: AddToCollectionResult, url: str | None = None, message: str | None = None):
    return AddResult(result=outcome, url=url, message=message)


class FakeLibrary:
    """In-memory ``GameLibrary`` recording every update."""

    def __init__(self, games: list[Game] | None = None) -> None:
        self.games: dict[str, Game] = {game.id: game for game in games or []}
        self.updates: list[str] = []

    def get_games(self, ids):
        return [self.games[game_id] for game_id in ids if game_id in self.games]

    def get_all_games(self):
        return list(self.games.values())

    def update_game(self, game: Game) -> None:
        self.games[game.id] = game
        self.updates.append(game.id)


class RecordingNotificationSink:
    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def add(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def ids(self) -> list[str]:
        return [notification.id for notification in self.notifications]


class FakeClient:
    """Scripted GG.deals client usable as an async context manager.

    ``responses`` is consumed one entry per ``import_games`` call; an entry is
    either a ``{game_id: AddResult}`` mapping or an exception to raise.
    """

    def __init__(self, responses: list[Any] | None = None, login_error: Exception | None = None):
        self.responses = list(responses or [])
        self.login_error = login_error
        self.batches: list[list[str]] = []
        self.entered = 0

    async def __aenter__(self):
        self.entered += 1
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def check_logged_in(self) -> None:
        if self.login_error is not None:
            raise self.login_error

    async def import_games(self, games):
        self.batches.append([game.id for game in games])
        response = self.responses.pop(0) if self.responses else {}
        if isinstance(response, Exception):
            raise response
        return dict(response)
