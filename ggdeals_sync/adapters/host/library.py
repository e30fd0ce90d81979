"""Game library backed by a JSON export of the host database."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from ggdeals_sync.core.json_store import read_json, write_json_atomic
from ggdeals_sync.domain.models.game import Game

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class JsonGameLibrary:
    """Library stored as a JSON list of game objects.

    The whole file is loaded once; every ``update_game`` rewrites it
    atomically. Entries without an id are skipped on load.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._games: dict[str, Game] = self._load()

    def _load(self) -> dict[str, Game]:
        data = read_json(self.path, default=[])
        if not isinstance(data, list):
            logger.warning("library_file_invalid", extra={"path": str(self.path)})
            return {}

        games: dict[str, Game] = {}
        for entry in data:
            if not isinstance(entry, dict):
                continue
            try:
                game = Game.from_dict(entry)
            except (KeyError, ValueError) as exc:
                logger.warning("library_entry_skipped", extra={"error": str(exc)})
                continue
            games[game.id] = game

        logger.info("library_loaded", extra={"path": str(self.path), "games": len(games)})
        return games

    def get_games(self, ids: Iterable[str]) -> list[Game]:
        with self._lock:
            return [self._games[game_id] for game_id in ids if game_id in self._games]

    def get_all_games(self) -> list[Game]:
        with self._lock:
            return list(self._games.values())

    def update_game(self, game: Game) -> None:
        with self._lock:
            games = {**self._games, game.id: game}
            write_json_atomic(self.path, [g.to_dict() for g in games.values()])
            self._games = games
