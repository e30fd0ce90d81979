"""Durable list of games that need the user's attention after a sync."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from ggdeals_sync.adapters.ggdeals.models import AddFailure, AddToCollectionResult
from ggdeals_sync.core.json_store import read_json, write_json_atomic

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from ggdeals_sync.adapters.ggdeals.models import AddResult
    from ggdeals_sync.config import GGDealsSettings
    from ggdeals_sync.domain.models.game import Game

logger = logging.getLogger(__name__)

_FAILURES_ADAPTER = TypeAdapter(dict[str, AddFailure])


class AddFailuresFileService:
    """Load/save failures as a JSON object keyed by game id."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, AddFailure]:
        data = read_json(self.path, default={})
        try:
            return _FAILURES_ADAPTER.validate_python(data)
        except ValidationError as exc:
            logger.warning(
                "failures_file_invalid",
                extra={"path": str(self.path), "error": str(exc)},
            )
            return {}

    def save(self, failures: Mapping[str, AddFailure]) -> None:
        write_json_atomic(self.path, _FAILURES_ADAPTER.dump_python(dict(failures), mode="json"))


class AddFailuresManager:
    """Owner of the failures file.

    Every mutation is a locked load/mutate/save cycle, so the file is the only
    state and concurrent runs never lose each other's records.
    """

    def __init__(self, file_service: AddFailuresFileService) -> None:
        self._file_service = file_service
        self._lock = threading.Lock()

    def get_failures(self) -> dict[str, AddFailure]:
        with self._lock:
            return self._file_service.load()

    def add_failures(self, failures: Mapping[str, AddFailure]) -> None:
        if not failures:
            return
        with self._lock:
            current = self._file_service.load()
            current.update(failures)
            self._file_service.save(current)
        logger.info("ggdeals_failures_added", extra={"count": len(failures)})

    def record(self, game: Game, add_result: AddResult) -> None:
        self.add_failures({game.id: _to_failure(game, add_result)})

    def remove_failures(self, ids: Iterable[str]) -> int:
        ids = set(ids)
        if not ids:
            return 0
        with self._lock:
            current = self._file_service.load()
            removed = [game_id for game_id in ids if current.pop(game_id, None) is not None]
            if removed:
                self._file_service.save(current)
        return len(removed)

    def clear(self, game_id: str) -> bool:
        return self.remove_failures([game_id]) == 1

    def clear_all(self) -> int:
        with self._lock:
            count = len(self._file_service.load())
            self._file_service.save({})
        return count

    def record_results(
        self,
        games: Sequence[Game],
        results: Mapping[str, AddResult],
        settings: GGDealsSettings,
    ) -> int:
        """Upsert failures for problem outcomes and drop records superseded by success.

        Returns:
            Number of failure records written.
        """
        to_add: dict[str, AddFailure] = {}
        to_remove: list[str] = []

        for game in games:
            add_result = results.get(game.id)
            if add_result is None:
                continue
            match add_result.result:
                case AddToCollectionResult.ERROR | AddToCollectionResult.NOT_FOUND:
                    to_add[game.id] = _to_failure(game, add_result)
                case AddToCollectionResult.SKIPPED_DUE_TO_LIBRARY:
                    if settings.record_skipped_due_to_library:
                        to_add[game.id] = _to_failure(game, add_result)
                case (
                    AddToCollectionResult.ADDED
                    | AddToCollectionResult.SYNCED
                    | AddToCollectionResult.IGNORED
                ):
                    to_remove.append(game.id)

        if not to_add and not to_remove:
            return 0

        with self._lock:
            current = self._file_service.load()
            changed = bool(to_add)
            for game_id in to_remove:
                changed = current.pop(game_id, None) is not None or changed
            current.update(to_add)
            if changed:
                self._file_service.save(current)

        if to_add:
            logger.info("ggdeals_failures_added", extra={"count": len(to_add)})
        return len(to_add)


def _to_failure(game: Game, add_result: AddResult) -> AddFailure:
    return AddFailure(
        game_id=game.id,
        name=game.name,
        result=add_result.result,
        message=add_result.message,
    )
