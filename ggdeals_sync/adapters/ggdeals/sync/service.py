"""GG.deals add-to-collection orchestrator."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from ggdeals_sync.adapters.ggdeals.errors import AuthenticationError, GamePageNotFoundError
from ggdeals_sync.adapters.ggdeals.models import (
    AddGamesRunResult,
    AddResult,
    AddToCollectionResult,
    Notification,
    NotificationType,
)
from ggdeals_sync.adapters.ggdeals.sync.constants import (
    NOTIFICATION_ADD_FAILURES,
    NOTIFICATION_AUTH_ERROR,
    NOTIFICATION_GENERIC_ERROR,
    NOTIFICATION_PAGE_NOT_FOUND,
)
from ggdeals_sync.core.logging_utils import generate_correlation_id

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable, Mapping, Sequence

    from ggdeals_sync.adapters.ggdeals.models import GameWithLauncher
    from ggdeals_sync.adapters.ggdeals.sync.add_games import AddGamesService
    from ggdeals_sync.adapters.ggdeals.sync.failures import AddFailuresManager
    from ggdeals_sync.adapters.ggdeals.sync.protocols import NotificationSink
    from ggdeals_sync.adapters.ggdeals.sync.result_processor import AddResultProcessor
    from ggdeals_sync.config import GGDealsSettings
    from ggdeals_sync.domain.models.game import Game

logger = logging.getLogger(__name__)


class GGDealsService:
    """Thin orchestrator for one add-to-collection run.

    Every error is handled here and reported as at most one notification per
    kind, so callers (background drains, menu actions) never see an exception.
    """

    def __init__(
        self,
        settings: GGDealsSettings,
        notifications: NotificationSink,
        add_games_service: AddGamesService,
        failures_manager: AddFailuresManager,
        result_processor: AddResultProcessor,
        open_failures_view: Callable[[], Any] | None = None,
    ) -> None:
        self._settings = settings
        self._notifications = notifications
        self._add_games = add_games_service
        self._failures = failures_manager
        self._result_processor = result_processor
        self._open_failures_view = open_failures_view

    async def add_games_to_library(
        self,
        games: Sequence[Game],
        cancel_event: asyncio.Event | None = None,
    ) -> AddGamesRunResult:
        """Submit ``games`` and apply the outcomes.

        Args:
            games: Library games to add to the GG.deals collection
            cancel_event: When set, no further batches are submitted. Batches
                already sent are kept.

        Returns:
            Summary of the run.
        """
        run = AddGamesRunResult(games_requested=len(games))
        if not games:
            return run

        correlation_id = generate_correlation_id()
        start_time = time.time()
        games_by_id = {game.id: game for game in games}

        logger.info(
            "ggdeals_add_games_start",
            extra={"correlation_id": correlation_id, "games": len(games)},
        )

        try:
            await self._add_games.check_logged_in()

            batches = self._add_games.prepare_batches(games)
            run.games_filtered_out = len(games) - sum(len(batch) for batch in batches)

            for index, batch in enumerate(batches):
                if cancel_event is not None and cancel_event.is_set():
                    run.cancelled = True
                    logger.info(
                        "ggdeals_add_games_cancelled",
                        extra={
                            "correlation_id": correlation_id,
                            "remaining_batches": len(batches) - index,
                        },
                    )
                    break

                try:
                    results = await self._add_games.submit_batch(batch)
                except GamePageNotFoundError as exc:
                    logger.warning(
                        "ggdeals_game_page_not_found",
                        extra={"correlation_id": correlation_id, "error": str(exc)},
                    )
                    self._notify_once(
                        run,
                        NOTIFICATION_PAGE_NOT_FOUND,
                        "GG.deals could not find the page for some of your games.",
                        NotificationType.INFO,
                    )
                    run.failures_recorded += self._record_page_not_found(batch, games_by_id)
                    continue

                run.batches_submitted += 1
                run.games_submitted += len(batch)
                batch_games = [games_by_id[record.id] for record in batch if record.id in games_by_id]
                self._apply_results(batch_games, results, run)

        except AuthenticationError as exc:
            logger.warning(
                "ggdeals_authentication_failed",
                extra={"correlation_id": correlation_id, "error": str(exc)},
            )
            self._notify_once(
                run,
                NOTIFICATION_AUTH_ERROR,
                "Log in to GG.deals in the extension settings to add games to your collection.",
                NotificationType.INFO,
            )
        except Exception as exc:
            logger.exception(
                "ggdeals_add_games_failed",
                extra={"correlation_id": correlation_id},
            )
            self._notify_once(
                run,
                NOTIFICATION_GENERIC_ERROR,
                f"Failed to add games to the GG.deals collection: {exc}",
                NotificationType.ERROR,
            )

        if run.failures_recorded:
            self._notify_once(
                run,
                NOTIFICATION_ADD_FAILURES,
                f"{run.failures_recorded} game(s) could not be added to GG.deals. "
                "Open the failures list to review them.",
                NotificationType.INFO,
                action=self._open_failures_view,
            )

        logger.info(
            "ggdeals_add_games_complete",
            extra={
                "correlation_id": correlation_id,
                "submitted": run.games_submitted,
                "filtered_out": run.games_filtered_out,
                "batches": run.batches_submitted,
                "failures": run.failures_recorded,
                "cancelled": run.cancelled,
                "duration": time.time() - start_time,
            },
        )
        return run

    def _apply_results(
        self,
        games: Sequence[Game],
        results: Mapping[str, AddResult],
        run: AddGamesRunResult,
    ) -> None:
        self._result_processor.process(games, results)
        run.failures_recorded += self._failures.record_results(games, results, self._settings)
        for game in games:
            add_result = results.get(game.id)
            if add_result is not None:
                run.outcomes[add_result.result] = run.outcomes.get(add_result.result, 0) + 1

    def _notify_once(
        self,
        run: AddGamesRunResult,
        notification_id: str,
        message: str,
        notification_type: NotificationType,
        *,
        action: Callable[[], Any] | None = None,
    ) -> None:
        if notification_id in run.notifications:
            return
        run.notifications.append(notification_id)
        self._notifications.add(
            Notification(id=notification_id, message=message, type=notification_type, action=action)
        )

    def _record_page_not_found(
        self, batch: Sequence[GameWithLauncher], games_by_id: Mapping[str, Game]
    ) -> int:
        games = [games_by_id[record.id] for record in batch if record.id in games_by_id]
        not_found = AddResult(
            result=AddToCollectionResult.NOT_FOUND,
            message="GG.deals could not resolve the game page",
        )
        return self._failures.record_results(
            games, {game.id: not_found for game in games}, self._settings
        )
