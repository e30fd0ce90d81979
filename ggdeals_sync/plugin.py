"""Process-wide GG.deals plugin context.

``GGDealsPlugin`` wires the host events to the processing queue and builds a
fresh set of sync collaborators for every run. The host creates one instance
at startup and passes it around; nothing here is module-level state.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ggdeals_sync.adapters.ggdeals.client import GGDealsApiClient
from ggdeals_sync.adapters.ggdeals.models import (
    AddGamesRunResult,
    Notification,
    NotificationType,
    SyncRunSettings,
)
from ggdeals_sync.adapters.ggdeals.sync.add_games import AddGamesService
from ggdeals_sync.adapters.ggdeals.sync.batcher import RequestDataBatcher
from ggdeals_sync.adapters.ggdeals.sync.constants import (
    FAILURES_FILE_NAME,
    NOTIFICATION_GENERIC_ERROR,
    QUEUE_FILE_NAME,
)
from ggdeals_sync.adapters.ggdeals.sync.converter import (
    GameToGameWithLauncherConverter,
    LibraryToGGLauncherMap,
)
from ggdeals_sync.adapters.ggdeals.sync.failures import AddFailuresFileService, AddFailuresManager
from ggdeals_sync.adapters.ggdeals.sync.game_filter import GameToAddFilter
from ggdeals_sync.adapters.ggdeals.sync.game_status import GameStatusService
from ggdeals_sync.adapters.ggdeals.sync.links import AddLinkService
from ggdeals_sync.adapters.ggdeals.sync.result_processor import AddResultProcessor
from ggdeals_sync.adapters.ggdeals.sync.service import GGDealsService
from ggdeals_sync.queue import PersistentProcessingQueue, QueuePersistence

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Sequence
    from contextlib import AbstractAsyncContextManager

    from ggdeals_sync.adapters.ggdeals.sync.protocols import (
        GameLibrary,
        GGDealsApiClientFactory,
        GGDealsApiClientProtocol,
        NotificationSink,
    )
    from ggdeals_sync.config import GGDealsSettings
    from ggdeals_sync.domain.models.game import Game

logger = logging.getLogger(__name__)


def default_client_factory(
    settings: GGDealsSettings,
) -> AbstractAsyncContextManager[GGDealsApiClientProtocol]:
    return GGDealsApiClient(
        api_url=settings.api_url,
        auth_token=settings.auth_token,
        timeout=settings.request_timeout_sec,
        max_retries=settings.max_retries,
    )


class GGDealsPlugin:
    """Owner of the processing queue and the failures file of one data directory."""

    def __init__(
        self,
        data_dir: str | Path,
        library: GameLibrary,
        notifications: NotificationSink,
        settings: GGDealsSettings,
        *,
        client_factory: GGDealsApiClientFactory | None = None,
        open_failures_view: Callable[[], Any] | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Restore the queue and failures from ``data_dir``.

        Args:
            data_dir: Directory holding ``queue.json`` and ``failures.json``
            library: Host game database
            notifications: Host notification area
            settings: GG.deals settings
            client_factory: Builds an API client per run from the settings
            open_failures_view: Action attached to the failures notification
            loop: Event loop for drains triggered from host threads
        """
        self.data_dir = Path(data_dir)
        self.library = library
        self.notifications = notifications
        self.settings = settings
        self._client_factory = client_factory or default_client_factory
        self._open_failures_view = open_failures_view
        self._tasks: set[asyncio.Task[AddGamesRunResult]] = set()

        self.failures = AddFailuresManager(
            AddFailuresFileService(self.data_dir / FAILURES_FILE_NAME)
        )
        self.queue = PersistentProcessingQueue(
            QueuePersistence(self.data_dir / QUEUE_FILE_NAME),
            self._process_queued,
            loop=loop,
        )

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------

    def on_games_added(self, ids: Iterable[str]) -> int:
        """Queue newly added library games. Safe to call from any thread."""
        if not self.settings.enabled:
            return 0
        return self.queue.enqueue(ids)

    def on_library_updated(self) -> Any:
        """Submit everything queued so far in the background."""
        if not self.settings.enabled:
            return None
        return self.queue.process_in_background()

    # ------------------------------------------------------------------
    # Manual runs
    # ------------------------------------------------------------------

    def add_games_to_collection(
        self,
        games: Sequence[Game],
        run_settings: SyncRunSettings,
        cancel_event: asyncio.Event | None = None,
    ) -> asyncio.Task[AddGamesRunResult]:
        """Start a user-triggered run on the running loop without waiting for it."""
        games = list(games)
        loop = asyncio.get_running_loop()
        task = loop.create_task(
            self._reporting_errors(self._run(games, run_settings, cancel_event), len(games)),
            name="ggdeals-add-games",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def add_games_to_collection_async(
        self,
        ids: Iterable[str],
        run_settings: SyncRunSettings,
        cancel_event: asyncio.Event | None = None,
    ) -> AddGamesRunResult:
        """Load ``ids`` from the library and run the orchestrator on them.

        A failure to load the games or to open the client is logged and
        reported as one generic error notification; nothing is raised.
        """
        ids = list(ids)
        return await self._reporting_errors(
            self._load_and_run(ids, run_settings, cancel_event), len(ids)
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _process_queued(self, ids: list[str]) -> None:
        # Errors propagate so the queue keeps the ids for the next trigger
        try:
            await self._load_and_run(ids, SyncRunSettings.default(), None)
        except Exception as exc:
            self._notify_run_failed(exc)
            raise

    async def _reporting_errors(
        self, run: Awaitable[AddGamesRunResult], games_requested: int
    ) -> AddGamesRunResult:
        try:
            return await run
        except Exception as exc:
            logger.exception("ggdeals_run_failed", extra={"games": games_requested})
            self._notify_run_failed(exc)
            return AddGamesRunResult(
                games_requested=games_requested,
                notifications=[NOTIFICATION_GENERIC_ERROR],
            )

    def _notify_run_failed(self, exc: Exception) -> None:
        self.notifications.add(
            Notification(
                id=NOTIFICATION_GENERIC_ERROR,
                message=f"Failed to add games to the GG.deals collection: {exc}",
                type=NotificationType.ERROR,
            )
        )

    async def _load_and_run(
        self,
        ids: list[str],
        run_settings: SyncRunSettings,
        cancel_event: asyncio.Event | None,
    ) -> AddGamesRunResult:
        games = self.library.get_games(ids)
        if len(games) != len(ids):
            logger.info(
                "ggdeals_games_missing_from_library",
                extra={"requested": len(ids), "found": len(games)},
            )
        return await self._run(games, run_settings, cancel_event)

    async def _run(
        self,
        games: list[Game],
        run_settings: SyncRunSettings,
        cancel_event: asyncio.Event | None,
    ) -> AddGamesRunResult:
        async with self._client_factory(self.settings) as client:
            service = self._build_service(client, run_settings)
            return await service.add_games_to_library(games, cancel_event)

    def _build_service(
        self, client: GGDealsApiClientProtocol, run_settings: SyncRunSettings
    ) -> GGDealsService:
        status_service = GameStatusService(self.library)
        add_games_service = AddGamesService(
            game_filter=GameToAddFilter(self.settings, status_service, run_settings),
            converter=GameToGameWithLauncherConverter(LibraryToGGLauncherMap(self.settings)),
            batcher=RequestDataBatcher(
                max_batch_size=self.settings.max_batch_size,
                max_payload_chars=self.settings.max_payload_chars,
            ),
            client=client,
        )
        return GGDealsService(
            settings=self.settings,
            notifications=self.notifications,
            add_games_service=add_games_service,
            failures_manager=self.failures,
            result_processor=AddResultProcessor(
                self.settings, status_service, AddLinkService(self.library)
            ),
            open_failures_view=self._open_failures_view,
        )
