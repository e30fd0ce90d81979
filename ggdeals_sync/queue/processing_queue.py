"""Durable, deduplicated work queue drained by a background asyncio task.

Game ids arrive from host events (possibly from a foreign thread) through
``enqueue`` and are persisted immediately. ``process_in_background`` hands the
current snapshot to the processing callback; ids are forgotten only after the
callback returns, so a crash or a failing callback keeps them for the next
trigger (at-least-once delivery).
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import TYPE_CHECKING

from ggdeals_sync.core.logging_utils import generate_correlation_id

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable
    from concurrent.futures import Future

    from ggdeals_sync.queue.persistence import QueuePersistence

    ProcessCallback = Callable[[list[str]], Awaitable[None]]

logger = logging.getLogger(__name__)


class PersistentProcessingQueue:
    """Pending id set with a single-flight background drain.

    Usage::

        queue = PersistentProcessingQueue(QueuePersistence(path), process_games)
        queue.enqueue(["id-1", "id-2"])   # any thread, returns immediately
        queue.process_in_background()     # on the event loop, fire-and-forget
    """

    def __init__(
        self,
        persistence: QueuePersistence,
        process: ProcessCallback,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Restore the pending set from ``persistence``.

        Args:
            persistence: Backing store of the pending ids.
            process: Async callback receiving the snapshot of pending ids.
            loop: Event loop that runs drains triggered from threads without a
                running loop. Defaults to the loop active at the first trigger.
        """
        self._persistence = persistence
        self._process = process
        self._loop = loop
        self._lock = threading.Lock()
        self._pending: set[str] = persistence.load()
        self._draining = False
        self._tasks: set[asyncio.Task[None]] = set()
        logger.info("processing_queue_loaded", extra={"pending": len(self._pending)})

    @property
    def pending(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._pending)

    @property
    def is_draining(self) -> bool:
        with self._lock:
            return self._draining

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def enqueue(self, ids: Iterable[str]) -> int:
        """Add ids that are not pending yet and persist the set once.

        Returns:
            Number of ids that were newly added.

        Raises:
            OSError: If the queue file cannot be written. The in-memory set is
                rolled back so it never runs ahead of the file.
        """
        with self._lock:
            new_ids = [game_id for game_id in dict.fromkeys(ids) if game_id not in self._pending]
            if not new_ids:
                return 0
            self._pending.update(new_ids)
            try:
                self._persistence.save(self._pending)
            except OSError:
                self._pending.difference_update(new_ids)
                raise
            pending_count = len(self._pending)

        logger.info(
            "processing_queue_enqueued",
            extra={"added": len(new_ids), "pending": pending_count},
        )
        return len(new_ids)

    def process_in_background(self) -> asyncio.Future[None] | Future[None] | None:
        """Start a drain without waiting for it.

        Returns:
            The scheduled task (awaiting it is optional), or ``None`` when a
            drain is already running and this trigger collapsed into it.
        """
        with self._lock:
            if self._draining:
                logger.debug("processing_queue_drain_already_running")
                return None
            self._draining = True

        try:
            return self._schedule_drain()
        except Exception:
            with self._lock:
                self._draining = False
            raise

    async def process_now(self) -> bool:
        """Drain in the caller's task. Returns ``False`` if a drain was running."""
        with self._lock:
            if self._draining:
                return False
            self._draining = True
        await self._drain()
        return True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _schedule_drain(self) -> asyncio.Future[None] | Future[None]:
        try:
            running: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None and (self._loop is None or self._loop is running):
            self._loop = running
            task = running.create_task(self._drain(), name="ggdeals-queue-drain")
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            return task

        if self._loop is None or self._loop.is_closed():
            msg = "No event loop available to run the queue drain"
            raise RuntimeError(msg)
        return asyncio.run_coroutine_threadsafe(self._drain(), self._loop)

    async def _drain(self) -> None:
        """Process one snapshot; the caller has already set ``_draining``."""
        try:
            with self._lock:
                snapshot = frozenset(self._pending)
            if not snapshot:
                return

            correlation_id = generate_correlation_id()
            logger.info(
                "processing_queue_drain_start",
                extra={"correlation_id": correlation_id, "count": len(snapshot)},
            )
            try:
                await self._process(sorted(snapshot))
            except Exception:
                logger.exception(
                    "processing_queue_drain_failed",
                    extra={"correlation_id": correlation_id, "count": len(snapshot)},
                )
                return

            with self._lock:
                self._pending.difference_update(snapshot)
                remaining = len(self._pending)
                try:
                    self._persistence.save(self._pending)
                except OSError:
                    # The file still lists the processed ids; they are
                    # re-submitted after a restart.
                    logger.exception(
                        "processing_queue_save_failed",
                        extra={"correlation_id": correlation_id},
                    )

            logger.info(
                "processing_queue_drain_complete",
                extra={
                    "correlation_id": correlation_id,
                    "processed": len(snapshot),
                    "remaining": remaining,
                },
            )
        finally:
            with self._lock:
                self._draining = False
