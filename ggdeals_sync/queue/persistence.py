"""On-disk storage of the pending game ids."""

from __future__ import annotations

import logging
from pathlib import Path

from ggdeals_sync.core.json_store import read_json, write_json_atomic

logger = logging.getLogger(__name__)


class QueuePersistence:
    """Load and save the pending id set as a JSON list.

    Pure storage: no deduplication policy and no locking, the owning
    ``PersistentProcessingQueue`` serializes access.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> set[str]:
        data = read_json(self.path, default=[])
        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            logger.warning("queue_file_invalid", extra={"path": str(self.path)})
            return set()
        return set(data)

    def save(self, ids: set[str] | frozenset[str]) -> None:
        write_json_atomic(self.path, sorted(ids))
