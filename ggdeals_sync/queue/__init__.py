"""Persistent processing queue for games awaiting submission."""

from ggdeals_sync.queue.persistence import QueuePersistence
from ggdeals_sync.queue.processing_queue import PersistentProcessingQueue

__all__ = ["PersistentProcessingQueue", "QueuePersistence"]
