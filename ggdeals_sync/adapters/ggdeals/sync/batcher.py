"""Split submission records into request-sized batches."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from ggdeals_sync.adapters.ggdeals.sync.constants import (
    DEFAULT_MAX_BATCH_SIZE,
    DEFAULT_MAX_PAYLOAD_CHARS,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ggdeals_sync.adapters.ggdeals.models import GameWithLauncher


class RequestDataBatcher:
    """Group records into consecutive batches, keeping input order.

    A batch closes when it holds ``max_batch_size`` records or when adding
    the next record would push its JSON payload over ``max_payload_chars``.
    A single record larger than the payload limit still gets its own batch.
    The split depends only on the input, so a retried run produces the same
    batches.
    """

    def __init__(
        self,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        max_payload_chars: int = DEFAULT_MAX_PAYLOAD_CHARS,
    ) -> None:
        if max_batch_size <= 0:
            msg = "max_batch_size must be positive"
            raise ValueError(msg)
        self.max_batch_size = max_batch_size
        self.max_payload_chars = max_payload_chars

    def create_batches(self, games: Iterable[GameWithLauncher]) -> list[list[GameWithLauncher]]:
        batches: list[list[GameWithLauncher]] = []
        current: list[GameWithLauncher] = []
        current_chars = 2  # "[]"

        for game in games:
            # ", " separator between items
            item_chars = len(json.dumps(game.model_dump(mode="json"))) + 2
            full = len(current) >= self.max_batch_size
            too_large = current and current_chars + item_chars > self.max_payload_chars
            if full or too_large:
                batches.append(current)
                current = []
                current_chars = 2
            current.append(game)
            current_chars += item_chars

        if current:
            batches.append(current)
        return batches
