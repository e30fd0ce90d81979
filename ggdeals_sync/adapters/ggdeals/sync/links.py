"""Attach GG.deals page links to library games."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from ggdeals_sync.adapters.ggdeals.sync.constants import LINK_NAME
from ggdeals_sync.domain.models.game import Link

if TYPE_CHECKING:
    from ggdeals_sync.adapters.ggdeals.sync.protocols import GameLibrary
    from ggdeals_sync.domain.models.game import Game

logger = logging.getLogger(__name__)


class AddLinkService:
    def __init__(self, library: GameLibrary) -> None:
        self._library = library

    def add_link(self, game: Game, url: str) -> bool:
        """Append the link unless the game already has that url. Returns True if added."""
        if not url or game.has_link(url):
            return False
        new_links = [*game.links, Link(name=LINK_NAME, url=url)]
        self._library.update_game(replace(game, links=new_links))
        game.links = new_links
        logger.debug("ggdeals_link_added", extra={"game_id": game.id, "url": url})
        return True
