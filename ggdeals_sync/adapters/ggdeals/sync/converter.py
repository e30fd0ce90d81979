"""Map library games to GG.deals submission records."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ggdeals_sync.adapters.ggdeals.models import GameWithLauncher, GGLauncher

if TYPE_CHECKING:
    from ggdeals_sync.config import GGDealsSettings
    from ggdeals_sync.domain.models.game import Game

logger = logging.getLogger(__name__)

# Well-known library plugin ids of the host application
DEFAULT_LIBRARY_LAUNCHERS: dict[str, GGLauncher] = {
    "cb91dfc9-b977-43bf-8e70-55f46e410fab": GGLauncher.STEAM,
    "00000002-dbd1-46c6-b5d0-b1ba559d10e4": GGLauncher.EPIC,
    "aebe8b7c-6dc3-4a66-af31-e7375c6b5e9e": GGLauncher.GOG,
    "03689811-3f33-4dfb-a121-2ee168fb9a5c": GGLauncher.GOG,  # GOG OSS
    "85dd7072-2f20-4e76-a007-41035e390724": GGLauncher.EA,
    "c2f038e5-8b92-4877-91f1-da9094155fc5": GGLauncher.UBISOFT,
    "e3c26a3d-d695-4cb7-a769-5ff7612c7edd": GGLauncher.BATTLENET,
    "00000001-ebb2-4eec-abcb-7c89937a42bb": GGLauncher.ITCH,
    "402674cd-4af6-4886-b6ec-0e695bfa0688": GGLauncher.AMAZON,
    "7e4fbb5e-2ae3-48d4-8ba0-6b30e7a4e287": GGLauncher.MICROSOFT,
    "96e8c4bc-ec5c-4c8b-87e7-18ee5a690626": GGLauncher.HUMBLE,
    "88409022-088a-4de8-805a-fdbac291f00a": GGLauncher.ROCKSTAR,
}


class LibraryToGGLauncherMap:
    """Lookup table from library plugin id to GG.deals launcher.

    ``library_map_overrides`` from the settings win over the defaults.
    """

    def __init__(self, settings: GGDealsSettings | None = None) -> None:
        self._map: dict[str, GGLauncher] = dict(DEFAULT_LIBRARY_LAUNCHERS)
        overrides = settings.library_map_overrides if settings else {}
        for library_id, launcher in overrides.items():
            try:
                self._map[library_id.lower()] = GGLauncher(launcher)
            except ValueError:
                logger.warning(
                    "ggdeals_unknown_launcher_override",
                    extra={"library_id": library_id, "launcher": launcher},
                )

    def get_launcher(self, library_id: str | None) -> GGLauncher | None:
        if not library_id:
            return None
        return self._map.get(library_id.lower())


class GameToGameWithLauncherConverter:
    def __init__(self, launcher_map: LibraryToGGLauncherMap) -> None:
        self._launcher_map = launcher_map

    def convert(self, game: Game) -> GameWithLauncher:
        launcher = self._launcher_map.get_launcher(game.library_id) or GGLauncher.OTHER
        return GameWithLauncher(
            id=game.id,
            name=game.name.strip(),
            game_id=game.game_id,
            launcher=launcher,
        )
