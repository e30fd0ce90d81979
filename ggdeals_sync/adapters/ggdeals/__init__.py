"""GG.deals integration adapter for adding library games to the user's collection."""

from ggdeals_sync.adapters.ggdeals.client import GGDealsApiClient
from ggdeals_sync.adapters.ggdeals.sync.service import GGDealsService

__all__ = ["GGDealsApiClient", "GGDealsService"]
