from __future__ import annotations

from .ggdeals import DEFAULT_API_URL, GGDealsSettings
from .settings import AppConfig, RuntimeConfig, Settings, load_config

__all__ = [
    "DEFAULT_API_URL",
    "AppConfig",
    "GGDealsSettings",
    "RuntimeConfig",
    "Settings",
    "load_config",
]
