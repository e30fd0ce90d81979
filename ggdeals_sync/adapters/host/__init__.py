"""File-based host collaborators used by the command line entry point."""

from ggdeals_sync.adapters.host.library import JsonGameLibrary
from ggdeals_sync.adapters.host.notifications import LoggingNotificationSink

__all__ = ["JsonGameLibrary", "LoggingNotificationSink"]
