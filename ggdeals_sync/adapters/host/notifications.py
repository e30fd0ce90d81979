"""Notification sink that writes user messages to the log."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ggdeals_sync.adapters.ggdeals.models import NotificationType

if TYPE_CHECKING:
    from ggdeals_sync.adapters.ggdeals.models import Notification

logger = logging.getLogger(__name__)


class LoggingNotificationSink:
    """Keeps the latest notification per id and logs each one."""

    def __init__(self) -> None:
        self.notifications: dict[str, Notification] = {}

    def add(self, notification: Notification) -> None:
        self.notifications[notification.id] = notification
        level = logging.ERROR if notification.type is NotificationType.ERROR else logging.INFO
        logger.log(
            level,
            "notification",
            extra={"notification_id": notification.id, "text": notification.message},
        )
