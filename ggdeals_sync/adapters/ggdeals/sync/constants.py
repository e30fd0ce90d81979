"""Constants for GG.deals collection synchronization."""

# Notification ids, stable so the host replaces instead of stacking them
NOTIFICATION_AUTH_ERROR = "gg-deals-auth-error"
NOTIFICATION_GENERIC_ERROR = "gg-deals-generic-error"
NOTIFICATION_PAGE_NOT_FOUND = "gg-deals-gamepagenotfound"
NOTIFICATION_ADD_FAILURES = "gg-deals-add-failures"

# Status tags written to library games
TAG_PREFIX = "[GG.deals]"
TAG_SYNCED = f"{TAG_PREFIX} Synced"
TAG_NOT_FOUND = f"{TAG_PREFIX} Not found"
TAG_IGNORED = f"{TAG_PREFIX} Ignored"

LINK_NAME = "GG.deals"

QUEUE_FILE_NAME = "queue.json"
FAILURES_FILE_NAME = "failures.json"

DEFAULT_MAX_BATCH_SIZE = 100
DEFAULT_MAX_PAYLOAD_CHARS = 1_000_000
