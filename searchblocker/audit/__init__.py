"""SearchBlocker audit package.

    from searchblocker.audit import SearchLog
"""

from searchblocker.audit.search_log import (
    SearchLog,
    format_allowed_message,
    format_blocked_message,
)

__all__ = [
    "SearchLog",
    "format_allowed_message",
    "format_blocked_message",
]
