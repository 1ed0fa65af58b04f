"""Now-playing notification adapters."""

from rivo_player.infrastructure.notifications.logging_notifier import LoggingNotifier

__all__ = [
    "LoggingNotifier",
]
