"""
ReviewWatch Notifications
=========================

Notification decisions (channel selection, batching) for alerts.
Delivery is supplied by the host application as sender callables.
"""

from .notification_dispatcher import (
    NotificationChannel,
    NotificationDispatcher,
    NotificationMessage,
    build_message,
)

__all__ = [
    "NotificationChannel",
    "NotificationDispatcher",
    "NotificationMessage",
    "build_message",
]
