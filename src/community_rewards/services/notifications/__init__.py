"""Member notification delivery."""

from community_rewards.services.notifications.notifier import (
    DatabaseNotifier,
    NotificationService,
    NotificationSink,
    WebhookNotifier,
    build_notification_service,
)

__all__ = [
    "NotificationSink",
    "DatabaseNotifier",
    "WebhookNotifier",
    "NotificationService",
    "build_notification_service",
]
