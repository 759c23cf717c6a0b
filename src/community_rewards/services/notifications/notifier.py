"""Best-effort member notifications.

Notifications are fire-and-forget: a failing sink is logged and skipped and
never fails the redemption that triggered it.
"""

import logging
from typing import Protocol

import httpx

from community_rewards.core.config import Settings
from community_rewards.infrastructure.database import Database
from community_rewards.repositories.notification import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """A single delivery channel."""

    name: str

    async def notify(self, member_id: int, message: str, link_url: str | None) -> None: ...


class DatabaseNotifier:
    """Stores in-app notifications in the notifications table."""

    name = "database"

    def __init__(self, database: Database):
        self._database = database

    async def notify(self, member_id: int, message: str, link_url: str | None) -> None:
        async with self._database.transaction() as session:
            await NotificationRepository(session).create({
                "member_id": member_id,
                "message": message,
                "link_url": link_url,
                "is_read": False,
            })


class WebhookNotifier:
    """Posts notifications as JSON to an HTTP endpoint."""

    name = "webhook"

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize webhook notifier.

        @param url - Webhook endpoint
        @param timeout - Request timeout in seconds
        @param client - Optional preconfigured HTTP client
        """
        self.url = url
        self._timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def notify(self, member_id: int, message: str, link_url: str | None) -> None:
        response = await self._get_client().post(
            self.url,
            json={"member_id": member_id, "message": message, "link_url": link_url},
        )
        response.raise_for_status()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class NotificationService:
    """Fans a notification out to every configured sink."""

    def __init__(
        self,
        sinks: list[NotificationSink] | None = None,
        *,
        default_link_url: str | None = None,
    ):
        """Initialize notification service.

        @param sinks - Delivery channels
        @param default_link_url - Link used when a caller passes none
        """
        self.sinks = list(sinks or [])
        self.default_link_url = default_link_url

    async def notify(
        self,
        member_id: int,
        message: str,
        link_url: str | None = None,
    ) -> int:
        """Deliver a notification to all sinks.

        Never raises; each failing sink is logged.

        @param member_id - Recipient member ID
        @param message - Notification text
        @param link_url - Link attached to the notification
        @returns Number of sinks that accepted the notification
        """
        link = link_url or self.default_link_url
        delivered = 0
        for sink in self.sinks:
            try:
                await sink.notify(member_id, message, link)
            except Exception:
                logger.exception(
                    f"Notification via {sink.name} failed for member {member_id}"
                )
                continue
            delivered += 1

        logger.info(
            f"Notification for member {member_id} delivered to {delivered}/{len(self.sinks)} sinks"
        )
        return delivered

    async def close(self) -> None:
        for sink in self.sinks:
            if isinstance(sink, WebhookNotifier):
                await sink.close()


def build_notification_service(
    settings: Settings, database: Database
) -> NotificationService:
    """Create the notification service from settings.

    @param settings - Application settings
    @param database - Open database (for in-app notifications)
    @returns Configured NotificationService
    """
    sinks: list[NotificationSink] = [DatabaseNotifier(database)]
    if settings.notification_webhook_url:
        sinks.append(
            WebhookNotifier(
                settings.notification_webhook_url,
                timeout=settings.notification_timeout_seconds,
            )
        )
        logger.info(f"Configured notification webhook: {settings.notification_webhook_url}")
    return NotificationService(sinks, default_link_url=settings.notification_link_url)
