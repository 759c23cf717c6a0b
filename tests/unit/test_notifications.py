"""Tests for member notifications."""

import json

import httpx
import pytest

from community_rewards.core.config import Settings
from community_rewards.infrastructure.database import Database
from community_rewards.services.notifications import (
    DatabaseNotifier,
    NotificationService,
    WebhookNotifier,
    build_notification_service,
)
from community_rewards.services.redemption import RedemptionStatus
from community_rewards.services.redemption.messages import (
    redemption_submitted_message,
    status_update_message,
)


class TestMessages:
    """Tests for notification texts."""

    def test_submitted(self):
        """Test the submitted message."""
        message = redemption_submitted_message("Mug")

        assert "Mug" in message
        assert "awaiting admin verification" in message

    def test_shipped_and_delivered(self):
        """Test shipping progress messages."""
        assert status_update_message("Mug", RedemptionStatus.SHIPPED) == "Mug is on its way"
        assert status_update_message("Mug", RedemptionStatus.DELIVERED) == "Mug has been delivered"

    def test_cancelled_with_refund(self):
        """Test the refund amount in cancellation messages."""
        message = status_update_message("Mug", RedemptionStatus.CANCELLED, refunded_amount=250)

        assert "cancelled" in message
        assert "250 coins" in message

    def test_rejected_without_refund(self):
        """Test rejection without refund amount."""
        message = status_update_message("Mug", RedemptionStatus.REJECTED)

        assert message == "Your redemption of Mug was rejected"


class RecordingSink:
    name = "recording"

    def __init__(self):
        self.calls = []

    async def notify(self, member_id, message, link_url):
        self.calls.append((member_id, message, link_url))


class FailingSink:
    name = "failing"

    async def notify(self, member_id, message, link_url):
        raise RuntimeError("sink down")


class TestNotificationService:
    """Tests for NotificationService fan-out."""

    @pytest.mark.asyncio
    async def test_delivers_to_all_sinks(self):
        """Test fan-out with the default link."""
        first, second = RecordingSink(), RecordingSink()
        service = NotificationService([first, second], default_link_url="/rewards-app/status")

        delivered = await service.notify(7, "hello")

        assert delivered == 2
        assert first.calls == [(7, "hello", "/rewards-app/status")]
        assert second.calls == first.calls

    @pytest.mark.asyncio
    async def test_failing_sink_is_skipped(self):
        """Test that one failing sink does not stop the others."""
        recording = RecordingSink()
        service = NotificationService([FailingSink(), recording])

        delivered = await service.notify(7, "hello", "/custom")

        assert delivered == 1
        assert recording.calls == [(7, "hello", "/custom")]

    @pytest.mark.asyncio
    async def test_no_sinks(self):
        """Test a service without sinks."""
        assert await NotificationService().notify(1, "hello") == 0

    @pytest.mark.asyncio
    async def test_database_notifier_stores_row(self, database, seed):
        """Test the in-app notification sink."""
        member = await seed.member()

        await DatabaseNotifier(database).notify(member.id, "Reward shipped", "/rewards-app/status")

        rows = await seed.notifications(member.id)
        assert [(row.message, row.link_url, row.is_read) for row in rows] == [
            ("Reward shipped", "/rewards-app/status", False)
        ]


class TestWebhookNotifier:
    """Tests for WebhookNotifier."""

    @pytest.mark.asyncio
    async def test_posts_json(self):
        """Test the webhook payload."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(204)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        notifier = WebhookNotifier("https://hooks.example.com/rewards", client=client)

        await notifier.notify(3, "Reward shipped", "/rewards-app/status")
        await notifier.close()

        assert len(requests) == 1
        assert requests[0].method == "POST"
        assert json.loads(requests[0].content) == {
            "member_id": 3,
            "message": "Reward shipped",
            "link_url": "/rewards-app/status",
        }

    @pytest.mark.asyncio
    async def test_http_error_swallowed_by_service(self):
        """Test that a 500 from the webhook is logged, not raised."""
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500))
        )
        webhook = WebhookNotifier("https://hooks.example.com/rewards", client=client)
        service = NotificationService([webhook])

        assert await service.notify(3, "hello") == 0
        await service.close()

    def test_build_with_webhook(self):
        """Test building the service from settings."""
        settings = Settings(notification_webhook_url="https://hooks.example.com/rewards")

        service = build_notification_service(settings, Database("sqlite+aiosqlite:///:memory:"))

        assert [sink.name for sink in service.sinks] == ["database", "webhook"]
        assert service.default_link_url == "/rewards-app/status"

    def test_build_without_webhook(self):
        """Test the default sink list."""
        service = build_notification_service(Settings(), Database("sqlite+aiosqlite:///:memory:"))

        assert [sink.name for sink in service.sinks] == ["database"]
