"""
Tests for the notification dispatcher (decision and batching only).

Usage:
    pytest tests/test_notifications.py -v
"""

from datetime import datetime, timedelta, timezone

from reviewwatch.alerts.alert_manager import AlertManager
from reviewwatch.alerts.alert_models import (
    Alert,
    AlertCategory,
    AlertConfig,
    AlertPriority,
    AlertType,
    NotificationFrequency,
)
from reviewwatch.data.data_models import Product, Review
from reviewwatch.notifications import NotificationChannel, NotificationDispatcher, build_message


NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_alert(alert_id: str = "A1", alert_type: AlertType = AlertType.CRITICAL) -> Alert:
    return Alert(
        id=alert_id,
        type=alert_type,
        title="Avaliação Crítica - Fone",
        description="Cliente deu 1 estrelas e relatou problema grave",
        product_id="P1",
        product_name="Fone",
        review_id="R1",
        author="Ana",
        rating=1,
        comment="quebrou",
        date=NOW,
        priority=AlertPriority.HIGH,
        category=AlertCategory.QUALITY,
    )


class Recorder:
    """Sender collecting messages."""

    def __init__(self):
        self.messages = []

    def __call__(self, message):
        self.messages.append(message)


class TestChannelSelection:

    def test_requires_destination(self):
        config = AlertConfig(email_enabled=True, email_address="", whatsapp_enabled=True,
                             whatsapp_number="+5511999999999", push_enabled=False)
        channels = NotificationDispatcher.select_channels(config)
        assert channels == [(NotificationChannel.WHATSAPP, "+5511999999999")]

    def test_push_needs_only_toggle(self):
        config = AlertConfig(email_enabled=False, whatsapp_enabled=False, push_enabled=True)
        assert NotificationDispatcher.select_channels(config) == [(NotificationChannel.PUSH, "")]


class TestDispatch:

    def setup_method(self):
        self.config = AlertConfig(email_address="loja@example.com", push_enabled=True)
        self.email = Recorder()
        self.push = Recorder()
        self.dispatcher = NotificationDispatcher(
            lambda: self.config,
            senders={NotificationChannel.EMAIL: self.email, NotificationChannel.PUSH: self.push},
            clock=lambda: NOW,
        )

    def test_immediate_delivery(self):
        self.dispatcher(make_alert())
        assert len(self.email.messages) == 1
        assert self.email.messages[0].destination == "loja@example.com"
        assert self.email.messages[0].subject == "Avaliação Crítica - Fone"
        assert len(self.push.messages) == 1

    def test_failing_channel_does_not_block_others(self):
        def broken(message):
            raise ConnectionError("smtp down")

        self.dispatcher.senders[NotificationChannel.EMAIL] = broken
        self.dispatcher(make_alert())
        assert len(self.push.messages) == 1

    def test_hourly_batches_until_due(self):
        self.config.notification_frequency = NotificationFrequency.HOURLY
        self.dispatcher(make_alert("A1"))
        self.dispatcher(make_alert("A2"))

        assert self.email.messages == []
        assert self.dispatcher.pending_count == 2
        assert self.dispatcher.flush_due(NOW + timedelta(minutes=30)) == 0

        assert self.dispatcher.flush_due(NOW + timedelta(hours=1)) == 2
        assert self.dispatcher.pending_count == 0
        digest = self.email.messages[0]
        assert digest.subject == "2 novos alertas"
        assert [a.id for a in digest.alerts] == ["A1", "A2"]

    def test_flush_empty_queue(self):
        assert self.dispatcher.flush(NOW) == 0
        assert self.email.messages == []

    def test_subscribed_to_manager(self):
        manager = AlertManager(config=self.config, clock=lambda: NOW)
        manager.subscribe(self.dispatcher)
        review = Review(id="R9", product_id="P1", rating=1, comment="ok", author="Ana", date=NOW)
        manager.process_review(review, Product(id="P1", name="Fone"))
        assert len(self.email.messages) == 1


class TestBuildMessage:

    def test_single_alert(self):
        message = build_message(NotificationChannel.EMAIL, "x@example.com", [make_alert()])
        assert message.subject == "Avaliação Crítica - Fone"
        assert "problema grave" in message.body

    def test_digest(self):
        alerts = [make_alert("A1"), make_alert("A2", AlertType.URGENT)]
        message = build_message(NotificationChannel.PUSH, "", alerts)
        assert message.subject == "2 novos alertas"
        assert "[urgent]" in message.body
