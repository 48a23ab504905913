"""
Notification Dispatcher for ReviewWatch
=======================================

Decides whether, where and when an alert is notified. Delivery itself
(SMTP, WhatsApp Business API, push provider) is done by sender callables
injected by the host application.

Decision rules:
    1. Channels: email if enabled and an address is set, WhatsApp if enabled
       and a number is set, push if enabled.
    2. Frequency "immediate": every alert is sent as it arrives.
    3. Frequency "hourly" / "daily": alerts are queued and sent as one
       batch by flush_due() once the interval has elapsed.

A failing sender is logged and never blocks the other channels.

Usage:
    dispatcher = NotificationDispatcher(manager.get_config, senders={
        NotificationChannel.EMAIL: send_email,
    })
    manager.subscribe(dispatcher)
    ...
    dispatcher.flush_due()   # from a scheduler
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from ..alerts.alert_models import Alert, AlertConfig, NotificationFrequency
from ..data.data_models import utc_now

logger = logging.getLogger(__name__)


class NotificationChannel(str, Enum):
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    PUSH = "push"


BATCH_INTERVALS = {
    NotificationFrequency.HOURLY: timedelta(hours=1),
    NotificationFrequency.DAILY: timedelta(days=1),
}


@dataclass(frozen=True)
class NotificationMessage:
    """What a sender is asked to deliver."""
    channel: NotificationChannel
    destination: str
    subject: str
    body: str
    alerts: Tuple[Alert, ...]


Sender = Callable[[NotificationMessage], None]


def build_message(
    channel: NotificationChannel,
    destination: str,
    alerts: List[Alert],
) -> NotificationMessage:
    """Render one alert, or a digest of several, into a message."""
    if len(alerts) == 1:
        alert = alerts[0]
        subject = alert.title
        body = f"{alert.title}\n\n{alert.description}"
    else:
        subject = f"{len(alerts)} novos alertas"
        lines = [f"- [{a.type.value}] {a.title}: {a.description}" for a in alerts]
        body = "\n".join(lines)
    return NotificationMessage(
        channel=channel,
        destination=destination,
        subject=subject,
        body=body,
        alerts=tuple(alerts),
    )


class NotificationDispatcher:
    """
    Alert listener turning alerts into notification messages.

    Instances are callable so they can be passed straight to
    AlertManager.subscribe().
    """

    def __init__(
        self,
        config_provider: Callable[[], AlertConfig],
        senders: Optional[Dict[NotificationChannel, Sender]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            config_provider: Returns the current AlertConfig (e.g. manager.get_config)
            senders: Delivery callables per channel; channels without one are skipped
            clock: Returns the current aware datetime
        """
        self.config_provider = config_provider
        self.senders: Dict[NotificationChannel, Sender] = dict(senders or {})
        self.clock = clock
        self._lock = threading.Lock()
        self._pending: List[Alert] = []
        self._last_flush: datetime = clock()

    def __call__(self, alert: Alert) -> None:
        self.handle(alert)

    @staticmethod
    def select_channels(config: AlertConfig) -> List[Tuple[NotificationChannel, str]]:
        """Channels (with destination) that should receive notifications."""
        channels = []
        if config.email_enabled and config.email_address:
            channels.append((NotificationChannel.EMAIL, config.email_address))
        if config.whatsapp_enabled and config.whatsapp_number:
            channels.append((NotificationChannel.WHATSAPP, config.whatsapp_number))
        if config.push_enabled:
            channels.append((NotificationChannel.PUSH, ""))
        return channels

    def handle(self, alert: Alert) -> None:
        config = self.config_provider()
        if config.notification_frequency == NotificationFrequency.IMMEDIATE:
            self._deliver([alert], config)
            return
        with self._lock:
            self._pending.append(alert)
        logger.debug(
            f"Alert queued for {config.notification_frequency.value} digest",
            extra={"alert_id": alert.id},
        )

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def flush_due(self, now: Optional[datetime] = None) -> int:
        """
        Send the queued digest if its interval has elapsed.

        Returns:
            Number of alerts sent
        """
        now = now or self.clock()
        config = self.config_provider()
        interval = BATCH_INTERVALS.get(config.notification_frequency)
        if interval is not None and now - self._last_flush < interval:
            return 0
        return self.flush(now)

    def flush(self, now: Optional[datetime] = None) -> int:
        """Send everything queued regardless of the interval."""
        with self._lock:
            batch, self._pending = self._pending, []
            self._last_flush = now or self.clock()
        if batch:
            self._deliver(batch, self.config_provider())
        return len(batch)

    def _deliver(self, alerts: List[Alert], config: AlertConfig) -> int:
        delivered = 0
        for channel, destination in self.select_channels(config):
            sender = self.senders.get(channel)
            if sender is None:
                logger.debug(f"No sender registered for {channel.value}")
                continue
            message = build_message(channel, destination, alerts)
            try:
                sender(message)
                delivered += 1
            except Exception as e:
                logger.error(f"Failed to send {channel.value} notification: {e}", exc_info=True)
        return delivered
