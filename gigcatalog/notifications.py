"""
Anomaly notifications for scraper runs.

Channels:
- LogNotificationChannel: always on, writes to the gigcatalog logger
- WebhookNotificationChannel: Slack-style webhook when ANOMALY_WEBHOOK_URL is set
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from gigcatalog.config import Config
from gigcatalog.logger import get_logger

logger = get_logger('notifications')

SEVERITIES = ('warning', 'critical')


@dataclass
class AnomalyNotification:
    source_id: int
    source_name: str
    venue_name: str
    anomaly_type: str  # duplicate_spike
    severity: str  # warning, critical
    message: str
    sample_titles: List[str] = field(default_factory=list)
    events_created: int = 0
    events_updated: int = 0
    events_skipped: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    def to_payload(self) -> Dict[str, Any]:
        return {
            'sourceId': self.source_id,
            'sourceName': self.source_name,
            'venueName': self.venue_name,
            'anomalyType': self.anomaly_type,
            'severity': self.severity,
            'message': self.message,
            'sampleTitles': list(self.sample_titles),
            'eventsCreated': self.events_created,
            'eventsUpdated': self.events_updated,
            'eventsSkipped': self.events_skipped,
            'timestamp': self.timestamp.isoformat(),
        }


class LogNotificationChannel:
    """Writes anomalies to the log"""

    def send(self, notification: AnomalyNotification) -> None:
        log = logger.error if notification.severity == 'critical' else logger.warning
        log(
            f"SCRAPER ANOMALY [{notification.severity.upper()}] {notification.anomaly_type}: "
            f"{notification.source_name} @ {notification.venue_name} - {notification.message}"
        )
        for title in notification.sample_titles:
            log(f"  - {title}")


class WebhookNotificationChannel:
    """Posts anomalies to a Slack-compatible webhook"""

    def __init__(self, webhook_url: str, timeout: int = None):
        self.webhook_url = webhook_url
        self.timeout = timeout or Config.WEBHOOK_TIMEOUT

    def build_message(self, notification: AnomalyNotification) -> Dict[str, Any]:
        emoji = "🚨" if notification.severity == 'critical' else "⚠️"
        lines = [
            f"{emoji} *Scraper anomaly: {notification.source_name}*",
            f"*Venue:* {notification.venue_name}",
            f"*Type:* {notification.anomaly_type}",
            f"*Severity:* {notification.severity}",
            f"*Message:* {notification.message}",
        ]
        if notification.sample_titles:
            lines.append("*Samples:*\n" + "\n".join(f"• {t}" for t in notification.sample_titles))

        return {
            "text": f"Scraper anomaly: {notification.source_name}",
            "blocks": [
                {
                    "type": "section",
                    "text": {"type": "mrkdwn", "text": "\n".join(lines)}
                }
            ],
            "anomaly": notification.to_payload(),
        }

    def send(self, notification: AnomalyNotification) -> None:
        try:
            response = requests.post(self.webhook_url, json=self.build_message(notification), timeout=self.timeout)
            if response.status_code >= 400:
                logger.error(f"Webhook failed: {response.status_code} {response.text[:200]}")
            else:
                logger.info("Webhook sent successfully")
        except requests.RequestException as e:
            logger.error(f"Webhook error: {e}")


class NotificationService:
    """Fans a notification out to every configured channel"""

    def __init__(self, channels: Optional[List[Any]] = None):
        self.channels = channels if channels is not None else [LogNotificationChannel()]

    @classmethod
    def from_config(cls) -> 'NotificationService':
        channels = [LogNotificationChannel()]
        if Config.ANOMALY_WEBHOOK_URL:
            logger.info("Webhook channel enabled")
            channels.append(WebhookNotificationChannel(Config.ANOMALY_WEBHOOK_URL))
        else:
            logger.debug("Webhook channel disabled (ANOMALY_WEBHOOK_URL not set)")
        return cls(channels)

    def notify(self, notification: AnomalyNotification) -> None:
        logger.info(f"Sending notification to {len(self.channels)} channel(s)")
        for channel in self.channels:
            try:
                channel.send(notification)
            except Exception as e:
                logger.error(f"Notification channel {type(channel).__name__} failed: {e}")
