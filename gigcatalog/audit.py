"""
Post-run audit for duplicates the primary matcher missed.

After a source run, every event the source created during the run is
compared with events that already existed at the same venue on the same day.
A hit means title drift beat the duplicate finder; the source's anomaly
notifications are paused and one alert goes out for a human to look at.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from gigcatalog.config import Config
from gigcatalog.dedup import day_bounds
from gigcatalog.logger import get_logger
from gigcatalog.models import Event, Source
from gigcatalog.notifications import AnomalyNotification, NotificationService
from gigcatalog.similarity import similarity_score

logger = get_logger('audit')

MAX_SAMPLE_TITLES = 5
CRITICAL_PAIR_COUNT = 3


@dataclass
class SuspiciousPair:
    new_event_id: int
    new_title: str
    existing_event_id: int
    existing_title: str
    starts_at: datetime
    similarity: float

    def describe(self) -> str:
        return f'"{self.new_title}" ≈ "{self.existing_title}" ({self.similarity * 100:.0f}%)'


def detect_suspicious_duplicates(
    session: Session,
    source_id: int,
    venue_id: int,
    run_start_time: datetime,
) -> List[SuspiciousPair]:
    """Pairs of (created this run, pre-existing) events at the venue that look alike."""
    new_events = session.query(Event).filter(
        Event.source_id == source_id,
        Event.venue_id == venue_id,
        Event.created_at >= run_start_time,
    ).order_by(Event.starts_at, Event.id).all()

    pairs = []
    for new_event in new_events:
        start_of_day, end_of_day = day_bounds(new_event.starts_at)
        existing_events = session.query(Event).filter(
            Event.venue_id == venue_id,
            Event.id != new_event.id,
            Event.starts_at >= start_of_day,
            Event.starts_at <= end_of_day,
            Event.created_at < run_start_time,
        ).order_by(Event.starts_at, Event.id).all()

        for existing in existing_events:
            similarity = similarity_score(new_event.title, existing.title)
            if similarity >= Config.SIMILARITY_THRESHOLD:
                pairs.append(SuspiciousPair(
                    new_event_id=new_event.id,
                    new_title=new_event.title,
                    existing_event_id=existing.id,
                    existing_title=existing.title,
                    starts_at=new_event.starts_at,
                    similarity=similarity,
                ))

    return pairs


def handle_suspicious_duplicates(
    session: Session,
    source: Source,
    venue_name: str,
    pairs: List[SuspiciousPair],
    notifier: Optional[NotificationService] = None,
    stats=None,
) -> bool:
    """
    Pause the source's notifications and send a single alert.

    When the source is already paused the pause reason is refreshed but no
    new alert is sent. Returns True when an alert went out.
    """
    if not pairs:
        return False

    reason = f"Detected {len(pairs)} potential duplicate event(s) that should have matched existing events"
    already_paused = bool(source.notifications_paused)

    source.notifications_paused = True
    source.notifications_paused_at = datetime.now()
    source.notifications_paused_reason = reason
    session.commit()

    if already_paused:
        logger.warning(f"Notifications already paused for source '{source.name}'; not alerting again: {reason}")
        return False

    logger.warning(f"Paused notifications for source '{source.name}': {reason}")

    notification = AnomalyNotification(
        source_id=source.id,
        source_name=source.name,
        venue_name=venue_name,
        anomaly_type='duplicate_spike',
        severity='critical' if len(pairs) >= CRITICAL_PAIR_COUNT else 'warning',
        message=reason,
        sample_titles=[pair.describe() for pair in pairs[:MAX_SAMPLE_TITLES]],
        events_created=stats.saved if stats else len(pairs),
        events_updated=stats.updated if stats else 0,
        events_skipped=stats.skipped if stats else 0,
    )
    (notifier or NotificationService.from_config()).notify(notification)
    return True
