"""
Cancellation detection for events a source has stopped listing.
"""

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from gigcatalog.config import Config
from gigcatalog.logger import get_logger
from gigcatalog.models import Event

logger = get_logger('cancellation')


def mark_missing_events_as_canceled(
    session: Session,
    observed_ids: Iterable[str],
    source_id: int,
    venue_id: int,
    now: Optional[datetime] = None,
) -> int:
    """
    Mark future events from this source/venue as cancelled when absent from observed_ids.

    Only events the source owns and can identify (non-null source_event_id)
    are considered. Returns the number of events marked.
    """
    now = now or datetime.now()
    observed = [i for i in observed_ids if i]

    query = session.query(Event).filter(
        Event.source_id == source_id,
        Event.venue_id == venue_id,
        Event.starts_at >= now,
        Event.is_cancelled.is_(False),
        Event.source_event_id.isnot(None),
    )
    if observed:
        query = query.filter(Event.source_event_id.notin_(observed))

    missing_events = query.order_by(Event.starts_at).all()
    if not missing_events:
        return 0

    logger.info(f"Marking {len(missing_events)} missing events as canceled:")
    for event in missing_events:
        logger.info(f"  - '{event.title}' ({event.starts_at:%Y-%m-%d})")
        event.is_cancelled = True
        event.updated_at = datetime.now()

    session.flush()
    return len(missing_events)


def detect_cancellations(
    session: Session,
    observed_ids: Iterable[str],
    source_id: int,
    venue_id: int,
    now: Optional[datetime] = None,
) -> int:
    """
    Run cancellation marking behind the minimum-events safety gate.

    A scrape returning zero or very few events is far more likely to be a
    broken page load than a mass cancellation, so nothing is marked unless
    at least MIN_EVENTS_FOR_CANCELLATION IDs were observed.
    """
    observed = set(i for i in observed_ids if i)

    if not observed:
        logger.info("Skipping cancellation check - no events scraped (scraper may have failed)")
        return 0

    if len(observed) < Config.MIN_EVENTS_FOR_CANCELLATION:
        logger.info(f"Skipping cancellation check - only {len(observed)} events scraped (below threshold)")
        return 0

    return mark_missing_events_as_canceled(session, observed, source_id, venue_id, now=now)
