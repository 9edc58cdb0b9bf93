"""
Cross-source duplicate detection for scraped events.

A scraped event is compared against every stored event at the same venue on
the same calendar day. The first candidate whose title similarity clears the
threshold is the match, unless the start times are far enough apart to look
like a matinee/evening double booking.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session, joinedload

from gigcatalog.config import Config
from gigcatalog.lib.text import clean_event_title
from gigcatalog.logger import get_logger
from gigcatalog.models import Event
from gigcatalog.scraped_event import ScrapedEvent
from gigcatalog.similarity import similarity_score

logger = get_logger('dedup')

# Fields a lower-priority source may fill in but never overwrite
FILL_ONLY_FIELDS = ('description', 'image_url', 'cover_charge', 'ticket_url', 'doors_at', 'ends_at')


@dataclass
class DedupResult:
    is_duplicate: bool
    existing_event_id: Optional[int] = None
    should_update_canonical: bool = False  # same source re-scrape, or more trusted source
    similarity: float = 0.0


def is_same_day(date1: datetime, date2: datetime) -> bool:
    return date1.date() == date2.date()


def day_bounds(dt: datetime):
    """Local midnight-to-midnight window containing dt"""
    start_of_day = dt.replace(hour=0, minute=0, second=0, microsecond=0)
    end_of_day = start_of_day + timedelta(days=1) - timedelta(microseconds=1)
    return start_of_day, end_of_day


def find_duplicate(
    session: Session,
    scraped_event: ScrapedEvent,
    venue_id: int,
    source_id: int,
    source_priority: int,
) -> DedupResult:
    """
    Look for an existing event at the venue that this scraped event duplicates.

    should_update_canonical is True when the match is owned by the same source
    (a re-scrape) or when the new source's priority number is lower than the
    owner's.
    """
    start_of_day, end_of_day = day_bounds(scraped_event.starts_at)

    candidates = session.query(Event).options(joinedload(Event.source)).filter(
        Event.venue_id == venue_id,
        Event.starts_at >= start_of_day,
        Event.starts_at <= end_of_day,
    ).order_by(Event.starts_at, Event.id).all()

    # Stored titles are already cleaned
    cleaned_title = clean_event_title(scraped_event.title)
    max_gap = timedelta(hours=Config.SHOWTIME_GAP_HOURS)

    for existing in candidates:
        similarity = similarity_score(cleaned_title, existing.title)
        if similarity < Config.SIMILARITY_THRESHOLD:
            continue

        gap = abs(scraped_event.starts_at - existing.starts_at)
        if gap > max_gap and similarity < Config.SHOWTIME_EXACT_SIMILARITY:
            logger.info(
                f"Skipping potential match - different showtimes: '{scraped_event.title}' vs "
                f"'{existing.title}' ({gap.total_seconds() / 3600:.1f}h apart)"
            )
            continue

        existing_priority = existing.source.priority if existing.source else Config.DEFAULT_SOURCE_PRIORITY
        is_same_source = existing.source_id == source_id

        return DedupResult(
            is_duplicate=True,
            existing_event_id=existing.id,
            should_update_canonical=is_same_source or source_priority < existing_priority,
            similarity=similarity,
        )

    return DedupResult(is_duplicate=False)


def merge_event_data(existing: Any, scraped_event: ScrapedEvent) -> Dict[str, Any]:
    """
    Fill-only merge from a lower-priority source.

    Returns the fields to set: only those empty on the existing record and
    present on the scraped one. Never overwrites a populated field.
    """
    updates = {}
    for name in FILL_ONLY_FIELDS:
        current = existing.get(name) if isinstance(existing, dict) else getattr(existing, name, None)
        incoming = getattr(scraped_event, name)
        if not current and incoming:
            updates[name] = incoming
    return updates
