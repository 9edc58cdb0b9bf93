#!/usr/bin/env python3
"""
Save scraped events into the canonical catalog.

Per scraped event:
1. Resolve a source-local ID (scraper-provided or a composite key)
2. Exact match on (source, source_event_id) -> update in place
3. Fuzzy duplicate from any source -> record EventSource, then either take
   over the canonical record (same or more trusted source) or fill in
   missing fields only
4. Otherwise create a new canonical event

A batch is processed sequentially in scrape order. Each event is committed
on its own so one bad record never discards the rest of the batch.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, List, Optional, Set

from sqlalchemy.orm import Session

from gigcatalog.cancellation import detect_cancellations
from gigcatalog.dates import is_valid_event_date
from gigcatalog.dedup import find_duplicate, merge_event_data
from gigcatalog.lib.text import clean_event_title, decode_html_entities, generate_slug, normalize_for_comparison, process_descriptions
from gigcatalog.logger import get_logger
from gigcatalog.models import Event, EventSource, Source, Venue
from gigcatalog.scraped_event import ScrapedEvent

logger = get_logger('save_events')

NEW_EVENT_CONFIDENCE = 0.8

CREATED = 'created'
UPDATED = 'updated'
SKIPPED = 'skipped'


@dataclass
class IngestStats:
    """Counts for one source batch"""
    saved: int = 0
    skipped: int = 0
    updated: int = 0
    filtered: int = 0
    canceled: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def generate_composite_key(venue_id: int, event: ScrapedEvent) -> str:
    """
    Stable ID for scrapers without native event IDs.

    venue + date + 24h time + normalized title, e.g.
    "12:2025-12-20:20:00:deer tick w perennial"
    """
    date = event.starts_at.strftime('%Y-%m-%d')
    time = event.starts_at.strftime('%H:%M')
    title = normalize_for_comparison(event.title)
    return f"{venue_id}:{date}:{time}:{title}"


def _stored_title(scraped_event: ScrapedEvent) -> str:
    # Cleaned only after matching so the comparison sees the same shape on both sides
    return clean_event_title(decode_html_entities(scraped_event.title))


def _content_fields(scraped_event: ScrapedEvent) -> Dict:
    description, description_html = process_descriptions(scraped_event.description)
    return {
        'title': _stored_title(scraped_event),
        'description': description,
        'description_html': description_html,
        'image_url': scraped_event.image_url,
        'cover_charge': scraped_event.cover_charge,
        'ticket_url': scraped_event.ticket_url,
        'genres': list(scraped_event.genres or []),
    }


def _apply(event: Event, values: Dict) -> None:
    for name, value in values.items():
        setattr(event, name, value)
    event.updated_at = datetime.now()


def upsert_event_source(session: Session, event_id: int, source_id: int, scraped_event: ScrapedEvent, source_event_id: Optional[str]) -> EventSource:
    """Record that this source has seen the event."""
    event_source = session.query(EventSource).filter(
        EventSource.event_id == event_id,
        EventSource.source_id == source_id,
    ).first()

    if event_source is None:
        event_source = EventSource(event_id=event_id, source_id=source_id)
        session.add(event_source)

    event_source.source_url = scraped_event.source_url
    event_source.source_event_id = source_event_id
    event_source.scraped_at = datetime.now()
    event_source.raw_data = scraped_event.to_raw_data()
    return event_source


def save_event(
    session: Session,
    scraped_event: ScrapedEvent,
    venue: Venue,
    source: Source,
    default_age_restriction: Optional[str] = None,
) -> str:
    """
    Save a single scraped event with deduplication.

    Returns 'created', 'updated' or 'skipped'. Changes are flushed but not
    committed; the caller owns the transaction.
    """
    source_event_id = scraped_event.source_event_id or generate_composite_key(venue.id, scraped_event)

    # Same source already has this event
    existing = session.query(Event).filter(
        Event.source_id == source.id,
        Event.source_event_id == source_event_id,
    ).first()

    if existing:
        values = _content_fields(scraped_event)
        values.update({
            'starts_at': scraped_event.starts_at,
            'ends_at': scraped_event.ends_at,
            'doors_at': scraped_event.doors_at,
            'source_url': scraped_event.source_url,
            # Reappearing un-cancels
            'is_cancelled': False,
        })
        _apply(existing, values)
        session.flush()
        return UPDATED

    dedup_result = find_duplicate(session, scraped_event, venue.id, source.id, source.priority)

    if dedup_result.is_duplicate:
        logger.info(f"Found duplicate: '{scraped_event.title}' matches event {dedup_result.existing_event_id} (similarity: {dedup_result.similarity:.2f})")
        upsert_event_source(session, dedup_result.existing_event_id, source.id, scraped_event, source_event_id)
        canonical = session.get(Event, dedup_result.existing_event_id)

        if dedup_result.should_update_canonical:
            logger.info(f"Updating canonical event {canonical.id} from source '{source.slug}' (same source or higher priority)")
            values = _content_fields(scraped_event)
            values.update({
                'source_id': source.id,
                'source_event_id': source_event_id,
                'source_url': scraped_event.source_url,
            })
            _apply(canonical, values)
            session.flush()
            return UPDATED

        updates = merge_event_data(canonical, scraped_event)
        if updates:
            if 'description' in updates:
                updates['description'], description_html = process_descriptions(updates['description'])
                if not canonical.description_html:
                    updates['description_html'] = description_html
            logger.info(f"Filling {sorted(updates)} on event {canonical.id} from lower-priority source '{source.slug}'")
            _apply(canonical, updates)
            session.flush()
            return UPDATED

        session.flush()
        return SKIPPED

    values = _content_fields(scraped_event)
    event = Event(
        region_id=venue.region_id,
        venue_id=venue.id,
        slug=generate_slug(values['title'], scraped_event.starts_at),
        starts_at=scraped_event.starts_at,
        ends_at=scraped_event.ends_at,
        doors_at=scraped_event.doors_at,
        age_restriction=scraped_event.age_restriction or default_age_restriction or 'ALL_AGES',
        source_id=source.id,
        source_url=scraped_event.source_url,
        source_event_id=source_event_id,
        confidence_score=NEW_EVENT_CONFIDENCE,
        review_status='PENDING',
        **values,
    )
    session.add(event)
    session.flush()

    session.add(EventSource(
        event_id=event.id,
        source_id=source.id,
        source_url=scraped_event.source_url,
        source_event_id=source_event_id,
        raw_data=scraped_event.to_raw_data(),
    ))
    session.flush()
    return CREATED


def save_scraped_events(
    session: Session,
    events: List[ScrapedEvent],
    venue: Venue,
    source: Source,
    default_age_restriction: Optional[str] = None,
    observed_ids: Optional[Set[str]] = None,
    now: Optional[datetime] = None,
) -> IngestStats:
    """
    Save a batch from one source and detect cancellations.

    observed_ids collects every source_event_id seen in this run; pass a set
    to inspect it afterwards. Returns IngestStats
    (saved/skipped/updated/filtered/canceled).
    """
    stats = IngestStats()
    if observed_ids is None:
        observed_ids = set()

    # Plain IDs survive a per-event rollback expiring the ORM instances
    venue_id, source_id, source_slug = venue.id, source.id, source.slug

    for scraped_event in events:
        try:
            date_check = is_valid_event_date(scraped_event.starts_at, now=now)
            if not date_check.valid:
                logger.info(f"Filtering out '{scraped_event.title}': {date_check.reason}")
                stats.filtered += 1
                continue

            event_to_save = scraped_event
            if date_check.corrected_date:
                logger.info(
                    f"Correcting year for '{scraped_event.title}': "
                    f"{scraped_event.starts_at:%Y-%m-%d} -> {date_check.corrected_date:%Y-%m-%d}"
                )
                event_to_save = event_to_save.with_changes(starts_at=date_check.corrected_date)

            if not event_to_save.source_event_id:
                event_to_save = event_to_save.with_changes(source_event_id=generate_composite_key(venue_id, event_to_save))

            observed_ids.add(event_to_save.source_event_id)

            result = save_event(session, event_to_save, venue, source, default_age_restriction)
            session.commit()
            logger.debug(f"'{event_to_save.title}' -> {result}")

            if result == CREATED:
                stats.saved += 1
            elif result == UPDATED:
                stats.updated += 1
            else:
                stats.skipped += 1

        except Exception as e:
            session.rollback()
            logger.error(f"Error saving event '{scraped_event.title}' from '{source_slug}': {e}")
            stats.skipped += 1

    stats.canceled = detect_cancellations(session, observed_ids, source_id, venue_id, now=now)
    session.commit()

    logger.info(
        f"Summary for '{source_slug}': saved={stats.saved}, updated={stats.updated}, "
        f"skipped={stats.skipped}, filtered={stats.filtered}, canceled={stats.canceled}"
    )
    return stats
