#!/usr/bin/env python3
"""
Source runner

Runs one scraper for one venue/source through ingestion, cancellation
detection and the duplicate audit, then records run bookkeeping on the
Source. Several sources are run one after another, never in parallel.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from gigcatalog.audit import detect_suspicious_duplicates, handle_suspicious_duplicates
from gigcatalog.config import Config, load_matching_rules
from gigcatalog.logger import get_logger
from gigcatalog.models import Source, Venue
from gigcatalog.notifications import NotificationService
from gigcatalog.save_events import IngestStats, save_scraped_events
from gigcatalog.scraped_event import Scraper

logger = get_logger('runner')


@dataclass
class RunResult:
    source_slug: str
    success: bool
    events_scraped: int = 0
    stats: IngestStats = field(default_factory=IngestStats)
    suspicious_duplicates: int = 0
    error_message: Optional[str] = None
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None


def default_priority(category: str) -> int:
    """Default priority for a source category (lower = more trusted)."""
    priorities = load_matching_rules().get('source_priorities') or {}
    return int(priorities.get((category or 'OTHER').upper(), Config.DEFAULT_SOURCE_PRIORITY))


def get_or_create_source(
    session: Session,
    slug: str,
    name: str = None,
    category: str = 'OTHER',
    priority: int = None,
    website: str = None,
) -> Source:
    """Find a source by slug, creating it with a category-derived priority if missing."""
    source = session.query(Source).filter(Source.slug == slug).first()
    if source:
        return source

    category = (category or 'OTHER').upper()
    source = Source(
        slug=slug,
        name=name or slug,
        category=category,
        priority=priority if priority is not None else default_priority(category),
        website=website,
    )
    session.add(source)
    session.commit()
    logger.info(f"Created source '{slug}' ({category}, priority {source.priority})")
    return source


def run_source(
    session: Session,
    scraper: Scraper,
    venue: Venue,
    source: Source,
    notifier: Optional[NotificationService] = None,
    default_age_restriction: Optional[str] = None,
) -> RunResult:
    """
    Scrape, ingest and audit one source for one venue.

    A scraper exception fails the run without touching events, so a broken
    scraper can never trigger cancellations.
    """
    run_start_time = datetime.now()
    result = RunResult(source_slug=source.slug, success=False, started_at=run_start_time)
    logger.info(f"Starting run for source '{source.slug}' at venue '{venue.name}'")

    try:
        events = list(scraper())
    except Exception as e:
        logger.error(f"Scraper for '{source.slug}' failed: {e}")
        result.error_message = str(e)
        _record_run(session, source, 'failed')
        result.completed_at = datetime.now()
        return result

    result.events_scraped = len(events)
    logger.info(f"Scraper for '{source.slug}' returned {len(events)} events")

    result.stats = save_scraped_events(session, events, venue, source, default_age_restriction)

    pairs = detect_suspicious_duplicates(session, source.id, venue.id, run_start_time)
    result.suspicious_duplicates = len(pairs)
    if pairs:
        handle_suspicious_duplicates(session, source, venue.name, pairs, notifier, result.stats)

    _record_run(session, source, 'success', event_count=len(events))
    result.success = True
    result.completed_at = datetime.now()

    logger.info(f"Run for '{source.slug}' completed: {result.stats.as_dict()}")
    return result


def _record_run(session: Session, source: Source, status: str, event_count: Optional[int] = None) -> None:
    source.last_run_at = datetime.now()
    source.last_run_status = status
    if event_count is not None:
        source.last_event_count = event_count
    session.commit()


def run_sources(
    session: Session,
    jobs: List[Tuple[Scraper, Venue, Source]],
    notifier: Optional[NotificationService] = None,
) -> List[RunResult]:
    """Run (scraper, venue, source) jobs sequentially."""
    notifier = notifier or NotificationService.from_config()
    results = []
    for scraper, venue, source in jobs:
        slug = source.slug
        try:
            results.append(run_source(session, scraper, venue, source, notifier))
        except Exception as e:
            session.rollback()
            logger.error(f"Run for '{slug}' aborted: {e}")
            results.append(RunResult(source_slug=slug, success=False, error_message=str(e), completed_at=datetime.now()))
    return results
