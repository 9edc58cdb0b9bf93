"""
Tests for running scrapers through ingestion and audit
"""
from datetime import datetime, timedelta

from gigcatalog.models import Event, Source
from gigcatalog.notifications import NotificationService
from gigcatalog.runner import default_priority, get_or_create_source, run_source, run_sources
from gigcatalog.scraped_event import ScrapedEvent

UPCOMING = (datetime.now() + timedelta(days=10)).replace(hour=20, minute=0, second=0, microsecond=0)


class RecordingChannel:
    def __init__(self):
        self.sent = []

    def send(self, notification):
        self.sent.append(notification)


def upcoming_events(count):
    return [
        ScrapedEvent(title=f"Show {n}", starts_at=UPCOMING + timedelta(days=n), source_event_id=f"s-{n}")
        for n in range(count)
    ]


def failing_scraper():
    raise RuntimeError("site down")


def test_successful_run_records_bookkeeping(session, venue, venue_source):
    notifier = NotificationService([RecordingChannel()])

    result = run_source(session, lambda: upcoming_events(3), venue, venue_source, notifier)

    assert result.success
    assert result.events_scraped == 3
    assert result.stats.saved == 3
    assert result.suspicious_duplicates == 0
    assert result.completed_at is not None
    assert venue_source.last_run_status == 'success'
    assert venue_source.last_event_count == 3
    assert venue_source.last_run_at is not None


def test_failing_scraper_touches_no_events(session, venue, venue_source, make_event):
    existing = make_event("Show 0", UPCOMING, venue_source, source_event_id="s-0")

    result = run_source(session, failing_scraper, venue, venue_source, NotificationService([RecordingChannel()]))

    assert not result.success
    assert result.error_message == "site down"
    assert venue_source.last_run_status == 'failed'
    assert venue_source.last_event_count is None
    session.refresh(existing)
    assert not existing.is_cancelled


def test_run_pauses_source_when_audit_finds_duplicates(session, venue, venue_source, aggregator_source, make_event):
    make_event(
        "Nutcracker",
        UPCOMING.replace(hour=14),
        aggregator_source,
        created_at=datetime.now() - timedelta(days=1),
    )
    channel = RecordingChannel()
    scraped = [ScrapedEvent(title="The Nutcracker", starts_at=UPCOMING.replace(hour=19, minute=30), source_event_id="n-1")]

    result = run_source(session, lambda: scraped, venue, venue_source, NotificationService([channel]))

    assert result.success
    assert result.stats.saved == 1
    assert result.suspicious_duplicates == 1
    assert venue_source.notifications_paused
    assert [n.anomaly_type for n in channel.sent] == ['duplicate_spike']
    assert session.query(Event).count() == 2


def test_run_sources_continues_after_failure(session, venue, venue_source, aggregator_source):
    jobs = [
        (failing_scraper, venue, aggregator_source),
        (lambda: upcoming_events(2), venue, venue_source),
    ]

    results = run_sources(session, jobs, NotificationService([RecordingChannel()]))

    assert [(r.source_slug, r.success) for r in results] == [
        (aggregator_source.slug, False),
        (venue_source.slug, True),
    ]
    assert results[1].stats.saved == 2


def test_default_priority_by_category():
    assert default_priority('VENUE') == 10
    assert default_priority('aggregator') == 40
    assert default_priority('SOMETHING_ELSE') == 50


def test_get_or_create_source(session):
    source = get_or_create_source(session, 'iron-horse-tickets', 'Iron Horse Tickets', category='TICKETING')
    assert source.priority == 20
    assert source.category == 'TICKETING'

    assert get_or_create_source(session, 'iron-horse-tickets').id == source.id
    assert session.query(Source).count() == 1

    override = get_or_create_source(session, 'fan-page', category='SOCIAL', priority=5)
    assert override.priority == 5
    assert override.name == 'fan-page'
