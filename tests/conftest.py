"""
Shared fixtures: an in-memory SQLite catalog with one venue and two sources
"""
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gigcatalog.models import Base, Event, Region, Source, Venue


@pytest.fixture
def engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = SessionLocal()
    yield db
    db.close()


@pytest.fixture
def region(session):
    region = Region(name='Pioneer Valley', slug='pioneer-valley', timezone='America/New_York')
    session.add(region)
    session.commit()
    return region


@pytest.fixture
def venue(session, region):
    venue = Venue(name='Iron Horse', slug='iron-horse', region_id=region.id)
    session.add(venue)
    session.commit()
    return venue


@pytest.fixture
def other_venue(session, region):
    venue = Venue(name='Parlor Room', slug='parlor-room', region_id=region.id)
    session.add(venue)
    session.commit()
    return venue


@pytest.fixture
def venue_source(session):
    source = Source(name='Iron Horse Website', slug='iron-horse-site', category='VENUE', priority=10)
    session.add(source)
    session.commit()
    return source


@pytest.fixture
def aggregator_source(session):
    source = Source(name='Valley Gig Guide', slug='valley-gig-guide', category='AGGREGATOR', priority=40)
    session.add(source)
    session.commit()
    return source


@pytest.fixture
def make_event(session, venue):
    """Insert a canonical event directly, bypassing ingestion"""
    def _make_event(title, starts_at, source, source_event_id=None, venue_obj=None, **kwargs):
        target_venue = venue_obj or venue
        event = Event(
            region_id=target_venue.region_id,
            venue_id=target_venue.id,
            title=title,
            slug=title.lower().replace(' ', '-'),
            starts_at=starts_at,
            source_id=source.id if source else None,
            source_event_id=source_event_id,
            **kwargs,
        )
        session.add(event)
        session.commit()
        return event


    return _make_event
