"""
Tests for database setup helpers
"""
from datetime import datetime

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError

from gigcatalog.database import check_connection, get_or_create_venue, reset_database, setup_database
from gigcatalog.logger import get_logger
from gigcatalog.models import Event, Region, Venue

logger = get_logger('database_test')


def test_setup_creates_tables(engine):
    assert setup_database(bind=engine)
    tables = set(inspect(engine).get_table_names())
    logger.info(f"Tables: {sorted(tables)}")
    assert {'regions', 'venues', 'sources', 'events', 'event_sources'} <= tables


def test_check_connection(engine):
    assert check_connection(bind=engine)


def test_reset_database_clears_rows(engine, session, venue):
    assert session.query(Venue).count() == 1
    session.close()

    assert reset_database(bind=engine)
    assert session.query(Venue).count() == 0


def test_get_or_create_venue_creates_region(session):
    venue = get_or_create_venue(session, 'parlor-room', 'Parlor Room', region_slug='pioneer-valley', region_name='Pioneer Valley')

    assert venue.id is not None
    assert venue.region.slug == 'pioneer-valley'
    assert venue.region.name == 'Pioneer Valley'
    assert get_or_create_venue(session, 'parlor-room').id == venue.id
    assert session.query(Region).count() == 1


def test_event_requires_a_venue(session, region):
    session.add(Event(region_id=region.id, title='Homeless Show', slug='homeless-show', starts_at=datetime(2025, 12, 20, 20, 0)))

    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()
