"""
SQLAlchemy models for the gig catalog
"""
from datetime import datetime
from sqlalchemy import create_engine, Column, Integer, String, Text, DateTime, Boolean, JSON, ForeignKey, Float, UniqueConstraint, Index
from sqlalchemy.orm import declarative_base, sessionmaker, relationship
from gigcatalog.config import Config

Base = declarative_base()

AGE_RESTRICTIONS = ('ALL_AGES', 'EIGHTEEN_PLUS', 'TWENTY_ONE_PLUS')
REVIEW_STATUSES = ('PENDING', 'APPROVED', 'REJECTED', 'FLAGGED')
SOURCE_CATEGORIES = ('VENUE', 'TICKETING', 'PROMOTER', 'ARTIST', 'AGGREGATOR', 'SOCIAL', 'OTHER')


class Region(Base):
    """Metro area that venues and events belong to"""
    __tablename__ = 'regions'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True)
    timezone = Column(String(64), nullable=False, default='America/New_York')
    created_at = Column(DateTime, default=datetime.now)

    venues = relationship('Venue', back_populates='region')

    def __repr__(self):
        return f"<Region(id={self.id}, slug='{self.slug}')>"


class Venue(Base):
    """Canonical venue; every event belongs to one"""
    __tablename__ = 'venues'

    id = Column(Integer, primary_key=True)
    region_id = Column(Integer, ForeignKey('regions.id'), nullable=False)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    region = relationship('Region', back_populates='venues')
    events = relationship('Event', back_populates='venue')

    def __repr__(self):
        return f"<Venue(id={self.id}, name='{self.name}')>"


class Source(Base):
    """A scraped site; lower priority number means more trusted"""
    __tablename__ = 'sources'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True)
    category = Column(String(50), nullable=False, default='OTHER')  # VENUE, TICKETING, AGGREGATOR, ...
    priority = Column(Integer, nullable=False, default=50)
    website = Column(Text)
    last_run_at = Column(DateTime)
    last_run_status = Column(String(50))  # success, failed
    last_event_count = Column(Integer)
    notifications_paused = Column(Boolean, nullable=False, default=False)
    notifications_paused_at = Column(DateTime)
    notifications_paused_reason = Column(Text)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    events = relationship('Event', back_populates='source')

    def __repr__(self):
        return f"<Source(id={self.id}, slug='{self.slug}', priority={self.priority})>"


class Event(Base):
    """Canonical event, owned by exactly one source at a time"""
    __tablename__ = 'events'
    __table_args__ = (
        UniqueConstraint('source_id', 'source_event_id', name='uq_event_source_event_id'),
        Index('ix_events_venue_starts_at', 'venue_id', 'starts_at'),
    )

    id = Column(Integer, primary_key=True)
    region_id = Column(Integer, ForeignKey('regions.id'), nullable=False)
    venue_id = Column(Integer, ForeignKey('venues.id'), nullable=False)
    title = Column(Text, nullable=False)
    slug = Column(String(200), nullable=False)
    description = Column(Text)
    description_html = Column(Text)
    image_url = Column(Text)
    starts_at = Column(DateTime, nullable=False)
    ends_at = Column(DateTime)
    doors_at = Column(DateTime)
    cover_charge = Column(String(100))
    age_restriction = Column(String(32), nullable=False, default='ALL_AGES')
    ticket_url = Column(Text)
    genres = Column(JSON, default=list)
    # Canonical owner
    source_id = Column(Integer, ForeignKey('sources.id'))
    source_url = Column(Text)
    source_event_id = Column(String(500))
    confidence_score = Column(Float, nullable=False, default=1.0)
    review_status = Column(String(32), nullable=False, default='PENDING')
    is_cancelled = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    venue = relationship('Venue', back_populates='events')
    source = relationship('Source', back_populates='events')
    event_sources = relationship('EventSource', back_populates='event')

    def __repr__(self):
        return f"<Event(id={self.id}, title='{self.title}', starts_at='{self.starts_at}')>"


class EventSource(Base):
    """Every source that has reported an event, canonical or not"""
    __tablename__ = 'event_sources'
    __table_args__ = (
        UniqueConstraint('event_id', 'source_id', name='uq_event_source'),
    )

    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey('events.id'), nullable=False)
    source_id = Column(Integer, ForeignKey('sources.id'), nullable=False)
    source_url = Column(Text)
    source_event_id = Column(String(500))
    scraped_at = Column(DateTime, default=datetime.now, nullable=False)
    raw_data = Column(JSON)  # Scraped payload as seen by this source

    event = relationship('Event', back_populates='event_sources')
    source = relationship('Source')

    def __repr__(self):
        return f"<EventSource(event_id={self.event_id}, source_id={self.source_id})>"


def make_engine(database_url: str = None, **kwargs):
    """Create an engine for the given URL (defaults to Config.DATABASE_URL)"""
    return create_engine(database_url or Config.DATABASE_URL, echo=False, **kwargs)


# Database engine and session setup
engine = make_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(bind=None):
    """Create all tables"""
    Base.metadata.create_all(bind=bind or engine)


def drop_tables(bind=None):
    """Drop all tables"""
    Base.metadata.drop_all(bind=bind or engine)
