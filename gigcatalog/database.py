"""
Database setup and connection utilities

Usage:
    python -m gigcatalog.database            # check connection, create tables
    python -m gigcatalog.database --reset    # drop and recreate all tables
"""
import argparse
import sys

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from gigcatalog.config import Config
from gigcatalog.logger import get_logger
from gigcatalog.models import Region, Venue, create_tables, drop_tables, engine

logger = get_logger('database')


def setup_database(bind=None):
    """Validate configuration and create all tables. Returns True on success."""
    try:
        Config.validate()
        logger.info(f"Setting up database at {bind.url if bind is not None else Config.DATABASE_URL}")
        create_tables(bind)
        logger.info("Database tables created successfully")
        return True
    except (ValueError, SQLAlchemyError) as e:
        logger.error(f"Failed to setup database: {e}")
        return False


def check_connection(bind=None):
    """Run SELECT 1 against the engine"""
    try:
        with (bind or engine).connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        return False


def reset_database(bind=None):
    """Drop and recreate all tables; every event, source and venue is lost."""
    try:
        logger.warning("Resetting database - all data will be lost!")
        drop_tables(bind)
        create_tables(bind)
        logger.info("Database reset successfully")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Failed to reset database: {e}")
        return False


def get_or_create_venue(session, slug: str, name: str = None, region_slug: str = 'default', region_name: str = None) -> Venue:
    """Find a venue by slug, creating it (and its region) if missing"""
    venue = session.query(Venue).filter(Venue.slug == slug).first()
    if venue:
        return venue

    region = session.query(Region).filter(Region.slug == region_slug).first()
    if region is None:
        region = Region(slug=region_slug, name=region_name or region_slug)
        session.add(region)
        session.flush()

    venue = Venue(slug=slug, name=name or slug, region_id=region.id)
    session.add(venue)
    session.commit()
    logger.info(f"Created venue '{slug}' in region '{region.slug}'")
    return venue


def main(argv=None):
    parser = argparse.ArgumentParser(description='Create or reset the gig catalog tables')
    parser.add_argument('--reset', action='store_true', help='Drop and recreate all tables')
    args = parser.parse_args(argv)

    if not check_connection():
        logger.error("Cannot setup database - connection failed!")
        sys.exit(1)

    ok = reset_database() if args.reset else setup_database()
    if not ok:
        sys.exit(1)
    logger.info("Database setup completed successfully!")


if __name__ == "__main__":
    main()
