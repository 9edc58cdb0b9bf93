#!/usr/bin/env python3
"""
Data import script for the gig catalog

Reads a JSON file of scraped events for one venue/source and runs it
through ingestion, cancellation detection and the duplicate audit.

Usage:
    python -m gigcatalog.import_scraped_data --file events.json --venue iron-horse --source iron-horse-site --category VENUE
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Tuple

from gigcatalog.database import get_or_create_venue, setup_database
from gigcatalog.logger import get_logger
from gigcatalog.models import AGE_RESTRICTIONS, SOURCE_CATEGORIES, SessionLocal, Venue
from gigcatalog.runner import get_or_create_source, run_source
from gigcatalog.scraped_event import ScrapedEvent

logger = get_logger('import_scraped_data')


def load_events(file_path: str) -> Tuple[List[ScrapedEvent], int]:
    """
    Read a scraper JSON file (a list, or {"events": [...]}).

    Returns (events, rejected_count); malformed records are logged and skipped.
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, list):
        records = data
    elif isinstance(data, dict) and 'events' in data:
        records = data['events']
    else:
        raise ValueError(f"Unexpected JSON structure in {file_path}")

    return parse_records(records)


def parse_records(records: List[Any]) -> Tuple[List[ScrapedEvent], int]:
    events = []
    rejected = 0
    for record in records:
        try:
            if not isinstance(record, dict):
                raise ValueError("Record is not an object")
            events.append(ScrapedEvent.from_dict(record))
        except ValueError as e:
            logger.warning(f"Skipping malformed event {record}: {e}")
            rejected += 1
    return events, rejected


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Import scraped events into the canonical catalog')
    parser.add_argument('--file', required=True, help='Path to JSON file to import')
    parser.add_argument('--venue', required=True, help='Venue slug')
    parser.add_argument('--venue-name', help='Venue display name (used when creating the venue)')
    parser.add_argument('--region', default='default', help='Region slug (used when creating the venue)')
    parser.add_argument('--source', required=True, help='Source slug')
    parser.add_argument('--source-name', help='Source display name (used when creating the source)')
    parser.add_argument('--category', choices=SOURCE_CATEGORIES, default='OTHER', help='Source category (sets default priority)')
    parser.add_argument('--priority', type=int, help='Source priority, lower = more trusted')
    parser.add_argument('--age-restriction', choices=AGE_RESTRICTIONS, help='Default age restriction for the venue')
    parser.add_argument('--create-venue', action='store_true', help='Create the venue if it does not exist')
    return parser


def main(argv=None):
    """Main script logic"""
    args = build_parser().parse_args(argv)

    file_path = Path(args.file)
    if not file_path.exists():
        logger.error(f"File not found: {args.file}")
        sys.exit(1)

    try:
        events, rejected = load_events(str(file_path))
    except (ValueError, json.JSONDecodeError) as e:
        logger.error(f"Could not read {args.file}: {e}")
        sys.exit(1)

    setup_database()
    session = SessionLocal()

    try:
        venue = session.query(Venue).filter(Venue.slug == args.venue).first()
        if venue is None:
            if not args.create_venue:
                logger.error(f"Venue not found: {args.venue} (use --create-venue to create it)")
                sys.exit(1)
            venue = get_or_create_venue(session, args.venue, args.venue_name, region_slug=args.region)

        source = get_or_create_source(session, args.source, args.source_name, args.category, args.priority)

        logger.info(f"Starting import for source '{args.source}' at venue '{args.venue}' from file '{args.file}'")
        result = run_source(session, lambda: events, venue, source, default_age_restriction=args.age_restriction)

        stats = result.stats
        print(f"\n=== Import Summary ===")
        print(f"Source: {args.source}")
        print(f"Venue: {args.venue}")
        print(f"File: {args.file}")
        print(f"Records rejected (malformed): {rejected}")
        print(f"Saved: {stats.saved}")
        print(f"Updated: {stats.updated}")
        print(f"Skipped: {stats.skipped}")
        print(f"Filtered (dates): {stats.filtered}")
        print(f"Canceled: {stats.canceled}")
        print(f"Suspicious duplicates: {result.suspicious_duplicates}")

        if not result.success:
            logger.error(f"Import failed: {result.error_message}")
            sys.exit(1)

    finally:
        session.close()


if __name__ == "__main__":
    main()
