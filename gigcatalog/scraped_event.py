"""
ScrapedEvent: one listing as handed over by a venue/ticketing scraper.
"""

from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from gigcatalog.logger import get_logger
from gigcatalog.models import AGE_RESTRICTIONS

logger = get_logger('scraped_event')

DATETIME_FORMATS = [
    '%Y-%m-%d %H:%M:%S',    # 2025-12-20 20:00:00
    '%Y-%m-%d %H:%M',       # 2025-12-20 20:00
    '%Y-%m-%d',             # 2025-12-20
    '%m/%d/%Y %I:%M %p',    # 12/20/2025 8:00 PM
    '%m/%d/%Y',             # 12/20/2025
    '%B %d, %Y %I:%M %p',   # December 20, 2025 8:00 PM
    '%B %d, %Y',            # December 20, 2025
    '%b %d, %Y',            # Dec 20, 2025
]

# JSON key (camelCase as emitted by scrapers) -> field name
FIELD_ALIASES = {
    'startsAt': 'starts_at',
    'endsAt': 'ends_at',
    'doorsAt': 'doors_at',
    'coverCharge': 'cover_charge',
    'ticketUrl': 'ticket_url',
    'sourceUrl': 'source_url',
    'sourceEventId': 'source_event_id',
    'imageUrl': 'image_url',
    'ageRestriction': 'age_restriction',
}

DATETIME_FIELDS = ('starts_at', 'ends_at', 'doors_at')


def to_local_naive(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert an offset-aware datetime to naive local wall-clock time."""
    if dt is not None and dt.tzinfo is not None:
        return dt.astimezone().replace(tzinfo=None)
    return dt


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a scraper timestamp into a naive local datetime.

    Accepts datetime objects, ISO 8601 strings (with or without offset) and a
    handful of common listing formats. Returns None when nothing matches.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        try:
            parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
        except ValueError:
            parsed = None
            for fmt in DATETIME_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
        if parsed is None:
            return None

    return to_local_naive(parsed)


@dataclass
class ScrapedEvent:
    """Event as reported by one source; no identity beyond source_event_id"""
    title: str
    starts_at: datetime
    description: Optional[str] = None  # plain text or HTML
    ends_at: Optional[datetime] = None
    doors_at: Optional[datetime] = None
    cover_charge: Optional[str] = None
    ticket_url: Optional[str] = None
    source_url: Optional[str] = None
    source_event_id: Optional[str] = None
    image_url: Optional[str] = None
    age_restriction: Optional[str] = None  # ALL_AGES, EIGHTEEN_PLUS, TWENTY_ONE_PLUS
    genres: List[str] = field(default_factory=list)

    def __post_init__(self):
        for name in DATETIME_FIELDS:
            setattr(self, name, to_local_naive(getattr(self, name)))

    def with_changes(self, **changes) -> 'ScrapedEvent':
        return replace(self, **changes)

    def to_raw_data(self) -> Dict[str, Any]:
        """JSON-safe payload for EventSource.raw_data"""
        data = asdict(self)
        for name in DATETIME_FIELDS:
            if data[name] is not None:
                data[name] = data[name].isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScrapedEvent':
        """
        Build a ScrapedEvent from a scraper JSON record.

        Raises ValueError for a missing title or an unparseable start time.
        Unknown keys are ignored.
        """
        values = {}
        for key, value in data.items():
            name = FIELD_ALIASES.get(key, key)
            if name in cls.__dataclass_fields__:
                values[name] = value

        title = (values.get('title') or '').strip()
        if not title:
            raise ValueError("Missing title")

        starts_at = parse_datetime(values.get('starts_at'))
        if starts_at is None:
            raise ValueError(f"Could not parse start time: {values.get('starts_at')!r}")

        values['title'] = title
        values['starts_at'] = starts_at
        values['ends_at'] = parse_datetime(values.get('ends_at'))
        values['doors_at'] = parse_datetime(values.get('doors_at'))
        values['genres'] = list(values.get('genres') or [])

        age = values.get('age_restriction')
        if age and age not in AGE_RESTRICTIONS:
            logger.warning(f"Ignoring unknown age restriction '{age}' for '{title}'")
            values['age_restriction'] = None

        # Empty strings are absent values
        for name in ('description', 'cover_charge', 'ticket_url', 'source_url', 'source_event_id', 'image_url'):
            if values.get(name) == '':
                values[name] = None
        if values.get('source_event_id') is not None:
            values['source_event_id'] = str(values['source_event_id'])

        return cls(**values)


# A scraper is anything that produces a batch of ScrapedEvents.
Scraper = Callable[[], List[ScrapedEvent]]
