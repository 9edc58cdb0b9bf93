"""
Configuration settings for the gig catalog ingestion pipeline
"""
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Application configuration"""

    # Database Configuration
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///gigcatalog.db')

    # Logging Configuration
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE')  # unset: console only

    # Notifications
    ANOMALY_WEBHOOK_URL = os.getenv('ANOMALY_WEBHOOK_URL')
    WEBHOOK_TIMEOUT = int(os.getenv('WEBHOOK_TIMEOUT', '10'))  # seconds

    # Matching Configuration
    SIMILARITY_THRESHOLD = float(os.getenv('SIMILARITY_THRESHOLD', '0.7'))
    SHOWTIME_GAP_HOURS = float(os.getenv('SHOWTIME_GAP_HOURS', '2'))
    SHOWTIME_EXACT_SIMILARITY = float(os.getenv('SHOWTIME_EXACT_SIMILARITY', '0.95'))
    DEFAULT_SOURCE_PRIORITY = int(os.getenv('DEFAULT_SOURCE_PRIORITY', '50'))

    # Date window Configuration (days)
    FUTURE_WINDOW_DAYS = int(os.getenv('FUTURE_WINDOW_DAYS', '300'))
    RECENT_PAST_DAYS = int(os.getenv('RECENT_PAST_DAYS', '14'))
    YEAR_WRAP_WINDOW_DAYS = int(os.getenv('YEAR_WRAP_WINDOW_DAYS', '120'))

    # Cancellation Configuration
    MIN_EVENTS_FOR_CANCELLATION = int(os.getenv('MIN_EVENTS_FOR_CANCELLATION', '3'))

    @classmethod
    def validate(cls):
        """Validate configuration ranges"""
        problems = []
        if not 0.0 < cls.SIMILARITY_THRESHOLD <= 1.0:
            problems.append(f"SIMILARITY_THRESHOLD must be in (0, 1], got {cls.SIMILARITY_THRESHOLD}")
        if cls.SHOWTIME_GAP_HOURS < 0:
            problems.append(f"SHOWTIME_GAP_HOURS must be >= 0, got {cls.SHOWTIME_GAP_HOURS}")
        for name in ('FUTURE_WINDOW_DAYS', 'RECENT_PAST_DAYS', 'YEAR_WRAP_WINDOW_DAYS'):
            if getattr(cls, name) < 0:
                problems.append(f"{name} must be >= 0, got {getattr(cls, name)}")
        if cls.MIN_EVENTS_FOR_CANCELLATION < 1:
            problems.append(f"MIN_EVENTS_FOR_CANCELLATION must be >= 1, got {cls.MIN_EVENTS_FOR_CANCELLATION}")

        if problems:
            raise ValueError(f"Invalid configuration: {'; '.join(problems)}")

        return True


MATCHING_RULES_PATH = Path(__file__).parent / "data" / "matching.yaml"


def load_matching_rules(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load title-matching rules (opener patterns, source priorities) from YAML."""
    rules_path = Path(path) if path else MATCHING_RULES_PATH
    if rules_path.exists():
        with open(rules_path, encoding='utf-8') as f:
            data = yaml.safe_load(f)
            return data or {}
    return {}
