#!/usr/bin/env python3
"""
Text utilities for comparing and storing scraped event titles/descriptions.
"""

import html
import re
from datetime import datetime
from typing import Optional, Tuple

from bs4 import BeautifulSoup


def decode_html_entities(text: str) -> str:
    """
    Decode named and numeric HTML entities.

    Examples:
        "Rock &amp; Roll" -> "Rock & Roll"
        "Don&#039;t Stop" -> "Don't Stop"
        "Don&#x27;t Stop" -> "Don't Stop"
    """
    if not text:
        return ""
    # &nbsp; decodes to U+00A0, which the whitespace collapse below handles
    return html.unescape(text)


def normalize_for_comparison(text: str) -> str:
    """
    Normalize a title for fuzzy matching and deduplication.

    Algorithm:
    1. Decode HTML entities
    2. Convert to lowercase
    3. Strip punctuation (keep word characters and whitespace only)
    4. Collapse multiple whitespace to single space
    5. Trim

    Examples:
        "Band Name" -> "band name"
        "Rock &amp; Roll" -> "rock roll"
        "Don't Stop" -> "dont stop"
    """
    if not text:
        return ""

    normalized = decode_html_entities(text).lower()
    normalized = re.sub(r'[^\w\s]', '', normalized)
    normalized = re.sub(r'\s+', ' ', normalized)

    return normalized.strip()


_WEEKDAYS = r'(?:Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)'
_MONTHS = r'(?:January|February|March|April|May|June|July|August|September|October|November|December)'

TITLE_CLEANUP_PATTERNS = [
    # "Live music: ", "Comedy - "
    re.compile(r'^(?:live\s+music|music|comedy|theater|performance|show)\s*[:\-–—]\s*', re.IGNORECASE),
    # "Saturday December 20th - ", "Friday, January 3rd - "
    re.compile(rf'^{_WEEKDAYS},?\s+{_MONTHS}\s+\d{{1,2}}(?:st|nd|rd|th)?\s*[-–—]\s*', re.IGNORECASE),
    # "7-10", "7-8:30", "8:30-11pm", "7pm-10pm"
    re.compile(r',?\s*\d{1,2}(?::\d{2})?\s*(?:am|pm)?\s*-\s*\d{1,2}(?::\d{2})?\s*(?:am|pm)?', re.IGNORECASE),
    # "7pm", "8:30pm"
    re.compile(r',?\s*\d{1,2}(?::\d{2})?\s*(?:am|pm)', re.IGNORECASE),
    # "(Sign-Up @ 6)", "(doors 7pm)"
    re.compile(r'\s*\([^)]*(?:sign[- ]?up|doors|@|\d{1,2}(?::\d{2})?(?:am|pm)?)[^)]*\)', re.IGNORECASE),
]


def clean_event_title(title: str) -> str:
    """
    Remove date prefixes, time suffixes and category labels from a title.

    Returns the original title when cleaning would leave nothing.
    """
    if not title:
        return ""

    cleaned = title
    for pattern in TITLE_CLEANUP_PATTERNS:
        cleaned = pattern.sub('', cleaned)
    cleaned = re.sub(r'[,\s]+$', '', cleaned).strip()

    return cleaned if cleaned else title


def contains_html(text: str) -> bool:
    return bool(re.search(r'<[^>]+>', text or ''))


def strip_html_and_clean(text: str) -> str:
    """Strip tags (and script/style bodies), decode entities and collapse whitespace."""
    soup = BeautifulSoup(text or '', 'html.parser')
    for tag in soup.find_all(['script', 'style']):
        tag.decompose()
    return re.sub(r'\s+', ' ', soup.get_text()).strip()


def sanitize_html(markup: str) -> str:
    """Remove script blocks and inline event handlers."""
    soup = BeautifulSoup(markup, 'html.parser')
    for script in soup.find_all('script'):
        script.decompose()
    for tag in soup.find_all(True):
        for attr in [a for a in tag.attrs if a.lower().startswith('on')]:
            del tag[attr]
    return str(soup)


def process_descriptions(description: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a scraped description into (plain_text, html).

    HTML input is preserved (sanitized) as the second element; plain text
    input yields None for it.
    """
    if not description:
        return None, None

    plain = strip_html_and_clean(description)
    if contains_html(description):
        return plain, sanitize_html(description)
    return plain, None


def generate_slug(text: str, date: Optional[datetime] = None) -> str:
    """
    Generate a URL-safe slug, optionally suffixed with the event date.

    Examples:
        "Deer Tick w/ Perennial" -> "deer-tick-w-perennial"
        ("Open Mic", datetime(2025, 12, 20)) -> "open-mic-2025-12-20"
    """
    slug = re.sub(r'[^a-z0-9]+', '-', (text or '').lower()).strip('-')[:80]
    if date:
        slug = f"{slug}-{date.strftime('%Y-%m-%d')}"
    return slug
