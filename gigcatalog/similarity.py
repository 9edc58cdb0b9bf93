"""
Fuzzy title similarity for event deduplication.

Title drift between sources is mostly opener lists, date/venue suffixes and
punctuation rather than uniform character noise, so the score is the maximum
of three independent strategies:

1. Direct Levenshtein similarity on normalized titles
2. Headliner similarity ("Deer Tick" vs "Deer Tick w/ Perennial")
3. Prefix similarity ("Open Mic Night" vs "Open Mic Night - December 20")
"""

import re
from typing import List, Optional, Pattern

from Levenshtein import distance

from gigcatalog.config import load_matching_rules
from gigcatalog.lib.text import normalize_for_comparison

DEFAULT_OPENER_PATTERNS = [
    r'\s+w/\s*.+$',
    r'\s+with\s+.+$',
    r'\s+feat\.?\s*.+$',
    r'\s+featuring\s+.+$',
    r'\s+\+\s*.+$',
    r'\s+and\s+.+$',
]

HEADLINER_MATCH_SCORE = 0.9
HEADLINER_FLOOR = 0.85
PREFIX_MIN_LENGTH = 5
PREFIX_MIN_COVERAGE = 0.5
PREFIX_FLOOR = 0.8


def compile_opener_patterns(patterns: Optional[List[str]] = None) -> List[Pattern]:
    """Compile opener patterns, defaulting to matching.yaml then the built-ins."""
    if patterns is None:
        patterns = load_matching_rules().get('opener_patterns') or DEFAULT_OPENER_PATTERNS
    return [re.compile(p, re.IGNORECASE) for p in patterns]


OPENER_PATTERNS = compile_opener_patterns()


def extract_headliner(title: str, patterns: Optional[List[Pattern]] = None) -> str:
    """
    Remove trailing opener clauses from a title.

    "Headliner w/ Opener", "Headliner feat. Opener", "Headliner + Opener"
    and "Headliner and Opener" all reduce to "Headliner".
    """
    headliner = title or ""
    for pattern in (OPENER_PATTERNS if patterns is None else patterns):
        headliner = pattern.sub('', headliner)
    return headliner.strip()


def levenshtein_similarity(s1: str, s2: str) -> float:
    """(maxLen - distance) / maxLen on already-normalized strings."""
    if s1 == s2:
        return 1.0
    longest = max(len(s1), len(s2))
    if longest == 0:
        return 1.0
    return (longest - distance(s1, s2)) / longest


def direct_similarity(title1: str, title2: str) -> float:
    return levenshtein_similarity(normalize_for_comparison(title1), normalize_for_comparison(title2))


def headliner_similarity(title1: str, title2: str) -> float:
    """
    Compare headliners once opener clauses are stripped.

    Returns 0.0 when stripping changed neither title. Near-identical
    headliners (>= 0.9) are floored at 0.85.
    """
    h1 = normalize_for_comparison(extract_headliner(title1))
    h2 = normalize_for_comparison(extract_headliner(title2))

    if h1 == normalize_for_comparison(title1) and h2 == normalize_for_comparison(title2):
        return 0.0

    score = levenshtein_similarity(h1, h2)
    if score >= HEADLINER_MATCH_SCORE:
        score = max(score, HEADLINER_FLOOR)
    return score


def prefix_similarity(title1: str, title2: str) -> float:
    """
    Score one title extending the other.

    The shorter normalized title (5+ chars) must be a prefix of the longer;
    coverage of at least half is floored at 0.8.
    """
    s1 = normalize_for_comparison(title1)
    s2 = normalize_for_comparison(title2)
    shorter, longer = sorted((s1, s2), key=len)

    if len(shorter) < PREFIX_MIN_LENGTH or not longer.startswith(shorter):
        return 0.0

    score = len(shorter) / len(longer)
    if score >= PREFIX_MIN_COVERAGE:
        score = max(score, PREFIX_FLOOR)
    return score


def similarity_score(title1: str, title2: str) -> float:
    """Similarity in [0, 1] between two raw titles; symmetric."""
    if normalize_for_comparison(title1) == normalize_for_comparison(title2):
        return 1.0

    return max(
        direct_similarity(title1, title2),
        headliner_similarity(title1, title2),
        prefix_similarity(title1, title2),
    )
