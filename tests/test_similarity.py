"""
Tests for title similarity scoring
"""
import pytest

from gigcatalog.similarity import (
    compile_opener_patterns,
    direct_similarity,
    extract_headliner,
    headliner_similarity,
    levenshtein_similarity,
    prefix_similarity,
    similarity_score,
)

TITLE_PAIRS = [
    ("The Beatles", "Led Zeppelin"),
    ("Deer Tick w/ Perennial", "Deer Tick"),
    ("Open Mic Night", "Open Mic Night - December 20"),
    ("Rock &amp; Roll", "Rock & Roll"),
    ("Test", ""),
    ("Nutcracker", "The Nutcracker"),
]


def test_identical_titles_score_one():
    assert similarity_score("Test Event", "Test Event") == 1.0


def test_normalization_only_differences_score_one():
    assert similarity_score("Band Name", "band name") == 1.0
    assert similarity_score("Rock &amp; Roll", "Rock & Roll") == 1.0
    assert similarity_score("Don't Stop!", "dont stop") == 1.0


def test_unrelated_titles_score_low():
    assert similarity_score("The Beatles", "Led Zeppelin") < 0.5


def test_empty_title_scores_low():
    assert similarity_score("Test", "") < 0.5
    assert similarity_score("", "Test") < 0.5


@pytest.mark.parametrize("a,b", TITLE_PAIRS)
def test_similarity_is_symmetric(a, b):
    assert similarity_score(a, b) == similarity_score(b, a)


@pytest.mark.parametrize("a,b", TITLE_PAIRS)
def test_similarity_is_bounded(a, b):
    assert 0.0 <= similarity_score(a, b) <= 1.0


def test_support_act_matches_headliner():
    assert similarity_score("Deer Tick w/ Perennial", "Deer Tick") >= 0.85
    assert similarity_score("Deer Tick with Perennial", "Deer Tick feat. Someone") >= 0.85


def test_suffix_drift_matches_on_prefix():
    assert similarity_score("Open Mic Night", "Open Mic Night - December 20") >= 0.8


def test_extract_headliner():
    assert extract_headliner("Deer Tick w/ Perennial") == "Deer Tick"
    assert extract_headliner("Deer Tick with Perennial") == "Deer Tick"
    assert extract_headliner("Band feat. Guest") == "Band"
    assert extract_headliner("Band featuring Guest") == "Band"
    assert extract_headliner("Band A + Band B") == "Band A"
    assert extract_headliner("Simon and Garfunkel") == "Simon"
    assert extract_headliner("Solo Artist") == "Solo Artist"


def test_extract_headliner_with_custom_patterns():
    patterns = compile_opener_patterns([r'\s+/\s+.+$'])
    assert extract_headliner("Band A / Band B", patterns) == "Band A"
    assert extract_headliner("Band A w/ Band B", patterns) == "Band A w/ Band B"


def test_headliner_similarity_requires_an_opener():
    assert headliner_similarity("Band Name", "Other Band") == 0.0
    assert headliner_similarity("Deer Tick w/ Perennial", "Deer Tick") == 1.0


def test_prefix_similarity():
    assert prefix_similarity("Open", "Open Mic Night") == 0.0  # shorter than minimum length
    assert prefix_similarity("Open Mic Night", "Open Mic Night - December 20") == 0.8
    assert prefix_similarity("Jazz Night", "Blues Night") == 0.0


def test_levenshtein_similarity():
    assert levenshtein_similarity("abc", "abc") == 1.0
    assert levenshtein_similarity("abc", "abd") == pytest.approx(2 / 3)
    assert levenshtein_similarity("", "") == 1.0
    assert levenshtein_similarity("abc", "") == 0.0


def test_direct_similarity_normalizes():
    assert direct_similarity("ROCK &amp; ROLL", "rock roll") == 1.0


def test_two_empty_titles_are_identical():
    assert similarity_score("", "") == 1.0


@pytest.mark.parametrize("a,b", [
    ("Band Name", "BAND NAME"),
    ("Rock & Roll", "Rock &amp; Roll"),
    ("Don't Stop", "Dont Stop"),
])
def test_normalization_equivalent_pairs(a, b):
    assert similarity_score(a, b) == 1.0


@pytest.mark.parametrize("a,b", [
    ("The Rolling Stones", "Rolling Stones"),
    ("Open Mic Night - December 20", "Open Mic Night"),
])
def test_pairs_at_or_above_match_threshold(a, b):
    assert similarity_score(a, b) >= 0.7


@pytest.mark.parametrize("a,b", [
    ("Open Mic Night", "Comedy Night"),
    ("DJ Shadow", "Shadow"),
])
def test_pairs_below_match_threshold(a, b):
    assert similarity_score(a, b) < 0.7
