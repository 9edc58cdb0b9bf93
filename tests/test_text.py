"""
Tests for title/description text helpers
"""
from datetime import datetime

from gigcatalog.lib.text import (
    clean_event_title,
    contains_html,
    decode_html_entities,
    generate_slug,
    normalize_for_comparison,
    process_descriptions,
    sanitize_html,
)


def test_decode_html_entities():
    assert decode_html_entities("Rock &amp; Roll") == "Rock & Roll"
    assert decode_html_entities("Don&#039;t Stop") == "Don't Stop"
    assert decode_html_entities("Don&#x27;t Stop") == "Don't Stop"
    assert decode_html_entities(None) == ""


def test_normalize_for_comparison():
    assert normalize_for_comparison("Band Name") == "band name"
    assert normalize_for_comparison("Rock &amp; Roll") == "rock roll"
    assert normalize_for_comparison("Don&#039;t  Stop!") == "dont stop"
    assert normalize_for_comparison("  Deer Tick w/ Perennial ") == "deer tick w perennial"
    assert normalize_for_comparison("") == ""
    assert normalize_for_comparison(None) == ""


def test_normalize_keeps_accented_letters():
    assert normalize_for_comparison("Beyoncé") == "beyoncé"


def test_clean_event_title_strips_category_prefix():
    assert clean_event_title("Live Music: Deer Tick") == "Deer Tick"
    assert clean_event_title("Comedy - Open Mic") == "Open Mic"


def test_clean_event_title_strips_date_prefix():
    assert clean_event_title("Saturday December 20th - Open Mic") == "Open Mic"
    assert clean_event_title("Friday, January 3rd - Jazz Night") == "Jazz Night"


def test_clean_event_title_strips_times():
    assert clean_event_title("Jazz Jam 7-10pm") == "Jazz Jam"
    assert clean_event_title("Karaoke, 8pm") == "Karaoke"
    assert clean_event_title("Open Mic (Sign-Up @ 6)") == "Open Mic"


def test_clean_event_title_never_empties():
    """A title that is nothing but noise is returned unchanged"""
    assert clean_event_title("7pm") == "7pm"
    assert clean_event_title("") == ""


def test_clean_event_title_leaves_band_names():
    assert clean_event_title("Blink-182") == "Blink-182"
    assert clean_event_title("The Rolling Stones") == "The Rolling Stones"


def test_process_descriptions_plain_text():
    assert process_descriptions("Just  a   show") == ("Just a show", None)
    assert process_descriptions(None) == (None, None)
    assert process_descriptions("") == (None, None)


def test_process_descriptions_html():
    plain, markup = process_descriptions("<p>Hello <b>World</b> &amp; friends</p>")
    assert plain == "Hello World & friends"
    assert markup == "<p>Hello <b>World</b> &amp; friends</p>"


def test_sanitize_html_removes_scripts_and_handlers():
    markup = '<p onclick="steal()">Hi</p><script>alert(1)</script>'
    assert sanitize_html(markup) == '<p>Hi</p>'
    assert contains_html(markup)
    assert not contains_html("no tags here")


def test_generate_slug():
    assert generate_slug("Deer Tick w/ Perennial") == "deer-tick-w-perennial"
    assert generate_slug("Open Mic", datetime(2025, 12, 20, 20, 0)) == "open-mic-2025-12-20"


def test_plain_description_drops_script_bodies():
    plain, markup = process_descriptions('<p>Hi</p><script>alert(1)</script>')
    assert plain == "Hi"
    assert markup == "<p>Hi</p>"
