"""Regression tests for input normalization helpers."""

from livesearch.text import clamp, hash_params, parse_int, sanitize_text_field, sanitize_title


def test_sanitize_text_field_strips_markup_and_whitespace():
    assert sanitize_text_field("  Rolex <script>alert(1)</script>\n\tSub ") == "Rolex alert(1) Sub"
    assert sanitize_text_field("rol%20ex") == "rolex"
    assert sanitize_text_field(None) == ""


def test_sanitize_title_builds_slugs():
    assert sanitize_title("brand_collection") == "brand_collection"
    assert sanitize_title("Montres d'été") == "montres-dete"
    assert sanitize_title("  Lux -- Watches  ") == "lux-watches"
    assert sanitize_title("") == ""


def test_parse_int_uses_leading_digits():
    assert parse_int("12abc") == 12
    assert parse_int("abc") == 0
    assert parse_int(" -3") == -3
    assert parse_int(None) == 0
    assert parse_int(7) == 7


def test_clamp_bounds():
    assert clamp(999, 1, 50) == 50
    assert clamp(-1, 1, 50) == 1
    assert clamp(6, 1, 50) == 6


def test_hash_params_ignores_key_order():
    assert hash_params({"a": 1, "b": 2}) == hash_params({"b": 2, "a": 1})
    assert hash_params({"q": "rol"}) != hash_params({"q": "role"})
