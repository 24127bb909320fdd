"""Sanitization tests — slug checks and filter value cleaning."""

import pytest

from sitefeed.core.errors import InputValidationError
from sitefeed.core.sanitize import (
    clean_filter_value,
    is_valid_slug,
    normalize_slug,
    require_slug,
)


@pytest.mark.parametrize("slug", ["hello", "hello-world", "2026-recap", "a"])
def test_valid_slugs(slug):
    assert is_valid_slug(slug)


@pytest.mark.parametrize("slug", ["", "Hello", "hello world", "../etc", "a" * 201, None, 5, "ok\n"])
def test_invalid_slugs(slug):
    assert not is_valid_slug(slug)


def test_require_slug_returns_input_unchanged():
    assert require_slug("hello-world") == "hello-world"


def test_require_slug_rejects_with_field_name():
    with pytest.raises(InputValidationError) as exc:
        require_slug("Hello World")
    assert exc.value.field == "slug"
    assert exc.value.http_status == 400


@pytest.mark.parametrize("raw, expected", [
    ("Hello, World_2", "hello-world-2"),
    ("  --Already--slugged--  ", "already-slugged"),
    ("Ünïcode Títle", "ncode-ttle"),
    ("a   b\tc", "a-b-c"),
])
def test_normalize_slug(raw, expected):
    assert normalize_slug(raw) == expected


def test_normalize_slug_is_idempotent():
    once = normalize_slug("Some Post Title!")
    assert normalize_slug(once) == once


def test_clean_filter_value_strips_control_chars_and_caps_length():
    assert clean_filter_value("  hello\x00\x1f  ") == "hello"
    assert len(clean_filter_value("x" * 500)) == 200
