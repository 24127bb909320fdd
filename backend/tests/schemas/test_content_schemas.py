"""Content model tests — registry, typed Post views and per-resource rules."""

from datetime import datetime, timezone

import pytest

from sitefeed.core.content_schema import collect_violations
from sitefeed.core.domain_types import ViolationReason
from sitefeed.core.errors import ResourceNotFoundError
from sitefeed.schemas.content import SHAPES, Category, Page, Post, get_shape


def _record():
    return {
        "id": 1,
        "documentId": "abc",
        "title": "Hello",
        "slug": "hello",
        "content": "Body",
        "publishedAt": "2026-01-15T10:30:00.000Z",
        "author": {"name": "Ada", "avatarUrl": "https://cdn.test/ada.png"},
        "readingTime": 3,
        "createdAt": "2026-01-14T00:00:00.000Z",
    }


def test_registry_covers_site_resources():
    assert set(SHAPES) == {"posts", "authors", "categories", "pages"}
    assert get_shape("posts") is Post


def test_unknown_resource_is_not_found():
    with pytest.raises(ResourceNotFoundError) as exc:
        get_shape("users")
    assert exc.value.http_status == 404


def test_post_from_camel_case_record():
    post = Post.model_validate(_record())
    assert post.published_at == datetime(2026, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert post.reading_time == 3
    assert post.author.avatar_url == "https://cdn.test/ada.png"


def test_post_defaults_for_optional_fields():
    post = Post.model_validate(_record())
    assert post.tags == []
    assert post.excerpt is None
    assert post.cover_url is None


def test_extra_cms_fields_kept():
    dumped = Post.model_validate(_record()).model_dump(by_alias=True)
    assert dumped["documentId"] == "abc"
    assert dumped["createdAt"] == "2026-01-14T00:00:00.000Z"
    assert "publishedAt" in dumped


def test_category_requires_slug():
    violations = collect_violations({"name": "News"}, Category)
    assert [(v.path, v.reason) for v in violations] == [("slug", ViolationReason.MISSING)]


def test_page_locale_limited_to_supported():
    page = {"title": "About", "slug": "about", "content": "x", "locale": "pt-BR"}
    assert collect_violations(page, Page) == []
    page["locale"] = "klingon"
    assert [(v.path, v.reason) for v in collect_violations(page, Page)] == [
        ("locale", ViolationReason.NOT_IN_CHOICES),
    ]
