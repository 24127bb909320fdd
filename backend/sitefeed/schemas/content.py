"""Content Schemas — pydantic models for the CMS content types the site consumes.

Invariants:
    - One model per resource in SHAPES; the same model validates raw CMS records
      (core/content_schema.py) and types the /posts responses
    - Validation reads CMS JSON keys (camelCase aliases); Python attributes are snake_case
    - Unknown extra CMS fields (id, documentId, createdAt...) are allowed and kept
    - Booleans are never accepted where an integer is required (StrictInt)
    - Datetimes must arrive as ISO-8601 strings, never as numbers

Design Decisions:
    - Email/URL checks raise their own error types (email_invalid, url_invalid) so
      each failure maps to a single ViolationReason
"""

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import (
    AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, HttpUrl,
    StrictInt, StrictStr, StringConstraints, TypeAdapter, ValidationError,
)
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from sitefeed.core.errors import ResourceNotFoundError
from sitefeed.core.sanitize import MAX_SLUG_LENGTH, SLUG_PATTERN

_HTTP_URL = TypeAdapter(HttpUrl)


def _check_email(value: str) -> str:
    try:
        validate_email(value)
    except PydanticCustomError as e:
        raise PydanticCustomError(
            "email_invalid", "not a valid email address: {reason}",
            {"reason": (e.context or {}).get("reason", "")},
        ) from e
    return value


def _check_http_url(value: str) -> str:
    try:
        _HTTP_URL.validate_python(value)
    except ValidationError as e:
        raise PydanticCustomError(
            "url_invalid", "not an http(s) URL: {reason}",
            {"reason": e.errors()[0]["msg"]},
        ) from e
    return value


def _require_iso_string(value: Any) -> Any:
    # Lax datetime parsing would accept unix timestamps
    if isinstance(value, (str, datetime)):
        return value
    raise PydanticCustomError(
        "datetime_type", "Input should be an ISO-8601 datetime string",
    )


SlugStr = Annotated[StrictStr, StringConstraints(
    min_length=1, max_length=MAX_SLUG_LENGTH, pattern=SLUG_PATTERN,
)]
EmailString = Annotated[StrictStr, AfterValidator(_check_email)]
HttpUrlString = Annotated[StrictStr, AfterValidator(_check_http_url)]
IsoDatetime = Annotated[datetime, BeforeValidator(_require_iso_string)]
Locale = Literal["en", "pt-BR", "es", "fr", "de"]


class ContentRecord(BaseModel):
    """Base for CMS content models: extra fields pass through untouched."""
    model_config = ConfigDict(extra="allow")


class Author(ContentRecord):
    """Post author (populated relation)."""
    name: StrictStr = Field(min_length=1, max_length=100)
    email: EmailString | None = None
    avatar_url: HttpUrlString | None = Field(None, alias="avatarUrl")


class Post(ContentRecord):
    """Blog post as consumed by the static-site build."""
    title: StrictStr = Field(min_length=1, max_length=200)
    slug: SlugStr
    content: StrictStr = Field(min_length=1)
    published_at: IsoDatetime = Field(alias="publishedAt")
    author: Author
    excerpt: Annotated[StrictStr, Field(max_length=500)] | None = None
    tags: list[Annotated[StrictStr, Field(min_length=1, max_length=50)]] = Field(
        default_factory=list, max_length=20,
    )
    reading_time: Annotated[StrictInt, Field(ge=0, le=600)] | None = Field(
        None, alias="readingTime",
    )
    cover_url: HttpUrlString | None = Field(None, alias="coverUrl")


class Category(ContentRecord):
    name: StrictStr = Field(min_length=1, max_length=100)
    slug: SlugStr
    description: Annotated[StrictStr, Field(max_length=500)] | None = None


class Page(ContentRecord):
    title: StrictStr = Field(min_length=1, max_length=200)
    slug: SlugStr
    content: StrictStr = Field(min_length=1)
    locale: Locale = "en"


SHAPES: dict[str, type[ContentRecord]] = {
    "posts": Post,
    "authors": Author,
    "categories": Category,
    "pages": Page,
}


def get_shape(resource: str) -> type[ContentRecord]:
    """Model registered for a resource, or 404 for resources the site does not read."""
    shape = SHAPES.get(resource)
    if shape is None:
        raise ResourceNotFoundError("Content type", resource)
    return shape


class ContentListResponse(BaseModel):
    """Validated records of one content type."""
    resource: str
    count: int
    data: list[dict]


class PublicSiteConfig(BaseModel):
    """Configuration safe to ship to browsers."""
    cms_url: str
