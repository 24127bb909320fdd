"""Content Routes — validated CMS content for the static-site build.

Invariants:
    - Every record served has passed its resource model
    - Fetch/validation failures reach callers only as CONTENT_UNAVAILABLE
      ("Failed to load content"); details stay in the logs
    - Slugs are sanitized before any CMS call
"""

from fastapi import APIRouter, Depends

from sitefeed.config import Settings, get_settings
from sitefeed.infrastructure.cms_client import CMSClient, get_cms_client
from sitefeed.schemas.content import ContentListResponse, Post, PublicSiteConfig
from sitefeed.services.content_loader import ContentLoader

router = APIRouter(prefix="/api/v1", tags=["content"])


def get_content_loader(cms: CMSClient = Depends(get_cms_client)) -> ContentLoader:
    return ContentLoader(cms)


@router.get("/posts", response_model=list[Post])
async def list_posts(loader: ContentLoader = Depends(get_content_loader)):
    """All published posts, newest first."""
    return await loader.load_posts()


@router.get("/posts/{slug}", response_model=Post)
async def get_post(slug: str, loader: ContentLoader = Depends(get_content_loader)):
    return await loader.load_post(slug)


@router.get("/content/{resource}", response_model=ContentListResponse)
async def list_content(
    resource: str, loader: ContentLoader = Depends(get_content_loader),
):
    """Validated records of any registered content type."""
    records = await loader.load_collection(resource)
    return ContentListResponse(resource=resource, count=len(records), data=records)


@router.get("/content/{resource}/{slug}")
async def get_content_entry(
    resource: str, slug: str, loader: ContentLoader = Depends(get_content_loader),
):
    return {"resource": resource, "data": await loader.load_entry(resource, slug)}


@router.get("/site/config", response_model=PublicSiteConfig)
async def public_site_config(settings: Settings = Depends(get_settings)):
    """Client-exposed configuration only. Never the server-side URL or tokens."""
    return PublicSiteConfig(cms_url=settings.public_cms_url)
