"""
Sitemap, RSS feed and robots.txt served on demand from live content.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response

from folio.actions.blog import list_published_blog_posts
from folio.actions.portfolio import list_portfolio_items
from folio.cache import TaggedCache
from folio.config import get_settings
from folio.dependencies import get_cache, get_store
from folio.seo import (
    blog_entries,
    portfolio_entries,
    render_robots,
    render_rss,
    render_sitemap,
    static_pages,
)
from folio.store import DocumentStore

router = APIRouter()

_CACHE_HEADERS = {"Cache-Control": "public, max-age=3600, s-maxage=3600"}


@router.get("/sitemap.xml")
def sitemap(
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    settings = get_settings()
    entries = (
        static_pages()
        + blog_entries(list_published_blog_posts(store, cache))
        + portfolio_entries(list_portfolio_items(store, cache))
    )
    return Response(
        render_sitemap(entries, settings.site_url),
        media_type="application/xml",
        headers=_CACHE_HEADERS,
    )


@router.get("/feed.xml")
def feed(
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    settings = get_settings()
    body = render_rss(
        list_published_blog_posts(store, cache),
        settings.site_url,
        title=f"{settings.site_name} Blog",
        description=settings.site_description,
        contact_email=settings.contact_email,
        site_name=settings.site_name,
    )
    return Response(body, media_type="application/rss+xml", headers=_CACHE_HEADERS)


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots():
    return PlainTextResponse(render_robots(get_settings().site_url), headers=_CACHE_HEADERS)
