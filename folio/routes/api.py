"""
Read-only JSON API over the public content.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from folio.actions.announcements import get_active_announcement
from folio.actions.blog import list_published_blog_posts
from folio.actions.data import fetch_all_data
from folio.actions.portfolio import list_portfolio_items
from folio.actions.skills import list_skills
from folio.cache import TaggedCache
from folio.dependencies import get_cache, get_store
from folio.store import DocumentStore
from shared.json_utils import convert_keys

router = APIRouter()


def _payload(value):
    if isinstance(value, list):
        return [_payload(item) for item in value]
    return convert_keys(asdict(value), "snake_to_camel")


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/data")
def get_data(
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return _payload(fetch_all_data(store, cache))


@router.get("/portfolio")
def get_portfolio(
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return {"items": _payload(list_portfolio_items(store, cache))}


@router.get("/blog")
def get_blog(
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return {"posts": _payload(list_published_blog_posts(store, cache))}


@router.get("/skills")
def get_skills(
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return {"skills": _payload(list_skills(store, cache))}


@router.get("/announcements/active")
def get_active(
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    announcement = get_active_announcement(store, cache)
    return {"announcement": _payload(announcement) if announcement else None}
