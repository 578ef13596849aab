"""
Aggregate fetch of all public content for the home page and the JSON API.
"""

from __future__ import annotations

import logging
from typing import Optional

from folio.actions.about import get_about_me
from folio.actions.announcements import list_announcements
from folio.actions.blog import list_blog_categories, list_published_blog_posts
from folio.actions.portfolio import list_portfolio_items
from folio.actions.settings import get_not_found_page, get_site_settings
from folio.actions.skills import list_skills
from folio.actions.testimonials import list_public_testimonials
from folio.cache import TaggedCache
from folio.store import DocumentStore
from shared.content import AppData

logger = logging.getLogger(__name__)


def fetch_all_data(store: DocumentStore, cache: Optional[TaggedCache] = None) -> AppData:
    """Each part falls back on its own, so one failing collection never blanks the page."""
    data = AppData(
        portfolio_items=list_portfolio_items(store, cache),
        skills=list_skills(store, cache),
        about_me=get_about_me(store, cache),
        site_settings=get_site_settings(store, cache),
        not_found_page=get_not_found_page(store),
        blog_posts=list_published_blog_posts(store, cache),
        blog_categories=list_blog_categories(store),
        testimonials=list_public_testimonials(store),
        announcements=list_announcements(store),
    )
    logger.debug(
        "Fetched app data: %d portfolio items, %d skills, %d posts",
        len(data.portfolio_items),
        len(data.skills),
        len(data.blog_posts),
    )
    return data
