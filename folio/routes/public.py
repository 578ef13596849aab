"""
Server-rendered public pages.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse

from folio.actions.about import get_about_me
from folio.actions.announcements import get_active_announcement
from folio.actions.blog import (
    get_blog_post_by_slug,
    increment_blog_post_views,
    list_blog_categories,
    list_published_blog_posts,
)
from folio.actions.messages import submit_contact_form
from folio.actions.portfolio import get_portfolio_item_by_slug, list_portfolio_items
from folio.actions.settings import get_not_found_page, get_site_settings
from folio.actions.skills import list_skills, skills_by_category
from folio.actions.testimonials import list_public_testimonials
from folio.cache import TaggedCache
from folio.config import get_settings
from folio.dependencies import get_cache, get_store
from folio.errors import SiteUnderMaintenance
from folio.security import limiter
from folio.store import DocumentStore
from folio.templating import flash, templates
from shared.content import BlogStatus

logger = logging.getLogger(__name__)

HOME_PORTFOLIO_COUNT = 3
HOME_POSTS_COUNT = 3


def ensure_site_available(
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
) -> None:
    if get_site_settings(store, cache).maintenance_mode:
        raise SiteUnderMaintenance()


router = APIRouter(dependencies=[Depends(ensure_site_available)])


def render_page(
    request: Request,
    template: str,
    store: DocumentStore,
    cache: Optional[TaggedCache],
    *,
    status_code: int = 200,
    **context,
):
    """Renders a public page with the shared layout context."""
    context.update(
        site=get_site_settings(store, cache),
        about=get_about_me(store, cache),
        announcement=get_active_announcement(store, cache),
    )
    return templates.TemplateResponse(request, template, context, status_code=status_code)


def render_not_found(request: Request, store: DocumentStore, cache: Optional[TaggedCache]):
    return render_page(
        request,
        "pages/not_found.html",
        store,
        cache,
        status_code=404,
        page=get_not_found_page(store),
    )


@router.get("/")
def home(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    skills = list_skills(store, cache)
    return render_page(
        request,
        "pages/home.html",
        store,
        cache,
        portfolio_items=list_portfolio_items(store, cache)[:HOME_PORTFOLIO_COUNT],
        posts=list_published_blog_posts(store, cache)[:HOME_POSTS_COUNT],
        skill_groups=skills_by_category(skills),
        testimonials=list_public_testimonials(store),
    )


@router.get("/about")
def about(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return render_page(request, "pages/about.html", store, cache)


@router.get("/portfolio")
def portfolio(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return render_page(
        request,
        "pages/portfolio_list.html",
        store,
        cache,
        items=list_portfolio_items(store, cache),
    )


@router.get("/portfolio/{slug}")
def portfolio_detail(
    slug: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    item = get_portfolio_item_by_slug(store, slug)
    if item is None:
        raise HTTPException(status_code=404, detail="Portfolio item not found")
    return render_page(request, "pages/portfolio_detail.html", store, cache, item=item)


@router.get("/blog")
def blog(
    request: Request,
    category: Optional[str] = None,
    tag: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    posts = list_published_blog_posts(store, cache)
    if category:
        posts = [post for post in posts if post.category.lower() == category.lower()]
    if tag:
        posts = [post for post in posts if tag.lower() in (t.lower() for t in post.tags)]
    return render_page(
        request,
        "pages/blog_list.html",
        store,
        cache,
        posts=posts,
        categories=list_blog_categories(store),
        selected_category=category,
        selected_tag=tag,
    )


@router.get("/blog/{slug}")
def blog_detail(
    slug: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    post = get_blog_post_by_slug(store, slug)
    if post is None or post.status != BlogStatus.PUBLISHED:
        raise HTTPException(status_code=404, detail="Blog post not found")
    increment_blog_post_views(store, post.id)
    related = [
        other
        for other in list_published_blog_posts(store, cache)
        if other.id != post.id and other.category == post.category
    ][:3]
    return render_page(
        request, "pages/blog_detail.html", store, cache, post=post, related=related
    )


@router.get("/skills")
def skills(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return render_page(
        request,
        "pages/skills.html",
        store,
        cache,
        skill_groups=skills_by_category(list_skills(store, cache)),
    )


@router.get("/contact")
def contact(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return render_page(request, "pages/contact.html", store, cache, state=None)


@router.post("/contact")
@limiter.limit(lambda: get_settings().contact_rate_limit)
async def contact_submit(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    form_data = await request.form()
    client = request.client.host if request.client else "unknown"
    state = submit_contact_form(store, form_data, cache=cache, client=client)
    if state.ok:
        flash(request, state.message, "success")
        return RedirectResponse("/contact", status_code=303)
    return render_page(
        request, "pages/contact.html", store, cache, status_code=400, state=state
    )


@router.get("/privacy")
def privacy(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return render_page(request, "pages/privacy.html", store, cache)


@router.get("/terms")
def terms(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return render_page(request, "pages/terms.html", store, cache)


@router.get("/cookies")
def cookies(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return render_page(request, "pages/cookies.html", store, cache)
