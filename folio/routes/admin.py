"""
Admin console: session login and the content management pages.

Every page except login is gated by `require_admin`. Form posts follow
post/redirect/get: success flashes a toast and redirects back to the listing,
failure re-renders the form with its errors.
"""

from __future__ import annotations

import logging
import re
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse

from folio.actions.about import (
    get_about_me,
    save_contact_socials,
    save_education,
    save_experience,
    save_profile_bio,
)
from folio.actions.announcements import (
    delete_announcement,
    list_announcements,
    submit_announcement,
    toggle_announcement,
)
from folio.actions.base import ActionResult, FormState, parse_form, raw_form
from folio.actions.blog import (
    delete_blog_category,
    delete_blog_post,
    get_blog_post,
    list_blog_categories,
    list_blog_posts,
    save_blog_category,
    save_blog_post,
)
from folio.actions.messages import (
    delete_contact_message,
    list_contact_messages,
    mark_message_as_read,
    unread_count,
)
from folio.actions.portfolio import (
    delete_portfolio_item,
    list_portfolio_items,
    portfolio_item_from_document,
    save_portfolio_item,
)
from folio.actions.settings import (
    get_not_found_page,
    get_site_settings,
    save_not_found_page,
    save_site_settings,
    seed_database,
)
from folio.actions.skills import delete_skill, list_skills, save_skill
from folio.actions.testimonials import (
    delete_testimonial,
    list_testimonials,
    save_testimonial,
    update_testimonial_status,
)
from folio.auth import AdminUser, AuthClient
from folio.cache import TaggedCache, revalidate_all
from folio.config import get_settings
from folio.dependencies import (
    get_auth_client,
    get_cache,
    get_storage_client,
    get_store,
    require_admin,
)
from folio.errors import AuthError
from folio.logging_utils import log_security_event
from folio.schemas import LoginForm
from folio.security import limiter
from folio.storage import StorageClient
from folio.store import DocumentStore
from folio.templating import flash, templates
from shared.constants import PORTFOLIO_COLLECTION, SKILL_CATEGORIES
from shared.content import BlogStatus, TestimonialStatus

logger = logging.getLogger(__name__)

DEFAULT_NEXT = "/admin/dashboard"
RECENT_MESSAGES_COUNT = 5

auth_router = APIRouter(prefix="/admin")
router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


def _safe_next(value) -> str:
    """Only same-site admin paths are accepted as a post-login target."""
    target = str(value or "")
    if target.startswith("/admin") and not target.startswith("//"):
        return target
    return DEFAULT_NEXT


def _render(request: Request, template: str, *, status_code: int = 200, **context):
    return templates.TemplateResponse(
        request, f"admin/{template}", context, status_code=status_code
    )


def _redirect(path: str) -> RedirectResponse:
    return RedirectResponse(path, status_code=303)


def _flash_result(request: Request, result: ActionResult, path: str) -> RedirectResponse:
    flash(request, result.message, "success" if result.success else "error")
    return _redirect(path)


def _error_state(request: Request, state: FormState) -> None:
    flash(request, state.message, "error")


def _indexed_items(form_data, prefix: str) -> list[dict]:
    """Collects `<prefix>-<n>-<field>` inputs into a list of dicts ordered by n."""
    pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)-(\w+)$")
    rows: dict[int, dict] = {}
    for key, value in form_data.multi_items():
        match = pattern.match(key)
        if match:
            rows.setdefault(int(match.group(1)), {})[match.group(2)] = str(value)
    return [rows[index] for index in sorted(rows)]


# -- session ---------------------------------------------------------------


@auth_router.get("/login")
def login_page(request: Request, next: str = DEFAULT_NEXT):
    return _render(request, "login.html", next=_safe_next(next), state=None)


@auth_router.post("/login")
@limiter.limit(lambda: get_settings().login_rate_limit)
async def login(request: Request, auth: AuthClient = Depends(get_auth_client)):
    settings = get_settings()
    form_data = await request.form()
    next_path = _safe_next(form_data.get("next"))
    raw = raw_form(form_data, list(LoginForm.model_fields))
    form, error_state = parse_form(LoginForm, raw, "Please enter your email and password.")
    if error_state:
        error_state.form_data.pop("password", None)
        return _render(
            request, "login.html", status_code=400, next=next_path, state=error_state
        )

    allowed = settings.admin_email_list
    try:
        if allowed and form.email.lower() not in allowed:
            raise AuthError("This account is not authorized to access the admin console.")
        id_token = auth.sign_in_with_password(form.email, form.password)
        session_cookie = auth.create_session_cookie(
            id_token, timedelta(days=settings.session_expires_days)
        )
    except AuthError as exc:
        log_security_event("ADMIN_LOGIN_FAILED", email=form.email, reason=str(exc))
        state = FormState(message=str(exc), status="error", form_data={"email": form.email})
        return _render(request, "login.html", status_code=401, next=next_path, state=state)

    log_security_event("ADMIN_LOGIN_SUCCEEDED", email=form.email)
    response = _redirect(next_path)
    response.set_cookie(
        settings.session_cookie_name,
        session_cookie,
        max_age=int(timedelta(days=settings.session_expires_days).total_seconds()),
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )
    return response


@auth_router.post("/logout")
def logout(request: Request, auth: AuthClient = Depends(get_auth_client)):
    settings = get_settings()
    cookie = request.cookies.get(settings.session_cookie_name)
    if cookie:
        try:
            auth.revoke(auth.verify_session_cookie(cookie).uid)
        except AuthError:
            pass
    response = _redirect("/admin/login")
    response.delete_cookie(settings.session_cookie_name)
    return response


# -- dashboard -------------------------------------------------------------


@router.get("")
def admin_root():
    return _redirect(DEFAULT_NEXT)


@router.get("/dashboard")
def dashboard(
    request: Request,
    user: AdminUser = Depends(require_admin),
    store: DocumentStore = Depends(get_store),
):
    messages = list_contact_messages(store)
    counts = {
        "portfolio": len(list_portfolio_items(store)),
        "skills": len(list_skills(store)),
        "posts": len(list_blog_posts(store)),
        "messages": len(messages),
        "unread": unread_count(messages),
    }
    return _render(
        request,
        "dashboard.html",
        user=user,
        counts=counts,
        recent_messages=messages[:RECENT_MESSAGES_COUNT],
    )


# -- portfolio -------------------------------------------------------------


def _portfolio_values(item) -> dict:
    return {
        "id": item.id,
        "title": item.title,
        "description": item.description,
        "long_description": item.long_description,
        "image1": item.images[0] if item.images else "",
        "image2": item.images[1] if len(item.images) > 1 else "",
        "tags_string": ", ".join(item.tags),
        "live_url": item.live_url,
        "repo_url": item.repo_url,
        "slug": item.slug,
        "data_ai_hint": item.data_ai_hint,
        "readme_content": item.readme_content,
    }


@router.get("/portfolio")
def portfolio_list(request: Request, store: DocumentStore = Depends(get_store)):
    return _render(request, "portfolio_list.html", items=list_portfolio_items(store))


@router.get("/portfolio/new")
def portfolio_new(request: Request):
    return _render(request, "portfolio_form.html", values={}, errors={})


@router.get("/portfolio/{item_id}/edit")
def portfolio_edit(item_id: str, request: Request, store: DocumentStore = Depends(get_store)):
    data = store.get(PORTFOLIO_COLLECTION, item_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Portfolio item not found")
    item = portfolio_item_from_document(item_id, data)
    return _render(request, "portfolio_form.html", values=_portfolio_values(item), errors={})


@router.post("/portfolio")
async def portfolio_save(
    request: Request,
    store: DocumentStore = Depends(get_store),
    storage: Optional[StorageClient] = Depends(get_storage_client),
    cache: TaggedCache = Depends(get_cache),
):
    state = save_portfolio_item(store, await request.form(), storage=storage, cache=cache)
    if state.ok:
        flash(request, state.message)
        return _redirect("/admin/portfolio")
    _error_state(request, state)
    return _render(
        request,
        "portfolio_form.html",
        status_code=400,
        values=state.form_data,
        errors=state.errors,
    )


@router.post("/portfolio/{item_id}/delete")
def portfolio_delete(
    item_id: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
    storage: Optional[StorageClient] = Depends(get_storage_client),
    cache: TaggedCache = Depends(get_cache),
):
    result = delete_portfolio_item(store, item_id, storage=storage, cache=cache)
    return _flash_result(request, result, "/admin/portfolio")


# -- skills ----------------------------------------------------------------


@router.get("/skills")
def skills_page(request: Request, store: DocumentStore = Depends(get_store)):
    return _render(
        request,
        "skills.html",
        skills=list_skills(store),
        categories=SKILL_CATEGORIES,
        values={},
        errors={},
    )


@router.post("/skills")
async def skills_save(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    state = save_skill(store, await request.form(), cache=cache)
    if state.ok:
        flash(request, state.message)
        return _redirect("/admin/skills")
    _error_state(request, state)
    return _render(
        request,
        "skills.html",
        status_code=400,
        skills=list_skills(store),
        categories=SKILL_CATEGORIES,
        values=state.form_data,
        errors=state.errors,
    )


@router.post("/skills/{skill_id}/delete")
def skills_delete(
    skill_id: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return _flash_result(request, delete_skill(store, skill_id, cache=cache), "/admin/skills")


# -- blog ------------------------------------------------------------------


def _blog_values(post) -> dict:
    return {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "excerpt": post.excerpt,
        "content": post.content,
        "featured_image": post.featured_image,
        "author": post.author,
        "status": str(post.status),
        "tags_string": ", ".join(post.tags),
        "category": post.category,
        "seo_title": post.seo_title,
        "seo_description": post.seo_description,
        "seo_keywords_string": ", ".join(post.seo_keywords),
    }


def _render_blog_form(request: Request, store: DocumentStore, values: dict, errors: dict, status_code: int = 200):
    return _render(
        request,
        "blog_form.html",
        status_code=status_code,
        values=values,
        errors=errors,
        categories=list_blog_categories(store),
        statuses=list(BlogStatus),
    )


@router.get("/blog")
def blog_list(request: Request, store: DocumentStore = Depends(get_store)):
    return _render(request, "blog_list.html", posts=list_blog_posts(store))


@router.get("/blog/new")
def blog_new(request: Request, store: DocumentStore = Depends(get_store)):
    return _render_blog_form(request, store, {"status": str(BlogStatus.DRAFT)}, {})


@router.get("/blog/categories")
def blog_categories(request: Request, store: DocumentStore = Depends(get_store)):
    return _render(
        request, "categories.html", categories=list_blog_categories(store), values={}, errors={}
    )


@router.post("/blog/categories")
async def blog_category_save(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    state = save_blog_category(store, await request.form(), cache=cache)
    if state.ok:
        flash(request, state.message)
        return _redirect("/admin/blog/categories")
    _error_state(request, state)
    return _render(
        request,
        "categories.html",
        status_code=400,
        categories=list_blog_categories(store),
        values=state.form_data,
        errors=state.errors,
    )


@router.post("/blog/categories/{category_id}/delete")
def blog_category_delete(
    category_id: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    result = delete_blog_category(store, category_id, cache=cache)
    return _flash_result(request, result, "/admin/blog/categories")


@router.get("/blog/{post_id}/edit")
def blog_edit(post_id: str, request: Request, store: DocumentStore = Depends(get_store)):
    post = get_blog_post(store, post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return _render_blog_form(request, store, _blog_values(post), {})


@router.post("/blog")
async def blog_save(
    request: Request,
    store: DocumentStore = Depends(get_store),
    storage: Optional[StorageClient] = Depends(get_storage_client),
    cache: TaggedCache = Depends(get_cache),
):
    state = save_blog_post(store, await request.form(), storage=storage, cache=cache)
    if state.ok:
        flash(request, state.message)
        return _redirect("/admin/blog")
    _error_state(request, state)
    return _render_blog_form(request, store, state.form_data, state.errors, status_code=400)


@router.post("/blog/{post_id}/delete")
def blog_delete(
    post_id: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return _flash_result(request, delete_blog_post(store, post_id, cache=cache), "/admin/blog")


# -- announcements ---------------------------------------------------------


@router.get("/announcements")
def announcements_page(request: Request, store: DocumentStore = Depends(get_store)):
    return _render(
        request, "announcements.html", announcements=list_announcements(store), values={}, errors={}
    )


@router.post("/announcements")
async def announcements_publish(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    state = submit_announcement(store, await request.form(), cache=cache)
    if state.ok:
        flash(request, state.message)
        return _redirect("/admin/announcements")
    _error_state(request, state)
    return _render(
        request,
        "announcements.html",
        status_code=400,
        announcements=list_announcements(store),
        values=state.form_data,
        errors=state.errors,
    )


@router.post("/announcements/{announcement_id}/toggle")
def announcements_toggle(
    announcement_id: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    result = toggle_announcement(store, announcement_id, cache=cache)
    return _flash_result(request, result, "/admin/announcements")


@router.post("/announcements/{announcement_id}/delete")
def announcements_delete(
    announcement_id: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    result = delete_announcement(store, announcement_id, cache=cache)
    return _flash_result(request, result, "/admin/announcements")


# -- testimonials ----------------------------------------------------------


def _render_testimonials(request: Request, store: DocumentStore, values: dict, errors: dict, status_code: int = 200):
    return _render(
        request,
        "testimonials.html",
        status_code=status_code,
        testimonials=list_testimonials(store),
        statuses=list(TestimonialStatus),
        values=values,
        errors=errors,
    )


@router.get("/testimonials")
def testimonials_page(request: Request, store: DocumentStore = Depends(get_store)):
    return _render_testimonials(request, store, {}, {})


@router.post("/testimonials")
async def testimonials_save(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    state = save_testimonial(store, await request.form(), cache=cache)
    if state.ok:
        flash(request, state.message)
        return _redirect("/admin/testimonials")
    _error_state(request, state)
    return _render_testimonials(request, store, state.form_data, state.errors, status_code=400)


@router.post("/testimonials/{testimonial_id}/status")
async def testimonials_status(
    testimonial_id: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    form_data = await request.form()
    result = update_testimonial_status(
        store, testimonial_id, str(form_data.get("status") or ""), cache=cache
    )
    return _flash_result(request, result, "/admin/testimonials")


@router.post("/testimonials/{testimonial_id}/delete")
def testimonials_delete(
    testimonial_id: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    result = delete_testimonial(store, testimonial_id, cache=cache)
    return _flash_result(request, result, "/admin/testimonials")


# -- about -----------------------------------------------------------------


def _render_about(
    request: Request,
    store: DocumentStore,
    cache: TaggedCache,
    *,
    section: Optional[str] = None,
    state: Optional[FormState] = None,
):
    status_code = 400 if state else 200
    return _render(
        request,
        "about.html",
        status_code=status_code,
        about=get_about_me(store, cache),
        section=section,
        errors=state.errors if state else {},
        values=state.form_data if state else {},
    )


@router.get("/about")
def about_page(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return _render_about(request, store, cache)


def _about_outcome(request: Request, store, cache, section: str, state: FormState):
    if state.ok:
        flash(request, state.message)
        return _redirect("/admin/about")
    _error_state(request, state)
    return _render_about(request, store, cache, section=section, state=state)


@router.post("/about/profile")
async def about_profile(
    request: Request,
    store: DocumentStore = Depends(get_store),
    storage: Optional[StorageClient] = Depends(get_storage_client),
    cache: TaggedCache = Depends(get_cache),
):
    state = save_profile_bio(store, await request.form(), storage=storage, cache=cache)
    return _about_outcome(request, store, cache, "profile", state)


@router.post("/about/experience")
async def about_experience(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    items = _indexed_items(await request.form(), "experience")
    state = save_experience(store, items, cache=cache)
    return _about_outcome(request, store, cache, "experience", state)


@router.post("/about/education")
async def about_education(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    items = _indexed_items(await request.form(), "education")
    state = save_education(store, items, cache=cache)
    return _about_outcome(request, store, cache, "education", state)


@router.post("/about/contact")
async def about_contact(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    state = save_contact_socials(store, await request.form(), cache=cache)
    return _about_outcome(request, store, cache, "contact", state)


# -- settings --------------------------------------------------------------


def _render_settings(
    request: Request,
    store: DocumentStore,
    cache: TaggedCache,
    *,
    section: Optional[str] = None,
    state: Optional[FormState] = None,
):
    return _render(
        request,
        "settings.html",
        status_code=400 if state else 200,
        site=get_site_settings(store, cache),
        not_found=get_not_found_page(store),
        section=section,
        errors=state.errors if state else {},
        values=state.form_data if state else {},
    )


@router.get("/settings")
def settings_page(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return _render_settings(request, store, cache)


@router.post("/settings")
async def settings_save(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    state = save_site_settings(store, await request.form(), cache=cache)
    if state.ok:
        flash(request, state.message)
        return _redirect("/admin/settings")
    _error_state(request, state)
    return _render_settings(request, store, cache, section="site", state=state)


@router.post("/settings/not-found")
async def settings_not_found(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    state = save_not_found_page(store, await request.form(), cache=cache)
    if state.ok:
        flash(request, state.message)
        return _redirect("/admin/settings")
    _error_state(request, state)
    return _render_settings(request, store, cache, section="not_found", state=state)


@router.post("/settings/seed")
def settings_seed(
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    return _flash_result(request, seed_database(store, cache=cache), "/admin/settings")


@router.post("/settings/clear-cache")
def settings_clear_cache(request: Request, cache: TaggedCache = Depends(get_cache)):
    removed = revalidate_all(cache)
    flash(request, f"Cache cleared ({removed} entries removed).")
    return _redirect("/admin/settings")


# -- messages --------------------------------------------------------------


@router.get("/messages")
def messages_page(request: Request, store: DocumentStore = Depends(get_store)):
    messages = list_contact_messages(store)
    return _render(request, "messages.html", messages=messages, unread=unread_count(messages))


@router.post("/messages/{message_id}/read")
def messages_mark_read(
    message_id: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    result = mark_message_as_read(store, message_id, cache=cache)
    return _flash_result(request, result, "/admin/messages")


@router.post("/messages/{message_id}/delete")
def messages_delete(
    message_id: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
    cache: TaggedCache = Depends(get_cache),
):
    result = delete_contact_message(store, message_id, cache=cache)
    return _flash_result(request, result, "/admin/messages")
