"""
Site settings, the configurable not-found page and database seeding.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from folio.actions.base import ActionResult, FormState, parse_form, raw_form, with_defaults
from folio.cache import (
    CacheTag,
    CacheTTL,
    TaggedCache,
    cached,
    revalidate_all,
    revalidate_settings,
)
from folio.schemas import NotFoundPageForm, SiteSettingsForm
from folio.store import SERVER_TIMESTAMP, DocumentStore
from shared.constants import (
    ABOUT_ME_DOC_ID,
    APP_CONFIG_COLLECTION,
    NOT_FOUND_PAGE_DOC_ID,
    PORTFOLIO_COLLECTION,
    SITE_SETTINGS_DOC_ID,
    SKILLS_COLLECTION,
)
from shared.content import NotFoundPageData, SiteSettings, to_document
from shared.defaults import (
    default_about_me,
    default_not_found_page,
    default_portfolio_items,
    default_site_settings,
    default_skills,
)

logger = logging.getLogger(__name__)


def get_site_settings(
    store: DocumentStore, cache: Optional[TaggedCache] = None
) -> SiteSettings:
    try:
        data = cached(
            cache,
            "site-settings",
            tags=[CacheTag.SETTINGS],
            ttl=CacheTTL.MEDIUM,
            loader=lambda: store.get(APP_CONFIG_COLLECTION, SITE_SETTINGS_DOC_ID) or {},
        )
    except Exception:
        logger.exception("Error fetching site settings; using defaults")
        return default_site_settings()
    if not data:
        logger.info("Site settings document not found; using defaults")
    return with_defaults(default_site_settings(), data)


def save_site_settings(
    store: DocumentStore,
    form_data: Mapping[str, Any],
    *,
    cache: Optional[TaggedCache] = None,
) -> FormState:
    raw = raw_form(form_data, list(SiteSettingsForm.model_fields))
    # Unchecked checkboxes are simply absent from the submission.
    raw["maintenance_mode"] = "true" if form_data.get("maintenance_mode") else "false"
    form, error_state = parse_form(
        SiteSettingsForm, raw, "Failed to save site settings. Please check errors."
    )
    if error_state:
        return error_state

    settings = SiteSettings(**form.model_dump())
    try:
        store.set(APP_CONFIG_COLLECTION, SITE_SETTINGS_DOC_ID, to_document(settings), merge=True)
    except Exception:
        logger.exception("Error saving site settings")
        return FormState(
            message="An unexpected server error occurred while saving settings.",
            status="error",
            form_data=raw,
        )
    revalidate_settings(cache)
    return FormState(message="Site settings updated successfully!", status="success", saved=settings)


def get_not_found_page(store: DocumentStore) -> NotFoundPageData:
    try:
        data = store.get(APP_CONFIG_COLLECTION, NOT_FOUND_PAGE_DOC_ID)
    except Exception:
        logger.exception("Error fetching not-found page content; using defaults")
        return default_not_found_page()
    return with_defaults(default_not_found_page(), data)


def save_not_found_page(
    store: DocumentStore,
    form_data: Mapping[str, Any],
    *,
    cache: Optional[TaggedCache] = None,
) -> FormState:
    raw = raw_form(form_data, list(NotFoundPageForm.model_fields))
    form, error_state = parse_form(
        NotFoundPageForm, raw, "Failed to save 404 page settings. Please check errors."
    )
    if error_state:
        return error_state

    page = NotFoundPageData(**form.model_dump())
    try:
        store.set(APP_CONFIG_COLLECTION, NOT_FOUND_PAGE_DOC_ID, to_document(page), merge=True)
    except Exception:
        logger.exception("Error saving not-found page content")
        return FormState(
            message="An unexpected server error occurred while saving the 404 page.",
            status="error",
            form_data=raw,
        )
    revalidate_settings(cache)
    return FormState(message="404 page updated successfully!", status="success", saved=page)


def _stamped(document: dict) -> dict:
    document["createdAt"] = SERVER_TIMESTAMP
    document["updatedAt"] = SERVER_TIMESTAMP
    return document


def seed_database(store: DocumentStore, *, cache: Optional[TaggedCache] = None) -> ActionResult:
    """
    Writes the default content into empty collections and missing singleton
    documents. Existing content is never overwritten.
    """
    seeded = []
    try:
        if not store.list(PORTFOLIO_COLLECTION, limit=1):
            for item in default_portfolio_items():
                store.set(PORTFOLIO_COLLECTION, item.id, _stamped(to_document(item)))
            seeded.append("portfolio items")

        if not store.list(SKILLS_COLLECTION, limit=1):
            for skill in default_skills():
                store.set(SKILLS_COLLECTION, skill.id, to_document(skill))
            seeded.append("skills")

        singletons = (
            (ABOUT_ME_DOC_ID, default_about_me(), "about me"),
            (SITE_SETTINGS_DOC_ID, default_site_settings(), "site settings"),
            (NOT_FOUND_PAGE_DOC_ID, default_not_found_page(), "404 page"),
        )
        for doc_id, default, label in singletons:
            if store.get(APP_CONFIG_COLLECTION, doc_id) is None:
                store.set(APP_CONFIG_COLLECTION, doc_id, to_document(default))
                seeded.append(label)
    except Exception:
        logger.exception("Error seeding database")
        return ActionResult(False, "Failed to seed the database due to a server error.")

    revalidate_all(cache)
    if not seeded:
        return ActionResult(True, "Database already contains content; nothing was seeded.")
    logger.info("Seeded %s", ", ".join(seeded))
    return ActionResult(True, f"Seeded {', '.join(seeded)}.")
