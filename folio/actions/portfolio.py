"""
Portfolio item actions.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from folio.actions.base import (
    ActionResult,
    FormState,
    clip,
    parse_form,
    raw_form,
    slug_conflict_state,
    slug_taken,
)
from folio.cache import CacheTag, CacheTTL, TaggedCache, cached, revalidate_portfolio
from folio.images import delete_image, process_image_input
from folio.schemas import PortfolioItemForm
from folio.storage import StorageClient
from folio.store import SERVER_TIMESTAMP, DocumentStore
from shared.constants import (
    PLACEHOLDER_IMAGE,
    PORTFOLIO_COLLECTION,
    PORTFOLIO_IMAGES_FOLDER,
)
from shared.content import PortfolioItem, from_document
from shared.defaults import default_portfolio_items

logger = logging.getLogger(__name__)

FORM_FIELDS = list(PortfolioItemForm.model_fields)


def portfolio_item_from_document(doc_id: str, data: dict) -> PortfolioItem:
    item = from_document(PortfolioItem, doc_id, data)
    item.slug = item.slug or doc_id
    item.images = [image for image in item.images if image] or [PLACEHOLDER_IMAGE]
    return item


def list_portfolio_items(
    store: DocumentStore, cache: Optional[TaggedCache] = None
) -> list[PortfolioItem]:
    try:
        docs = cached(
            cache,
            "portfolio-items",
            tags=[CacheTag.PORTFOLIO],
            ttl=CacheTTL.LONG,
            loader=lambda: store.list(
                PORTFOLIO_COLLECTION, order_by="createdAt", descending=True
            ),
        )
    except Exception:
        logger.exception("Error fetching portfolio items; using defaults")
        return default_portfolio_items()
    return [portfolio_item_from_document(doc_id, data) for doc_id, data in docs]


def get_portfolio_item_by_slug(store: DocumentStore, slug: str) -> Optional[PortfolioItem]:
    if not slug or not slug.strip():
        return None
    try:
        matches = store.list(PORTFOLIO_COLLECTION, where=[("slug", slug)], limit=1)
    except Exception:
        logger.exception("Error fetching portfolio item by slug %s", slug)
        return None
    if not matches:
        return None
    doc_id, data = matches[0]
    return portfolio_item_from_document(doc_id, data)


def save_portfolio_item(
    store: DocumentStore,
    form_data: Mapping[str, Any],
    *,
    storage: Optional[StorageClient] = None,
    cache: Optional[TaggedCache] = None,
) -> FormState:
    raw = raw_form(form_data, FORM_FIELDS)
    form, error_state = parse_form(
        PortfolioItemForm, raw, "Failed to save portfolio item. Please check errors."
    )
    if error_state:
        return error_state

    item_id = form.id or None
    try:
        if slug_taken(store, PORTFOLIO_COLLECTION, form.slug, item_id):
            return slug_conflict_state(form.slug, raw)

        images = []
        for name in ("image1", "image2"):
            result = process_image_input(
                getattr(form, name), PORTFOLIO_IMAGES_FOLDER, storage
            )
            if not result.success:
                return FormState(
                    message=f"Image upload failed: {result.error}",
                    status="error",
                    errors={name: [result.error]},
                    form_data=raw,
                )
            if result.url:
                images.append(result.url)
        if not form.image1:
            images.insert(0, PLACEHOLDER_IMAGE)

        document = {
            "title": clip(form.title),
            "description": clip(form.description),
            "longDescription": clip(form.long_description),
            "images": images,
            "tags": form.tags,
            "liveUrl": form.live_url,
            "repoUrl": form.repo_url,
            "slug": form.slug,
            "dataAiHint": form.data_ai_hint,
            "readmeContent": clip(form.readme_content),
            "updatedAt": SERVER_TIMESTAMP,
        }
        if item_id:
            store.set(PORTFOLIO_COLLECTION, item_id, document, merge=True)
        else:
            document["createdAt"] = SERVER_TIMESTAMP
            item_id = store.add(PORTFOLIO_COLLECTION, document)

        saved = store.get(PORTFOLIO_COLLECTION, item_id)
        if saved is None:
            raise RuntimeError("Saved portfolio item could not be read back")
    except Exception:
        logger.exception("Error saving portfolio item %s", form.slug)
        return FormState(
            message="An unexpected server error occurred while saving the portfolio item. Please try again.",
            status="error",
            form_data=raw,
        )

    revalidate_portfolio(cache)
    item = portfolio_item_from_document(item_id, saved)
    verb = "updated" if form.id else "added"
    return FormState(
        message=f'Portfolio item "{item.title}" {verb} successfully!',
        status="success",
        saved=item,
    )


def delete_portfolio_item(
    store: DocumentStore,
    item_id: str,
    *,
    storage: Optional[StorageClient] = None,
    cache: Optional[TaggedCache] = None,
) -> ActionResult:
    if not item_id:
        return ActionResult(False, "No portfolio item ID provided for deletion.")
    try:
        data = store.get(PORTFOLIO_COLLECTION, item_id)
        if data is None:
            return ActionResult(False, f"Portfolio item (ID: {item_id}) not found for deletion.")
        store.delete(PORTFOLIO_COLLECTION, item_id)
    except Exception:
        logger.exception("Error deleting portfolio item %s", item_id)
        return ActionResult(False, "Failed to delete portfolio item due to a server error.")

    if storage is not None:
        for url in data.get("images") or []:
            delete_image(url, storage)
    revalidate_portfolio(cache)
    return ActionResult(
        True, f'Portfolio item "{data.get("title") or "N/A"}" deleted successfully!'
    )
