"""
Site-wide announcement banner actions. At most one announcement is active.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from folio.actions.base import ActionResult, FormState, parse_form, raw_form
from folio.cache import CacheTag, CacheTTL, TaggedCache, cached, revalidate_announcements
from folio.schemas import AnnouncementForm
from folio.store import SERVER_TIMESTAMP, DocumentStore
from shared.constants import ANNOUNCEMENTS_COLLECTION
from shared.content import Announcement, from_document

logger = logging.getLogger(__name__)


def list_announcements(store: DocumentStore) -> list[Announcement]:
    try:
        docs = store.list(ANNOUNCEMENTS_COLLECTION, order_by="createdAt", descending=True)
    except Exception:
        logger.exception("Error fetching announcements")
        return []
    return [from_document(Announcement, doc_id, data) for doc_id, data in docs]


def get_active_announcement(
    store: DocumentStore, cache: Optional[TaggedCache] = None
) -> Optional[Announcement]:
    try:
        docs = cached(
            cache,
            "active-announcement",
            tags=[CacheTag.ANNOUNCEMENTS],
            ttl=CacheTTL.SHORT,
            loader=lambda: store.list(
                ANNOUNCEMENTS_COLLECTION,
                where=[("isActive", True)],
                order_by="createdAt",
                descending=True,
                limit=1,
            ),
        )
    except Exception:
        logger.exception("Error fetching the active announcement")
        return None
    if not docs:
        return None
    doc_id, data = docs[0]
    return from_document(Announcement, doc_id, data)


def _deactivate_others(store: DocumentStore, keep_id: Optional[str]) -> None:
    for doc_id, _ in store.list(ANNOUNCEMENTS_COLLECTION, where=[("isActive", True)]):
        if doc_id != keep_id:
            store.set(
                ANNOUNCEMENTS_COLLECTION,
                doc_id,
                {"isActive": False, "updatedAt": SERVER_TIMESTAMP},
                merge=True,
            )


def submit_announcement(
    store: DocumentStore,
    form_data: Mapping[str, Any],
    *,
    cache: Optional[TaggedCache] = None,
) -> FormState:
    raw = raw_form(form_data, ["message"])
    form, error_state = parse_form(
        AnnouncementForm, raw, "Failed to publish announcement. Please check errors."
    )
    if error_state:
        return error_state

    try:
        announcement_id = store.add(
            ANNOUNCEMENTS_COLLECTION,
            {
                "message": form.message,
                "isActive": True,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            },
        )
        _deactivate_others(store, announcement_id)
        saved = store.get(ANNOUNCEMENTS_COLLECTION, announcement_id) or {}
    except Exception:
        logger.exception("Error publishing announcement")
        return FormState(
            message="An unexpected server error occurred while publishing the announcement.",
            status="error",
            form_data=raw,
        )

    revalidate_announcements(cache)
    return FormState(
        message="Announcement published successfully!",
        status="success",
        saved=from_document(Announcement, announcement_id, saved),
    )


def toggle_announcement(
    store: DocumentStore, announcement_id: str, *, cache: Optional[TaggedCache] = None
) -> ActionResult:
    if not announcement_id:
        return ActionResult(False, "No announcement ID provided.")
    try:
        data = store.get(ANNOUNCEMENTS_COLLECTION, announcement_id)
        if data is None:
            return ActionResult(False, f"Announcement (ID: {announcement_id}) not found.")
        activate = not data.get("isActive", False)
        if activate:
            _deactivate_others(store, announcement_id)
        store.set(
            ANNOUNCEMENTS_COLLECTION,
            announcement_id,
            {"isActive": activate, "updatedAt": SERVER_TIMESTAMP},
            merge=True,
        )
    except Exception:
        logger.exception("Error toggling announcement %s", announcement_id)
        return ActionResult(False, "Failed to update announcement due to a server error.")
    revalidate_announcements(cache)
    state = "activated" if activate else "deactivated"
    return ActionResult(True, f"Announcement {state}.")


def delete_announcement(
    store: DocumentStore, announcement_id: str, *, cache: Optional[TaggedCache] = None
) -> ActionResult:
    if not announcement_id:
        return ActionResult(False, "No announcement ID provided for deletion.")
    try:
        deleted = store.delete(ANNOUNCEMENTS_COLLECTION, announcement_id)
    except Exception:
        logger.exception("Error deleting announcement %s", announcement_id)
        return ActionResult(False, "Failed to delete announcement due to a server error.")
    if not deleted:
        return ActionResult(False, f"Announcement (ID: {announcement_id}) not found for deletion.")
    revalidate_announcements(cache)
    return ActionResult(True, "Announcement deleted successfully!")
