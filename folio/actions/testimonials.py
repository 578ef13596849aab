"""
Client testimonial actions.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from folio.actions.base import ActionResult, FormState, parse_form, raw_form
from folio.cache import TaggedCache, revalidate_portfolio
from folio.schemas import TestimonialForm
from folio.store import SERVER_TIMESTAMP, DocumentStore
from shared.constants import TESTIMONIALS_COLLECTION
from shared.content import Testimonial, TestimonialStatus, from_document

logger = logging.getLogger(__name__)

PUBLIC_STATUSES = (TestimonialStatus.FEATURED, TestimonialStatus.APPROVED)


def list_testimonials(store: DocumentStore) -> list[Testimonial]:
    try:
        docs = store.list(TESTIMONIALS_COLLECTION, order_by="createdAt", descending=True)
    except Exception:
        logger.exception("Error fetching testimonials")
        return []
    return [from_document(Testimonial, doc_id, data) for doc_id, data in docs]


def list_public_testimonials(store: DocumentStore) -> list[Testimonial]:
    """Approved and featured testimonials, featured first, newest first within each."""
    testimonials = [t for t in list_testimonials(store) if t.status in PUBLIC_STATUSES]
    # list_testimonials is already newest first and sorted() is stable.
    return sorted(testimonials, key=lambda t: PUBLIC_STATUSES.index(t.status))


def save_testimonial(
    store: DocumentStore,
    form_data: Mapping[str, Any],
    *,
    cache: Optional[TaggedCache] = None,
) -> FormState:
    raw = raw_form(form_data, list(TestimonialForm.model_fields))
    raw["rating"] = raw["rating"] or "5"
    raw["status"] = raw["status"] or TestimonialStatus.PENDING
    form, error_state = parse_form(
        TestimonialForm, raw, "Failed to save testimonial. Please check errors."
    )
    if error_state:
        return error_state

    document = {
        "clientName": form.client_name,
        "clientTitle": form.client_title,
        "clientCompany": form.client_company,
        "clientImage": form.client_image,
        "content": form.content,
        "rating": form.rating,
        "projectId": form.project_id or None,
        "status": str(form.status),
        "updatedAt": SERVER_TIMESTAMP,
    }
    testimonial_id = form.id or None
    try:
        if testimonial_id:
            store.set(TESTIMONIALS_COLLECTION, testimonial_id, document, merge=True)
        else:
            document["createdAt"] = SERVER_TIMESTAMP
            testimonial_id = store.add(TESTIMONIALS_COLLECTION, document)
        saved = store.get(TESTIMONIALS_COLLECTION, testimonial_id) or {}
    except Exception:
        logger.exception("Error saving testimonial from %s", form.client_name)
        return FormState(
            message="An unexpected server error occurred while saving the testimonial. Please try again.",
            status="error",
            form_data=raw,
        )

    # Testimonials are shown on the portfolio pages.
    revalidate_portfolio(cache)
    testimonial = from_document(Testimonial, testimonial_id, saved)
    verb = "updated" if form.id else "added"
    return FormState(
        message=f"Testimonial from {testimonial.client_name} {verb} successfully!",
        status="success",
        saved=testimonial,
    )


def update_testimonial_status(
    store: DocumentStore,
    testimonial_id: str,
    status: str,
    *,
    cache: Optional[TaggedCache] = None,
) -> ActionResult:
    if not testimonial_id:
        return ActionResult(False, "No testimonial ID provided.")
    try:
        new_status = TestimonialStatus(status)
    except ValueError:
        return ActionResult(False, f"Unknown testimonial status: {status}")
    try:
        if store.get(TESTIMONIALS_COLLECTION, testimonial_id) is None:
            return ActionResult(False, f"Testimonial (ID: {testimonial_id}) not found.")
        store.set(
            TESTIMONIALS_COLLECTION,
            testimonial_id,
            {"status": str(new_status), "updatedAt": SERVER_TIMESTAMP},
            merge=True,
        )
    except Exception:
        logger.exception("Error updating testimonial status %s", testimonial_id)
        return ActionResult(False, "Failed to update testimonial status due to a server error.")
    revalidate_portfolio(cache)
    return ActionResult(True, f"Testimonial status updated to {new_status} successfully!")


def delete_testimonial(
    store: DocumentStore, testimonial_id: str, *, cache: Optional[TaggedCache] = None
) -> ActionResult:
    if not testimonial_id:
        return ActionResult(False, "No testimonial ID provided for deletion.")
    try:
        data = store.get(TESTIMONIALS_COLLECTION, testimonial_id)
        if data is None:
            return ActionResult(False, f"Testimonial (ID: {testimonial_id}) not found for deletion.")
        store.delete(TESTIMONIALS_COLLECTION, testimonial_id)
    except Exception:
        logger.exception("Error deleting testimonial %s", testimonial_id)
        return ActionResult(False, "Failed to delete testimonial due to a server error.")
    revalidate_portfolio(cache)
    return ActionResult(
        True, f"Testimonial from {data.get('clientName') or 'Unknown'} deleted successfully!"
    )
