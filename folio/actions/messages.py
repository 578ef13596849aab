"""
Contact form submission and the admin inbox.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from folio.actions.base import ActionResult, FormState, parse_form
from folio.cache import TaggedCache, revalidate_messages
from folio.logging_utils import log_security_event
from folio.schemas import ContactForm
from folio.security import sanitize_input, validate_email
from folio.store import SERVER_TIMESTAMP, DocumentStore
from shared.constants import CONTACT_MESSAGES_COLLECTION
from shared.content import ContactMessage, from_document

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Your message has been sent successfully! I'll get back to you soon."


def submit_contact_form(
    store: DocumentStore,
    form_data: Mapping[str, Any],
    *,
    cache: Optional[TaggedCache] = None,
    client: str = "unknown",
) -> FormState:
    honeypot = str(form_data.get("honeypot") or "")
    if honeypot.strip():
        log_security_event("BOT_DETECTED_HONEYPOT", honeypot_value=honeypot, client=client)
        return FormState(message="Invalid submission detected.", status="error")

    phone = str(form_data.get("phone") or "")
    sanitized = {
        "name": sanitize_input(str(form_data.get("name") or "")),
        "email": sanitize_input(str(form_data.get("email") or "")),
        "message": sanitize_input(str(form_data.get("message") or "")),
        "phone": sanitize_input(phone) if phone else None,
    }

    if not validate_email(sanitized["email"]):
        return FormState(
            message="Invalid email address provided.",
            status="error",
            errors={"email": ["Invalid email address."]},
            form_data=sanitized,
        )

    form, error_state = parse_form(
        ContactForm, sanitized, "Failed to send message. Please check the errors."
    )
    if error_state:
        return error_state

    try:
        store.add(
            CONTACT_MESSAGES_COLLECTION,
            {
                "name": form.name,
                "email": form.email,
                "message": form.message,
                "phone": form.phone,
                "submittedAt": SERVER_TIMESTAMP,
                "isRead": False,
                "isReplied": False,
                "readAt": None,
                "repliedAt": None,
            },
        )
    except Exception as exc:
        logger.exception("Error saving contact message")
        log_security_event("CONTACT_FORM_ERROR", error=str(exc), email=form.email)
        return FormState(
            message="An unexpected error occurred while sending your message. Please try again later.",
            status="error",
        )

    log_security_event(
        "CONTACT_FORM_SUBMITTED",
        email=form.email,
        has_phone=bool(form.phone),
        message_length=len(form.message),
    )
    revalidate_messages(cache)
    return FormState(message=SUCCESS_MESSAGE, status="success")


def list_contact_messages(store: DocumentStore) -> list[ContactMessage]:
    try:
        docs = store.list(CONTACT_MESSAGES_COLLECTION, order_by="submittedAt", descending=True)
    except Exception:
        logger.exception("Error fetching contact messages")
        return []
    return [from_document(ContactMessage, doc_id, data) for doc_id, data in docs]


def unread_count(messages: list[ContactMessage]) -> int:
    return sum(1 for message in messages if not message.is_read)


def mark_message_as_read(
    store: DocumentStore, message_id: str, *, cache: Optional[TaggedCache] = None
) -> ActionResult:
    if not message_id:
        return ActionResult(False, "No message ID provided.")
    try:
        if store.get(CONTACT_MESSAGES_COLLECTION, message_id) is None:
            return ActionResult(False, f"Message (ID: {message_id}) not found.")
        store.set(
            CONTACT_MESSAGES_COLLECTION,
            message_id,
            {"isRead": True, "readAt": SERVER_TIMESTAMP},
            merge=True,
        )
    except Exception:
        logger.exception("Error marking message %s as read", message_id)
        return ActionResult(False, "Failed to mark message as read due to a server error.")
    revalidate_messages(cache)
    return ActionResult(True, f"Message (ID: {message_id}) marked as read successfully!")


def delete_contact_message(
    store: DocumentStore, message_id: str, *, cache: Optional[TaggedCache] = None
) -> ActionResult:
    if not message_id:
        return ActionResult(False, "No message ID provided for deletion.")
    try:
        deleted = store.delete(CONTACT_MESSAGES_COLLECTION, message_id)
    except Exception:
        logger.exception("Error deleting contact message %s", message_id)
        return ActionResult(False, "Failed to delete message due to a server error.")
    if not deleted:
        return ActionResult(False, f"Message (ID: {message_id}) not found for deletion.")
    revalidate_messages(cache)
    return ActionResult(True, f"Message (ID: {message_id}) deleted successfully!")
