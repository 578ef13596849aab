"""
About-me actions. The profile lives in a single document and each admin form
updates its own slice of it.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from folio.actions.base import FormState, parse_form, raw_form, with_defaults
from folio.cache import CacheTag, CacheTTL, TaggedCache, cached, revalidate_about
from folio.images import process_image_input
from folio.schemas import (
    ContactSocialsForm,
    EducationSectionForm,
    ExperienceSectionForm,
    ProfileBioForm,
    flatten_errors,
)
from folio.storage import StorageClient
from folio.store import SERVER_TIMESTAMP, DocumentStore
from shared.constants import ABOUT_ME_DOC_ID, APP_CONFIG_COLLECTION, IMAGES_FOLDER
from shared.content import AboutMeData
from shared.defaults import default_about_me
from shared.json_utils import convert_keys

logger = logging.getLogger(__name__)


def get_about_me(store: DocumentStore, cache: Optional[TaggedCache] = None) -> AboutMeData:
    try:
        data = cached(
            cache,
            "about-me",
            tags=[CacheTag.ABOUT],
            ttl=CacheTTL.LONG,
            loader=lambda: store.get(APP_CONFIG_COLLECTION, ABOUT_ME_DOC_ID) or {},
        )
    except Exception:
        logger.exception("Error fetching about-me data; using defaults")
        return default_about_me()
    return with_defaults(default_about_me(), data)


def _merge_into_about(
    store: DocumentStore,
    values: dict,
    *,
    success_message: str,
    raw: dict,
    cache: Optional[TaggedCache],
) -> FormState:
    document = convert_keys(values, "snake_to_camel")
    document["updatedAt"] = SERVER_TIMESTAMP
    try:
        store.set(APP_CONFIG_COLLECTION, ABOUT_ME_DOC_ID, document, merge=True)
    except Exception:
        logger.exception("Error saving about-me data")
        return FormState(
            message="An unexpected server error occurred while saving. Please try again.",
            status="error",
            form_data=raw,
        )
    revalidate_about(cache)
    return FormState(message=success_message, status="success", saved=values)


def save_profile_bio(
    store: DocumentStore,
    form_data: Mapping[str, Any],
    *,
    storage: Optional[StorageClient] = None,
    cache: Optional[TaggedCache] = None,
) -> FormState:
    raw = raw_form(form_data, list(ProfileBioForm.model_fields))
    form, error_state = parse_form(
        ProfileBioForm, raw, "Failed to update profile. Please check errors."
    )
    if error_state:
        return error_state

    image = process_image_input(form.profile_image, IMAGES_FOLDER, storage)
    if not image.success:
        return FormState(
            message=f"Image upload failed: {image.error}",
            status="error",
            errors={"profile_image": [image.error]},
            form_data=raw,
        )
    values = form.model_dump()
    values["profile_image"] = image.url or ""
    return _merge_into_about(
        store, values, success_message="Profile updated successfully!", raw=raw, cache=cache
    )


def _section_state(exc: ValidationError, section: str, raw: dict) -> FormState:
    return FormState(
        message=f"Failed to update {section}. Please check errors.",
        status="error",
        errors=flatten_errors(exc),
        form_data=raw,
    )


def save_experience(
    store: DocumentStore,
    items: list[dict],
    *,
    cache: Optional[TaggedCache] = None,
) -> FormState:
    """Replaces the experience list; entries that are entirely blank are dropped."""
    entries = [
        item
        for item in items
        if any((item.get(key) or "").strip() for key in ("role", "company", "period", "description"))
    ]
    for entry in entries:
        entry["id"] = entry.get("id") or f"exp_{uuid.uuid4().hex[:8]}"
    raw = {"experience": entries}
    try:
        form = ExperienceSectionForm(experience=entries)
    except ValidationError as exc:
        return _section_state(exc, "experience", raw)
    values = {"experience": [item.model_dump() for item in form.experience]}
    return _merge_into_about(
        store, values, success_message="Experience updated successfully!", raw=raw, cache=cache
    )


def save_education(
    store: DocumentStore,
    items: list[dict],
    *,
    cache: Optional[TaggedCache] = None,
) -> FormState:
    entries = [
        item
        for item in items
        if any((item.get(key) or "").strip() for key in ("degree", "institution", "period"))
    ]
    for entry in entries:
        entry["id"] = entry.get("id") or f"edu_{uuid.uuid4().hex[:8]}"
    raw = {"education": entries}
    try:
        form = EducationSectionForm(education=entries)
    except ValidationError as exc:
        return _section_state(exc, "education", raw)
    values = {"education": [item.model_dump() for item in form.education]}
    return _merge_into_about(
        store, values, success_message="Education updated successfully!", raw=raw, cache=cache
    )


def save_contact_socials(
    store: DocumentStore,
    form_data: Mapping[str, Any],
    *,
    cache: Optional[TaggedCache] = None,
) -> FormState:
    raw = raw_form(form_data, list(ContactSocialsForm.model_fields))
    form, error_state = parse_form(
        ContactSocialsForm, raw, "Failed to update contact details. Please check errors."
    )
    if error_state:
        return error_state
    values = {key: (value or None) for key, value in form.model_dump().items()}
    return _merge_into_about(
        store,
        values,
        success_message="Contact details updated successfully!",
        raw=raw,
        cache=cache,
    )
