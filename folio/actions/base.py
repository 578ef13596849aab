"""
Result types and helpers shared by the action modules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from folio.schemas import flatten_errors
from folio.store import DocumentStore
from shared.constants import MAX_FIELD_LENGTH
from shared.content import from_document
from shared.json_utils import camel_to_snake

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")


@dataclass
class FormState:
    """Outcome of a form save, rendered back into the form template."""

    message: str = ""
    status: str = "idle"  # idle | success | error
    errors: dict = field(default_factory=dict)
    form_data: dict = field(default_factory=dict)
    saved: Any = None

    @property
    def ok(self) -> bool:
        return self.status == "success"


@dataclass
class ActionResult:
    success: bool
    message: str


def raw_form(form_data: Mapping[str, Any], names: list[str]) -> dict:
    """Pulls the named fields out of submitted form data as strings."""
    raw = {}
    for name in names:
        value = form_data.get(name)
        raw[name] = "" if value is None else str(value)
    return raw


def parse_form(
    model: Type[M], raw: dict, error_message: str
) -> tuple[Optional[M], Optional[FormState]]:
    try:
        return model(**raw), None
    except ValidationError as exc:
        return None, FormState(
            message=error_message,
            status="error",
            errors=flatten_errors(exc),
            form_data=raw,
        )


def slug_taken(
    store: DocumentStore, collection: str, slug: str, doc_id: Optional[str]
) -> bool:
    matches = store.list(collection, where=[("slug", slug)])
    return any(match_id != doc_id for match_id, _ in matches)


def slug_conflict_state(slug: str, raw: dict) -> FormState:
    return FormState(
        message=f'Slug "{slug}" is already in use. Please choose a unique slug.',
        status="error",
        errors={"slug": [f'Slug "{slug}" is already in use.']},
        form_data=raw,
    )


def clip(value: Optional[str]) -> str:
    return (value or "").strip()[:MAX_FIELD_LENGTH]


def with_defaults(default: T, data: Optional[dict]) -> T:
    """
    Builds a singleton document (about-me, settings, ...) over its defaults.

    Blank scalar fields fall back to the default's value; a stored list is kept
    as-is, so an admin can clear the experience or education sections.
    """
    if not data:
        return default
    present = {camel_to_snake(key) for key, value in data.items() if value is not None}
    stored = from_document(type(default), None, data)
    overrides = {}
    for f in fields(default):
        value = getattr(stored, f.name)
        if isinstance(value, list) and f.name in present:
            overrides[f.name] = value
        elif value:
            overrides[f.name] = value
    return replace(default, **overrides)
