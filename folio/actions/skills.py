"""
Skill actions.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Mapping, Optional

from folio.actions.base import ActionResult, FormState, parse_form, raw_form
from folio.cache import CacheTag, CacheTTL, TaggedCache, cached, revalidate_skills
from folio.schemas import SkillForm
from folio.store import DocumentStore
from shared.constants import DEFAULT_SKILL_ICON, SKILL_CATEGORIES, SKILL_ICONS, SKILLS_COLLECTION
from shared.content import Skill, from_document
from shared.defaults import default_skills

logger = logging.getLogger(__name__)


def icon_for_skill(name: str) -> str:
    return SKILL_ICONS.get(name, DEFAULT_SKILL_ICON)


def list_skills(store: DocumentStore, cache: Optional[TaggedCache] = None) -> list[Skill]:
    try:
        docs = cached(
            cache,
            "skills",
            tags=[CacheTag.SKILLS],
            ttl=CacheTTL.VERY_LONG,
            loader=lambda: store.list(SKILLS_COLLECTION, order_by="name"),
        )
    except Exception:
        logger.exception("Error fetching skills; using defaults")
        return default_skills()
    return [from_document(Skill, doc_id, data) for doc_id, data in docs]


def skills_by_category(skills: list[Skill]) -> "OrderedDict[str, list[Skill]]":
    """Groups skills in SKILL_CATEGORIES order; unknown categories land in Other."""
    grouped: OrderedDict[str, list[Skill]] = OrderedDict(
        (category, []) for category in SKILL_CATEGORIES
    )
    for skill in skills:
        category = skill.category if skill.category in grouped else "Other"
        grouped[category].append(skill)
    return OrderedDict((key, value) for key, value in grouped.items() if value)


def save_skill(
    store: DocumentStore,
    form_data: Mapping[str, Any],
    *,
    cache: Optional[TaggedCache] = None,
) -> FormState:
    raw = raw_form(form_data, ["id", "name", "category", "proficiency"])
    form, error_state = parse_form(SkillForm, raw, "Failed to save skill. Please check errors.")
    if error_state:
        return error_state

    document = {
        "name": form.name,
        "iconName": icon_for_skill(form.name),
        "category": form.category,
        "proficiency": form.proficiency,
    }
    try:
        if form.id:
            store.set(SKILLS_COLLECTION, form.id, document, merge=True)
            skill_id = form.id
        else:
            skill_id = store.add(SKILLS_COLLECTION, document)
    except Exception:
        logger.exception("Error saving skill %s", form.name)
        return FormState(
            message="An unexpected server error occurred while saving the skill.",
            status="error",
            form_data=raw,
        )

    revalidate_skills(cache)
    verb = "updated" if form.id else "added"
    return FormState(
        message=f'Skill "{form.name}" {verb} successfully!',
        status="success",
        saved=from_document(Skill, skill_id, document),
    )


def delete_skill(
    store: DocumentStore, skill_id: str, *, cache: Optional[TaggedCache] = None
) -> ActionResult:
    if not skill_id:
        return ActionResult(False, "No skill ID provided for deletion.")
    try:
        deleted = store.delete(SKILLS_COLLECTION, skill_id)
    except Exception:
        logger.exception("Error deleting skill %s", skill_id)
        return ActionResult(False, "Failed to delete skill due to a server error.")
    if not deleted:
        return ActionResult(False, f"Skill (ID: {skill_id}) not found for deletion.")
    revalidate_skills(cache)
    return ActionResult(True, "Skill deleted successfully!")
