"""
Blog post and blog category actions.
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
from folio.cache import CacheTag, CacheTTL, TaggedCache, cached, revalidate_blog
from folio.images import is_base64_data_url, process_image_input
from folio.markdown_utils import estimate_read_time
from folio.schemas import BlogCategoryForm, BlogPostForm
from folio.storage import StorageClient
from folio.store import SERVER_TIMESTAMP, DocumentStore
from shared.constants import (
    BLOG_CATEGORIES_COLLECTION,
    BLOG_IMAGES_FOLDER,
    BLOG_POSTS_COLLECTION,
    DEFAULT_CATEGORY_COLOR,
)
from shared.content import BlogCategory, BlogPost, BlogStatus, from_document

logger = logging.getLogger(__name__)

POST_FORM_FIELDS = list(BlogPostForm.model_fields)
CATEGORY_FORM_FIELDS = list(BlogCategoryForm.model_fields)


def blog_post_from_document(doc_id: str, data: dict) -> BlogPost:
    post = from_document(BlogPost, doc_id, data)
    post.slug = post.slug or doc_id
    post.read_time = post.read_time or 5
    return post


def _fetch_posts(store: DocumentStore) -> list:
    return store.list(BLOG_POSTS_COLLECTION, order_by="publishedAt", descending=True)


def list_blog_posts(store: DocumentStore) -> list[BlogPost]:
    """Every post regardless of status, newest first (admin listing)."""
    try:
        docs = _fetch_posts(store)
    except Exception:
        logger.exception("Error fetching blog posts")
        return []
    return [blog_post_from_document(doc_id, data) for doc_id, data in docs]


def list_published_blog_posts(
    store: DocumentStore, cache: Optional[TaggedCache] = None
) -> list[BlogPost]:
    # Filtered here rather than in the query so no composite index is needed.
    try:
        docs = cached(
            cache,
            "blog-posts",
            tags=[CacheTag.BLOG],
            ttl=CacheTTL.MEDIUM,
            loader=lambda: [
                (doc_id, data)
                for doc_id, data in _fetch_posts(store)
                if data.get("status") == BlogStatus.PUBLISHED
            ],
        )
    except Exception:
        logger.exception("Error fetching published blog posts")
        return []
    return [blog_post_from_document(doc_id, data) for doc_id, data in docs]


def get_blog_post_by_slug(store: DocumentStore, slug: str) -> Optional[BlogPost]:
    if not slug or not slug.strip():
        logger.warning("get_blog_post_by_slug called with an empty slug")
        return None
    try:
        matches = store.list(BLOG_POSTS_COLLECTION, where=[("slug", slug)], limit=1)
    except Exception:
        logger.exception("Error fetching blog post by slug %s", slug)
        return None
    if not matches:
        return None
    doc_id, data = matches[0]
    return blog_post_from_document(doc_id, data)


def get_blog_post(store: DocumentStore, post_id: str) -> Optional[BlogPost]:
    data = store.get(BLOG_POSTS_COLLECTION, post_id)
    return blog_post_from_document(post_id, data) if data is not None else None


def save_blog_post(
    store: DocumentStore,
    form_data: Mapping[str, Any],
    *,
    storage: Optional[StorageClient] = None,
    cache: Optional[TaggedCache] = None,
) -> FormState:
    raw = raw_form(form_data, POST_FORM_FIELDS)
    raw["status"] = raw["status"] or BlogStatus.DRAFT
    form, error_state = parse_form(
        BlogPostForm, raw, "Failed to save blog post. Please check errors."
    )
    if error_state:
        return error_state

    featured_image = form.featured_image
    if is_base64_data_url(featured_image):
        result = process_image_input(featured_image, BLOG_IMAGES_FOLDER, storage)
        if result.success and result.url:
            featured_image = result.url
        else:
            # A data URL must never reach the document.
            logger.warning("Failed to process featured image: %s", result.error)
            featured_image = ""

    document = {
        "title": clip(form.title),
        "slug": clip(form.slug),
        "excerpt": clip(form.excerpt),
        "content": clip(form.content),
        "featuredImage": clip(featured_image),
        "author": clip(form.author) or "Admin",
        "status": str(form.status),
        "tags": form.tags,
        "category": clip(form.category) or "General",
        "readTime": estimate_read_time(form.content),
        "seoTitle": clip(form.seo_title),
        "seoDescription": clip(form.seo_description),
        "seoKeywords": form.seo_keywords,
        "updatedAt": SERVER_TIMESTAMP,
    }

    post_id = form.id or None
    try:
        if slug_taken(store, BLOG_POSTS_COLLECTION, form.slug, post_id):
            return slug_conflict_state(form.slug, raw)
        if post_id:
            store.set(BLOG_POSTS_COLLECTION, post_id, document, merge=True)
        else:
            document["publishedAt"] = SERVER_TIMESTAMP
            document["views"] = 0
            document["likes"] = 0
            post_id = store.add(BLOG_POSTS_COLLECTION, document)
        saved = store.get(BLOG_POSTS_COLLECTION, post_id)
        if saved is None:
            raise RuntimeError("Saved blog post could not be read back")
    except Exception:
        logger.exception("Error saving blog post %s", form.slug)
        return FormState(
            message="An unexpected server error occurred while saving the blog post. Please try again.",
            status="error",
            form_data=raw,
        )

    revalidate_blog(cache)
    post = blog_post_from_document(post_id, saved)
    verb = "updated" if form.id else "added"
    return FormState(
        message=f'Blog post "{post.title}" {verb} successfully!',
        status="success",
        saved=post,
    )


def delete_blog_post(
    store: DocumentStore, post_id: str, *, cache: Optional[TaggedCache] = None
) -> ActionResult:
    if not post_id:
        return ActionResult(False, "No post ID provided for deletion.")
    try:
        data = store.get(BLOG_POSTS_COLLECTION, post_id)
        if data is None:
            return ActionResult(False, f"Blog post (ID: {post_id}) not found for deletion.")
        store.delete(BLOG_POSTS_COLLECTION, post_id)
    except Exception:
        logger.exception("Error deleting blog post %s", post_id)
        return ActionResult(False, "Failed to delete blog post due to a server error.")
    revalidate_blog(cache)
    return ActionResult(
        True,
        f"Blog post (ID: {post_id}, Title: {data.get('title') or 'N/A'}) deleted successfully!",
    )


def increment_blog_post_views(store: DocumentStore, post_id: str) -> None:
    try:
        store.increment(BLOG_POSTS_COLLECTION, post_id, "views")
    except Exception:
        logger.exception("Error incrementing views for blog post %s", post_id)


def list_blog_categories(store: DocumentStore) -> list[BlogCategory]:
    try:
        docs = store.list(BLOG_CATEGORIES_COLLECTION, order_by="name")
    except Exception:
        logger.exception("Error fetching blog categories")
        return []
    categories = []
    for doc_id, data in docs:
        category = from_document(BlogCategory, doc_id, data)
        category.slug = category.slug or doc_id
        categories.append(category)
    return categories


def save_blog_category(
    store: DocumentStore,
    form_data: Mapping[str, Any],
    *,
    cache: Optional[TaggedCache] = None,
) -> FormState:
    raw = raw_form(form_data, CATEGORY_FORM_FIELDS)
    form, error_state = parse_form(
        BlogCategoryForm, raw, "Failed to save blog category. Please check errors."
    )
    if error_state:
        return error_state

    document = {
        "name": form.name,
        "slug": form.slug,
        "description": form.description,
        "color": form.color or DEFAULT_CATEGORY_COLOR,
    }
    category_id = form.id or None
    try:
        if slug_taken(store, BLOG_CATEGORIES_COLLECTION, form.slug, category_id):
            return slug_conflict_state(form.slug, raw)
        if category_id:
            store.set(BLOG_CATEGORIES_COLLECTION, category_id, document, merge=True)
        else:
            category_id = store.add(BLOG_CATEGORIES_COLLECTION, document)
        saved = store.get(BLOG_CATEGORIES_COLLECTION, category_id) or document
    except Exception:
        logger.exception("Error saving blog category %s", form.slug)
        return FormState(
            message="An unexpected server error occurred while saving the blog category. Please try again.",
            status="error",
            form_data=raw,
        )

    revalidate_blog(cache)
    category = from_document(BlogCategory, category_id, saved)
    verb = "updated" if form.id else "added"
    return FormState(
        message=f'Blog category "{category.name}" {verb} successfully!',
        status="success",
        saved=category,
    )


def delete_blog_category(
    store: DocumentStore, category_id: str, *, cache: Optional[TaggedCache] = None
) -> ActionResult:
    if not category_id:
        return ActionResult(False, "No category ID provided for deletion.")
    try:
        data = store.get(BLOG_CATEGORIES_COLLECTION, category_id)
        if data is None:
            return ActionResult(
                False, f"Blog category (ID: {category_id}) not found for deletion."
            )
        store.delete(BLOG_CATEGORIES_COLLECTION, category_id)
    except Exception:
        logger.exception("Error deleting blog category %s", category_id)
        return ActionResult(False, "Failed to delete blog category due to a server error.")
    revalidate_blog(cache)
    return ActionResult(
        True,
        f"Blog category (ID: {category_id}, Name: {data.get('name') or 'N/A'}) deleted successfully!",
    )
