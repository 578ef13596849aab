"""
Dependency wiring for the FastAPI app and the scripts.
"""

from __future__ import annotations

import logging

from fastapi import Request

from folio.auth import AdminUser, AuthClient, FirebaseAuthClient, InMemoryAuthClient
from folio.cache import InMemoryTaggedCache, RedisTaggedCache, TaggedCache
from folio.config import Settings, get_settings
from folio.errors import AdminLoginRequired, AuthError
from folio.logging_utils import log_security_event
from folio.storage import (
    FirebaseStorageClient,
    InMemoryStorageClient,
    S3StorageClient,
    StorageClient,
)
from folio.store import (
    DocumentStore,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    SqlDocumentStore,
)

logger = logging.getLogger(__name__)

_store: DocumentStore | None = None
_storage_client: StorageClient | None = None
_storage_resolved = False
_auth_client: AuthClient | None = None
_cache: TaggedCache | None = None


def _use_firebase(settings: Settings) -> bool:
    return not settings.use_in_memory_backends and bool(settings.firebase_project_id)


def default_bucket_name(project_id: str) -> str:
    """The bucket Firebase creates for a project when none is named."""
    return f"{project_id}.appspot.com"


def init_firebase_app(settings: Settings):
    """Initialise the default firebase_admin app once per process."""
    import firebase_admin
    from firebase_admin import credentials

    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    options = {"projectId": settings.firebase_project_id}
    options["storageBucket"] = settings.firebase_storage_bucket or default_bucket_name(
        settings.firebase_project_id
    )
    if settings.firebase_credentials_path:
        cred = credentials.Certificate(settings.firebase_credentials_path)
    else:
        cred = credentials.ApplicationDefault()
    logger.info("Initialising Firebase app for project %s", settings.firebase_project_id)
    return firebase_admin.initialize_app(cred, options)


def get_store() -> DocumentStore:
    """
    Return a singleton document store so in-memory content persists across requests.
    """
    global _store
    if _store:
        return _store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _store = InMemoryDocumentStore()
    elif settings.database_url:
        _store = SqlDocumentStore(settings.database_url)
    elif settings.firebase_project_id:
        init_firebase_app(settings)
        _store = FirestoreDocumentStore()
    else:
        logger.warning("No FIREBASE_PROJECT_ID or DATABASE_URL configured; using in-memory store")
        _store = InMemoryDocumentStore()
    return _store


def get_storage_client() -> StorageClient | None:
    """
    Return the singleton storage client, or None when no object storage is
    configured (image uploads then fail with "Storage is not configured").
    """
    global _storage_client, _storage_resolved
    if _storage_resolved:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _storage_client = InMemoryStorageClient()
    elif settings.s3_bucket:
        _storage_client = S3StorageClient(
            bucket=settings.s3_bucket,
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            public_base_url=settings.s3_public_base_url or "",
        )
    elif _use_firebase(settings):
        init_firebase_app(settings)
        bucket = settings.firebase_storage_bucket or default_bucket_name(settings.firebase_project_id)
        _storage_client = FirebaseStorageClient(bucket)
    else:
        logger.error(
            "No S3_BUCKET or FIREBASE_PROJECT_ID configured; image uploads are disabled"
        )
        _storage_client = None
    _storage_resolved = True
    return _storage_client


def get_auth_client() -> AuthClient:
    global _auth_client
    if _auth_client:
        return _auth_client

    settings = get_settings()
    if _use_firebase(settings):
        init_firebase_app(settings)
        _auth_client = FirebaseAuthClient(settings.firebase_web_api_key)
    else:
        _auth_client = InMemoryAuthClient()
    return _auth_client


def get_cache() -> TaggedCache:
    """
    Return a singleton tagged cache; Redis when configured.
    """
    global _cache
    if _cache:
        return _cache

    settings = get_settings()
    if settings.redis_url and not settings.use_in_memory_backends:
        _cache = RedisTaggedCache(url=settings.redis_url, prefix=settings.cache_key_prefix)
    else:
        _cache = InMemoryTaggedCache()
    return _cache


def reset_dependencies() -> None:
    """Drop the singletons so the next call rebuilds them from settings (tests)."""
    global _store, _storage_client, _storage_resolved, _auth_client, _cache
    _store = None
    _storage_client = None
    _storage_resolved = False
    _auth_client = None
    _cache = None


def require_admin(request: Request) -> AdminUser:
    """
    Verifies the admin session cookie; raises AdminLoginRequired (rendered as a
    redirect to the login page) when it is missing, invalid or not allow-listed.
    """
    settings = get_settings()
    next_path = request.url.path
    cookie = request.cookies.get(settings.session_cookie_name)
    if not cookie:
        raise AdminLoginRequired(next_path)
    try:
        user = get_auth_client().verify_session_cookie(cookie)
    except AuthError:
        raise AdminLoginRequired(next_path)
    allowed = settings.admin_email_list
    if allowed and user.email.lower() not in allowed:
        log_security_event("ADMIN_ACCESS_DENIED", email=user.email, path=next_path)
        raise AdminLoginRequired(next_path)
    return user
