"""
Configuration and settings for the site.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the web app and the scripts."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Site identity (used by templates, sitemap and RSS)
    site_url: str = Field(default="https://anandverse.com", alias="SITE_URL")
    site_name: str = Field(default="AnandVerse", alias="SITE_NAME")
    site_description: str = Field(
        default=(
            "Latest insights, tutorials, and thoughts on web development "
            "and technology"
        ),
        alias="SITE_DESCRIPTION",
    )
    contact_email: str = Field(
        default="contact@anandverse.com", alias="CONTACT_EMAIL"
    )

    api_prefix: str = Field(default="/api")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, alias="FOLIO_USE_IN_MEMORY_BACKENDS"
    )

    # Firebase
    firebase_project_id: Optional[str] = Field(
        default=None, alias="FIREBASE_PROJECT_ID"
    )
    firebase_credentials_path: Optional[str] = Field(
        default=None, alias="GOOGLE_APPLICATION_CREDENTIALS"
    )
    firebase_storage_bucket: Optional[str] = Field(
        default=None, alias="FIREBASE_STORAGE_BUCKET"
    )
    firebase_web_api_key: Optional[str] = Field(
        default=None, alias="FIREBASE_WEB_API_KEY"
    )

    # SQL document store instead of Firestore (any SQLAlchemy URL)
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")

    # S3-compatible storage instead of Firebase Storage
    s3_endpoint: Optional[str] = Field(default=None, alias="S3_ENDPOINT")
    s3_region: Optional[str] = Field(default=None, alias="S3_REGION")
    s3_bucket: Optional[str] = Field(default=None, alias="S3_BUCKET")
    s3_public_base_url: Optional[str] = Field(
        default=None, alias="S3_PUBLIC_BASE_URL"
    )
    aws_access_key_id: Optional[str] = Field(
        default=None, alias="AWS_ACCESS_KEY_ID"
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None, alias="AWS_SECRET_ACCESS_KEY"
    )

    # Cache (Redis)
    redis_url: Optional[str] = Field(default=None, alias="REDIS_URL")
    cache_key_prefix: str = Field(default="folio:cache", alias="CACHE_KEY_PREFIX")

    # Admin session
    session_secret: str = Field(default="change-me", alias="SESSION_SECRET")
    session_cookie_name: str = Field(default="__session", alias="SESSION_COOKIE_NAME")
    session_expires_days: int = Field(default=5, ge=1, le=14)
    secure_cookies: bool = Field(default=True, alias="SECURE_COOKIES")
    admin_emails: str = Field(default="", alias="ADMIN_EMAILS")

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    contact_rate_limit: str = Field(default="5/minute", alias="CONTACT_RATE_LIMIT")
    login_rate_limit: str = Field(default="10/minute", alias="LOGIN_RATE_LIMIT")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    verbose_firebase_logs: bool = Field(
        default=False, alias="VERBOSE_FIREBASE_LOGS"
    )

    # Output directory for generated sitemap / RSS files
    public_dir: str = Field(default="public", alias="PUBLIC_DIR")

    @property
    def base_url(self) -> str:
        return self.site_url.rstrip("/")

    @property
    def admin_email_list(self) -> list[str]:
        return [
            email.strip().lower()
            for email in self.admin_emails.split(",")
            if email.strip()
        ]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
