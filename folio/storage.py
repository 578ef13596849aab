"""
Object storage abstraction for Firebase Storage, S3-compatible buckets and
in-memory testing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Protocol
from urllib.parse import unquote, urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

_FIREBASE_DOWNLOAD_PATH = re.compile(r"/o/([^?]+)")


class StorageClient(Protocol):
    """Defines the operations the site needs from object storage."""

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        ...

    def delete(self, path: str) -> bool:
        ...

    def public_url(self, path: str) -> str:
        ...

    def path_from_url(self, url: str) -> Optional[str]:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = field(default_factory=dict)

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        self.stored_objects[path] = (data, content_type)
        return self.public_url(path)

    def delete(self, path: str) -> bool:
        return self.stored_objects.pop(path, None) is not None

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def path_from_url(self, url: str) -> Optional[str]:
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):]


class FirebaseStorageClient:
    """Cloud Storage for Firebase via firebase_admin; uploads are made public."""

    def __init__(self, bucket_name: Optional[str] = None, bucket=None):
        if bucket is None:
            from firebase_admin import storage

            bucket = storage.bucket(bucket_name)
        self.bucket = bucket

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        blob = self.bucket.blob(path)
        blob.upload_from_string(data, content_type=content_type)
        blob.make_public()
        return blob.public_url

    def delete(self, path: str) -> bool:
        blob = self.bucket.blob(path)
        if not blob.exists():
            return False
        blob.delete()
        return True

    def public_url(self, path: str) -> str:
        return f"https://storage.googleapis.com/{self.bucket.name}/{path}"

    def path_from_url(self, url: str) -> Optional[str]:
        parsed = urlparse(url)
        if parsed.netloc == "firebasestorage.googleapis.com":
            match = _FIREBASE_DOWNLOAD_PATH.search(parsed.path)
            return unquote(match.group(1)) if match else None
        prefix = f"/{self.bucket.name}/"
        if parsed.netloc == "storage.googleapis.com" and parsed.path.startswith(prefix):
            return unquote(parsed.path[len(prefix):])
        return None


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client (AWS S3, Cloudflare R2, Tencent COS, ...).
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    public_base_url: str = ""

    def __post_init__(self):
        # Virtual-hosted style addressing works across most S3 clones.
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> str:
        self._client.put_object(
            Bucket=self.bucket,
            Key=path,
            Body=data,
            ContentType=content_type,
        )
        return self.public_url(path)

    def delete(self, path: str) -> bool:
        try:
            self._client.head_object(Bucket=self.bucket, Key=path)
        except ClientError:
            return False
        self._client.delete_object(Bucket=self.bucket, Key=path)
        return True

    def public_url(self, path: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{path}"
        host = urlparse(self.endpoint).netloc if self.endpoint else f"s3.{self.region}.amazonaws.com"
        return f"https://{self.bucket}.{host}/{path}"

    def path_from_url(self, url: str) -> Optional[str]:
        prefix = self.public_url("")
        if not url.startswith(prefix):
            return None
        return unquote(url[len(prefix):])
