"""
Image handling for admin uploads.

Form fields accept either an existing http(s) URL or a base64 data URL pasted
by the browser; data URLs are decoded, checked with Pillow and uploaded to
object storage so documents only ever hold URLs.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import random
import re
import string
import time
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

from folio.storage import StorageClient
from shared.constants import IMAGES_FOLDER, MAX_IMAGE_BYTES

logger = logging.getLogger(__name__)

_DATA_URL_PATTERN = re.compile(
    r"^data:image/(?P<subtype>[a-z0-9.+-]+);base64,(?P<payload>.+)$",
    re.IGNORECASE | re.DOTALL,
)

# data URL subtype -> file extension
ALLOWED_IMAGE_TYPES = {
    "jpeg": "jpg",
    "jpg": "jpg",
    "png": "png",
    "webp": "webp",
    "avif": "avif",
    "gif": "gif",
    "svg+xml": "svg",
    "bmp": "bmp",
    "tiff": "tiff",
    "x-icon": "ico",
}
# Pillow cannot open these without plugins.
_UNVERIFIED_TYPES = {"svg+xml", "avif"}


@dataclass
class ImageUploadResult:
    success: bool
    url: Optional[str] = None
    error: Optional[str] = None


def is_base64_data_url(value: str) -> bool:
    return bool(value) and value.startswith("data:image/")


def is_http_url(value: str) -> bool:
    return bool(re.match(r"^https?://[^\s/$.?#].[^\s]*$", value or "", re.IGNORECASE))


def _unique_name(extension: str) -> str:
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=10))
    return f"{millis}-{suffix}.{extension}"


def _verify_raster(data: bytes) -> None:
    with Image.open(io.BytesIO(data)) as image:
        image.verify()


def process_image_input(
    value: Optional[str],
    folder: str = IMAGES_FOLDER,
    storage: Optional[StorageClient] = None,
) -> ImageUploadResult:
    """
    Returns the URL to store for an image form field, uploading data URLs.
    """
    value = (value or "").strip()
    if not value:
        return ImageUploadResult(success=True)

    if is_http_url(value):
        return ImageUploadResult(success=True, url=value)

    if not is_base64_data_url(value):
        return ImageUploadResult(success=False, error="Invalid image input format")

    match = _DATA_URL_PATTERN.match(value)
    if not match:
        return ImageUploadResult(success=False, error="Invalid image input format")

    subtype = match.group("subtype").lower()
    extension = ALLOWED_IMAGE_TYPES.get(subtype)
    if extension is None:
        return ImageUploadResult(
            success=False, error=f"Unsupported image type: image/{subtype}"
        )

    try:
        data = base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError):
        return ImageUploadResult(success=False, error="Failed to process base64 image")

    if len(data) > MAX_IMAGE_BYTES:
        return ImageUploadResult(success=False, error="Image must be 10MB or smaller")

    if subtype not in _UNVERIFIED_TYPES:
        try:
            _verify_raster(data)
        except (UnidentifiedImageError, OSError, SyntaxError):
            return ImageUploadResult(success=False, error="Uploaded file is not a valid image")

    if storage is None:
        return ImageUploadResult(success=False, error="Storage is not configured")

    path = f"{folder}/{_unique_name(extension)}"
    try:
        url = storage.upload_bytes(path, data, f"image/{subtype}")
    except Exception as exc:
        logger.exception("Error uploading image to storage: %s", path)
        return ImageUploadResult(success=False, error=str(exc) or "Upload failed")
    logger.info("Uploaded image %s (%d bytes)", path, len(data))
    return ImageUploadResult(success=True, url=url)


def delete_image(url: str, storage: StorageClient) -> bool:
    """Deletes an image previously uploaded to our storage; foreign URLs are left alone."""
    path = storage.path_from_url(url or "")
    if not path:
        return False
    try:
        return storage.delete(path)
    except Exception:
        logger.exception("Error deleting image from storage: %s", url)
        return False
