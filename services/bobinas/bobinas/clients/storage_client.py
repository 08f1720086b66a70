"""
HTTP client for Supabase object storage.

Uploads bobina photos to a public bucket and returns their public URL.
Uploaded objects are never deleted by this service.
"""
import logging
import os
import time
import uuid
from typing import Optional
import httpx

from .. import errors
from ..config import HTTP_TIMEOUT, MAX_PHOTO_BYTES, MIN_PHOTO_BYTES

logger = logging.getLogger(__name__)

EXT_TO_CONTENT_TYPE = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "heic": "image/heic",
    "heif": "image/heif",
}


def check_image(data: bytes, filename: str, content_type: Optional[str]) -> str:
    """
    Reject files that are not plausible images and resolve their content type.

    Args:
        data: File bytes
        filename: Original file name
        content_type: Content type reported by the client, if any

    Returns:
        The content type to store the object with

    Raises:
        errors.UploadError: With rejected=True if the file is refused
    """
    content_type = (content_type or "").strip().lower()
    ext = os.path.splitext(filename)[1].lower().lstrip(".")

    if content_type and content_type != "application/octet-stream":
        if not content_type.startswith("image/"):
            raise errors.UploadError("File must be an image", rejected=True)
    elif ext not in EXT_TO_CONTENT_TYPE:
        raise errors.UploadError("File must be an image", rejected=True)
    else:
        content_type = EXT_TO_CONTENT_TYPE[ext]

    if len(data) < MIN_PHOTO_BYTES:
        raise errors.UploadError("Image file appears to be corrupted or too small", rejected=True)
    if len(data) > MAX_PHOTO_BYTES:
        raise errors.UploadError(f"Image size must be less than {MAX_PHOTO_BYTES // (1024 * 1024)}MB", rejected=True)
    return content_type


def object_name(filename: str) -> str:
    """Build a unique object name: <epoch millis>-<random hex>.<ext>."""
    ext = os.path.splitext(filename)[1].lower().lstrip(".") or "jpg"
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}.{ext}"


class SupabaseStorage:
    """
    Object storage client for one Supabase bucket.

    Args:
        base_url: Supabase project URL
        api_key: Project API key
        bucket: Public bucket holding the photos
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        bucket: str = "bobina-photos",
        timeout: float = HTTP_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.bucket = bucket
        self.timeout = timeout
        self.transport = transport

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"

    def upload(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        """
        Upload a photo.

        Args:
            data: Image bytes
            filename: Original file name (used for the extension only)
            content_type: Content type hint

        Returns:
            Public URL of the uploaded object

        Raises:
            errors.UploadError: If the file is rejected or the upload fails
        """
        content_type = check_image(data, filename, content_type)
        path = object_name(filename)
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": content_type,
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    f"{self.base_url}/storage/v1/object/{self.bucket}/{path}",
                    content=data,
                    headers=headers,
                )
        except httpx.HTTPError as e:
            logger.error(f"Photo upload failed for {filename}: {e}")
            raise errors.UploadError(f"Failed to upload photo: {e}") from e

        if response.status_code >= 400:
            logger.error(f"Photo upload rejected by storage: HTTP {response.status_code} {response.text}")
            raise errors.UploadError(f"Failed to upload photo: HTTP {response.status_code}")

        url = self.public_url(path)
        logger.info(f"Uploaded photo {filename} ({len(data)} bytes) to {url}")
        return url
