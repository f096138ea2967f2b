"""
CrimeWatch Triage - Media Upload Client
Unsigned image uploads to Cloudinary.
"""

import logging
from typing import Optional

import httpx

from src.core.config import settings
from src.core.errors import MediaUploadError

logger = logging.getLogger(__name__)


class MediaUploadClient:
    """
    Uploads evidence files and returns their public URL.

    Usage:
        with MediaUploadClient("my-cloud", "crime_reports") as client:
            url = client.upload(photo_bytes, "scene.jpg")
    """

    BASE_URL = "https://api.cloudinary.com/v1_1"

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        upload_preset: Optional[str] = None,
        timeout: float = 60.0,
        client: Optional[httpx.Client] = None
    ):
        self.cloud_name = cloud_name or settings.cloudinary_cloud_name
        if not self.cloud_name:
            raise ValueError("Cloudinary cloud name not configured")

        self.upload_preset = upload_preset or settings.cloudinary_upload_preset
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self._client.close()

    @property
    def upload_url(self) -> str:
        return f"{self.BASE_URL}/{self.cloud_name}/auto/upload"

    def upload(
        self,
        data: bytes,
        filename: str = "upload",
        content_type: str = "application/octet-stream"
    ) -> str:
        """
        Upload a file.

        Returns:
            Public HTTPS URL of the uploaded file
        """
        try:
            response = self._client.post(
                self.upload_url,
                data={"upload_preset": self.upload_preset},
                files={"file": (filename, data, content_type)},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise MediaUploadError(
                f"Failed to upload {filename}: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise MediaUploadError(f"Failed to upload {filename}: {e}") from e
        except ValueError as e:
            raise MediaUploadError(f"Upload of {filename} returned invalid JSON") from e

        url = body.get("secure_url") if isinstance(body, dict) else None
        if not url:
            raise MediaUploadError(f"Upload of {filename} returned no URL")

        logger.info(f"Uploaded {filename} ({len(data)} bytes)")
        return url
