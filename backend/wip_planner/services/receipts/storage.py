"""
Receipt storage.

Receipts arrive inline as data: URLs. By default the data URL itself is
stored on the attachment; when a Cloud Storage bucket is configured the
payload is uploaded and the attachment keeps the gs:// reference instead.
"""

from __future__ import annotations

import uuid
from pathlib import PurePosixPath
from typing import Optional

from wip_planner.services.receipts.data_url import is_data_url, parse_data_url
from wip_planner.utils.logger import get_logger
from wip_planner.utils.settings import get_settings

logger = get_logger(__name__)

GCS_SCHEME = "gs://"


class ReceiptStorage:
    """Persist and read back receipt payloads"""

    def __init__(self, cloud_storage=None):
        self._cloud_storage = cloud_storage

    @classmethod
    def from_settings(cls) -> "ReceiptStorage":
        settings = get_settings()
        if settings.GOOGLE_CLOUD_PROJECT_ID and settings.GOOGLE_CLOUD_BUCKET_NAME:
            from wip_planner.services.cloud_storage import GoogleCloudStorageService

            return cls(GoogleCloudStorageService())
        return cls()

    @property
    def uses_cloud(self) -> bool:
        return self._cloud_storage is not None

    def store(self, event_id: str, file_name: str, url: str, mime_type: str) -> str:
        """Return the URL to keep on the attachment"""
        if not self.uses_cloud or not is_data_url(url):
            return url

        parsed = parse_data_url(url)
        if parsed is None:
            return url

        _, payload = parsed
        safe_name = PurePosixPath(file_name).name or "receipt"
        cloud_path = f"receipts/{event_id}/{uuid.uuid4().hex}_{safe_name}"
        result = self._cloud_storage.upload_bytes(payload, cloud_path, content_type=mime_type)
        if not result.get("success"):
            logger.warning(f"Keeping receipt {file_name} inline, upload failed: {result.get('error')}")
            return url
        return f"{GCS_SCHEME}{self._cloud_storage.bucket_name}/{cloud_path}"

    def read(self, url: str) -> Optional[bytes]:
        """Receipt bytes, or None when the URL points somewhere we cannot read"""
        if is_data_url(url):
            parsed = parse_data_url(url)
            return parsed[1] if parsed else None

        if url.startswith(GCS_SCHEME) and self.uses_cloud:
            _, _, cloud_path = url[len(GCS_SCHEME):].partition("/")
            result = self._cloud_storage.download_bytes(cloud_path)
            if result.get("success"):
                return result["content"]
            logger.warning(f"Could not read receipt {url}: {result.get('error')}")
        return None

    def discard(self, url: str) -> None:
        """Remove a stored payload; inline receipts vanish with their row"""
        if not (url.startswith(GCS_SCHEME) and self.uses_cloud):
            return
        _, _, cloud_path = url[len(GCS_SCHEME):].partition("/")
        result = self._cloud_storage.delete_file(cloud_path)
        if not result.get("success"):
            logger.warning(f"Could not delete receipt {url}: {result.get('error')}")
