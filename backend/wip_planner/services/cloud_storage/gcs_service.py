"""
Google Cloud Storage Service

This service handles interactions with Google Cloud Storage for storing
receipt files uploaded to event bills.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from google.cloud import storage
from google.cloud.exceptions import NotFound

from wip_planner.utils.logger import get_logger
from wip_planner.utils.settings import get_settings

logger = get_logger(__name__)


class GoogleCloudStorageService:
    """Service for managing receipt files in Google Cloud Storage"""

    def __init__(self, project_id: Optional[str] = None, bucket_name: Optional[str] = None):
        """
        Initialize the Google Cloud Storage service

        Args:
            project_id: Google Cloud project ID. If None, uses settings
            bucket_name: GCS bucket name. If None, uses settings
        """
        self.settings = get_settings()
        self.project_id = project_id or self.settings.GOOGLE_CLOUD_PROJECT_ID
        self.bucket_name = bucket_name or self.settings.GOOGLE_CLOUD_BUCKET_NAME

        if not self.project_id:
            raise ValueError("Google Cloud project ID is required")
        if not self.bucket_name:
            raise ValueError("Google Cloud bucket name is required")

        # Set up credentials path if provided
        if self.settings.GOOGLE_APPLICATION_CREDENTIALS:
            creds_path = Path(self.settings.GOOGLE_APPLICATION_CREDENTIALS)
            if not creds_path.is_absolute():
                # Relative paths are resolved against the backend directory
                backend_path = Path(__file__).parent.parent.parent.parent
                creds_path = backend_path / creds_path
            os.environ['GOOGLE_APPLICATION_CREDENTIALS'] = str(creds_path)
            logger.info(f"Set GOOGLE_APPLICATION_CREDENTIALS to: {creds_path}")

        try:
            self.client = storage.Client(project=self.project_id)
            self.bucket = self.client.bucket(self.bucket_name)
            logger.info(f"Initialized GCS service for bucket: {self.bucket_name}")
        except Exception:
            logger.error("Failed to initialize GCS client", exc_info=True)
            raise

    def upload_bytes(
        self,
        content: bytes,
        cloud_path: str,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Upload in-memory content to Google Cloud Storage

        Args:
            content: Raw bytes to upload
            cloud_path: Path in the bucket where the file should be stored
            content_type: MIME type of the file
            metadata: Additional metadata to store with the file

        Returns:
            Dictionary with upload result information
        """
        try:
            blob = self.bucket.blob(cloud_path)
            if metadata:
                blob.metadata = metadata

            blob.upload_from_string(content, content_type=content_type or "application/octet-stream")

            logger.info(f"Uploaded {len(content)} bytes to {cloud_path}")
            return {
                "success": True,
                "cloud_path": cloud_path,
                "size": len(content),
                "etag": blob.etag
            }

        except Exception as e:
            logger.error(f"Failed to upload to {cloud_path}", exc_info=True)
            return {"success": False, "error": str(e)}

    def download_bytes(self, cloud_path: str) -> Dict[str, Any]:
        """
        Download a file from Google Cloud Storage into memory

        Args:
            cloud_path: Path of the file in the bucket

        Returns:
            Dictionary with the file content on success
        """
        try:
            blob = self.bucket.blob(cloud_path)
            content = blob.download_as_bytes()
            return {"success": True, "content": content, "size": len(content)}

        except NotFound:
            return {"success": False, "error": f"File not found in bucket: {cloud_path}"}
        except Exception as e:
            logger.error(f"Failed to download file {cloud_path}", exc_info=True)
            return {"success": False, "error": str(e)}

    def delete_file(self, cloud_path: str) -> Dict[str, Any]:
        """Delete a file from the bucket"""
        try:
            self.bucket.blob(cloud_path).delete()
            logger.info(f"Deleted {cloud_path}")
            return {"success": True}
        except NotFound:
            return {"success": False, "error": f"File not found in bucket: {cloud_path}"}
        except Exception as e:
            logger.error(f"Failed to delete file {cloud_path}", exc_info=True)
            return {"success": False, "error": str(e)}
