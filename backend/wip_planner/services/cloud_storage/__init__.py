"""
Cloud Storage Services

This module provides services for interacting with Google Cloud Storage
for storing receipt files.
"""

from .gcs_service import GoogleCloudStorageService

__all__ = ["GoogleCloudStorageService"]
