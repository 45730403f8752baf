"""Service layer for upload orchestration."""

from uploader.services.upload_service import UploadOrchestrator

__all__ = [
    "UploadOrchestrator",
]
