"""Infrastructure-facing helpers used by the application services."""

from agritech.services.utilities.upload_storage import StoredImage, UploadStorage

__all__ = ["StoredImage", "UploadStorage"]
