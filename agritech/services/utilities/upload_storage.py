"""
Upload Storage
==============
Local-disk storage for crop images submitted with a diagnosis request.

Files are written to ``UPLOAD_DESTINATION`` as
``image-<epoch_ms>-<9 random digits><ext>`` and exposed to clients under
``/uploads/<filename>``.
"""

from __future__ import annotations

import logging
import os
import random
from dataclasses import dataclass
from typing import Iterable

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from agritech.domain.exceptions import PayloadTooLargeError, ValidationError
from agritech.utils.time import epoch_ms

logger = logging.getLogger(__name__)

PUBLIC_URL_PREFIX = "/uploads"
FILENAME_PREFIX = "image"


@dataclass(frozen=True)
class StoredImage:
    """Reference pair for a stored upload: public URL and local path."""

    url: str
    path: str


class UploadStorage:
    """Validate and persist image uploads on the local filesystem."""

    def __init__(self, destination: str, max_file_size: int, allowed_types: Iterable[str]):
        self.destination = os.path.abspath(destination)
        self.max_file_size = int(max_file_size)
        self.allowed_types = {t.strip().lower() for t in allowed_types if t and t.strip()}

    def validate(self, file: FileStorage | None) -> None:
        """Raise :class:`ValidationError` unless *file* is an acceptable image."""
        if file is None or not file.filename:
            raise ValidationError("Image file is required", detail={"errors": [{"field": "image", "message": "required"}]})

        mimetype = (file.mimetype or "").lower()
        if mimetype not in self.allowed_types:
            raise ValidationError(
                f"Unsupported image type: {mimetype or 'unknown'}",
                detail={"allowedTypes": sorted(self.allowed_types)},
            )

        size = _stream_size(file)
        if size == 0:
            raise ValidationError("Image file is empty", detail={"errors": [{"field": "image", "message": "empty"}]})
        if size > self.max_file_size:
            raise PayloadTooLargeError(
                "Image file is too large",
                detail={"maxFileSize": self.max_file_size, "size": size},
            )

    def save(self, file: FileStorage) -> StoredImage:
        """Validate and write *file* to disk under a generated name."""
        self.validate(file)
        os.makedirs(self.destination, exist_ok=True)

        filename = self._generate_filename(file.filename or "")
        path = os.path.join(self.destination, filename)
        file.save(path)

        logger.info("Saved uploaded image %s", filename)
        return StoredImage(url=f"{PUBLIC_URL_PREFIX}/{filename}", path=path)

    def delete(self, path: str) -> bool:
        """Remove a stored file. Returns False when nothing was removed."""
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("Failed to delete uploaded image %s: %s", path, exc)
            return False
        logger.debug("Deleted uploaded image %s", path)
        return True

    @staticmethod
    def _generate_filename(original: str) -> str:
        _root, ext = os.path.splitext(secure_filename(original))
        stamp = epoch_ms()
        suffix = random.randint(0, 999_999_999)
        return f"{FILENAME_PREFIX}-{stamp}-{suffix:09d}{ext.lower()}"


def _stream_size(file: FileStorage) -> int:
    stream = file.stream
    position = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(position)
    return size
