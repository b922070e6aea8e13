"""
Filesystem storage for uploaded machine media.

Files live below a single root directory, grouped into category
sub-directories, and are served read-only under ``/uploads``.
"""

import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Union

from fastapi import Request, status

logger = logging.getLogger(__name__)

CATEGORIES = ("logos", "products", "machines", "gallery")

# Upload "kind" accepted by the single-file endpoint -> storage category
KIND_CATEGORIES: Dict[str, str] = {
    "logo": "logos",
    "product": "products",
    "general": "machines",
}

IMAGE_TYPES: Dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

VIDEO_TYPES: Dict[str, str] = {
    "video/mp4": ".mp4",
    "video/mpeg": ".mpeg",
    "video/quicktime": ".mov",
    "video/webm": ".webm",
}

ALLOWED_TYPES: Dict[str, str] = {**IMAGE_TYPES, **VIDEO_TYPES}

URL_PREFIX = "/uploads"


class UploadValidationError(Exception):
    """An upload was rejected before anything was written."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class StoredFile:
    filename: str
    original_name: str
    content_type: str
    size: int
    storage_path: str  # relative to the storage root, e.g. "gallery/gallery-1700000000000-ab12cd34.jpg"
    url: str
    media_type: str


def get_media_type(content_type: str) -> str:
    return "video" if content_type.startswith("video/") else "image"


class FileStorage:
    """Stores uploads under ``root`` and maps them to public URLs."""

    def __init__(self, root: Union[str, Path], max_size: int):
        self.root = Path(root).expanduser().resolve()
        self.max_size = max_size

    def ensure_directories(self) -> None:
        for category in CATEGORIES:
            (self.root / category).mkdir(parents=True, exist_ok=True)

    def validate(self, content_type: str, size: int) -> None:
        """
        Check type and size of an upload.

        Raises:
            UploadValidationError: 400 for a disallowed type, 413 when too large
        """
        if content_type not in ALLOWED_TYPES:
            raise UploadValidationError(
                "Only images (JPEG, PNG, GIF, WebP) and videos (MP4, MPEG, MOV, WebM) are allowed"
            )
        if size > self.max_size:
            raise UploadValidationError(
                f"File exceeds the maximum size of {self.max_size // (1024 * 1024)} MB",
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            )
        if size == 0:
            raise UploadValidationError("Uploaded file is empty")

    def save(
        self, category: str, original_name: str, content_type: str, data: bytes
    ) -> StoredFile:
        """Validate and write an upload, returning its metadata."""
        if category not in CATEGORIES:
            raise ValueError(f"Unknown storage category: {category}")

        self.validate(content_type, len(data))

        prefix = category[:-1] if category.endswith("s") else category
        filename = (
            f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(8)}"
            f"{ALLOWED_TYPES[content_type]}"
        )
        directory = self.root / category
        directory.mkdir(parents=True, exist_ok=True)
        (directory / filename).write_bytes(data)

        storage_path = f"{category}/{filename}"
        logger.info("Stored upload", extra={
            "storage_path": storage_path,
            "size": len(data),
            "content_type": content_type,
        })

        return StoredFile(
            filename=filename,
            original_name=(original_name or filename)[:255],
            content_type=content_type,
            size=len(data),
            storage_path=storage_path,
            url=self.url_for(storage_path),
            media_type=get_media_type(content_type),
        )

    def resolve(self, storage_path: str) -> Path:
        """
        Map a relative storage path to an absolute one.

        Raises:
            ValueError: If the path escapes the storage root
        """
        path = (self.root / storage_path).resolve()
        if path == self.root or self.root not in path.parents:
            raise ValueError(f"Path outside upload directory: {storage_path}")
        return path

    def delete(self, storage_path: str) -> bool:
        """Remove a stored file. Missing files are not an error."""
        try:
            path = self.resolve(storage_path)
        except ValueError:
            logger.warning("Refused to delete file outside upload directory", extra={
                "storage_path": storage_path,
            })
            return False

        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Error deleting file {storage_path}: {e}")
            return False

        logger.info("Deleted upload", extra={"storage_path": storage_path})
        return True

    @staticmethod
    def url_for(storage_path: str) -> str:
        return f"{URL_PREFIX}/{storage_path}"


def get_file_storage(request: Request) -> FileStorage:
    """Dependency returning the application's file storage"""
    return request.app.state.file_storage
