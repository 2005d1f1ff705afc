"""
DevCamper Backend — Bootcamp Photo Storage
============================================

What:  Validates and stores bootcamp photos, and resolves stored photos for
       download.
Who:   BootcampService.upload_photo (write) and GET /uploads/{filename} (read).

Validation order (cheapest first):
    1. A file was sent at all
    2. Declared content type starts with "image"
    3. Size ≤ settings.max_file_upload
    4. Sniffed content type (libmagic) is an image too
    5. Write to `{file_upload_path}/photo_<bootcamp id><ext>`

File naming:
    One photo per bootcamp. Uploading again overwrites the previous file with
    the same extension. The name carries no client-controlled characters other
    than the extension, which is reduced to `.` plus alphanumerics.
"""

import logging
import re
import uuid
from pathlib import Path
from typing import Optional

import aiofiles

from app.config import settings
from app.exceptions import FileStorageError, NotFoundError, UploadError

logger = logging.getLogger(__name__)

_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


class FileService:
    """
    Photo upload validation, storage and lookup.

    Args:
        upload_root: Override the upload directory (used in tests).
                     If None, uses settings.file_upload_path.
    """

    def __init__(self, upload_root: Optional[str] = None):
        self.upload_root = Path(upload_root or settings.file_upload_path).resolve()

    def ensure_upload_root(self) -> None:
        """Create the upload directory; called at application startup."""
        self.upload_root.mkdir(parents=True, exist_ok=True)
        logger.info("Upload directory ready at %s", self.upload_root)

    def detect_mime_type(self, content: bytes) -> str:
        """Content type from magic bytes (python-magic / libmagic)."""
        import magic

        return magic.from_buffer(content, mime=True)

    def validate_photo(self, content_type: Optional[str], content: bytes) -> None:
        """
        Raises:
            UploadError: not an image (declared or sniffed) or too large
        """
        if not content_type or not content_type.startswith("image"):
            raise UploadError(
                message="Please upload an image file",
                context={"content_type": content_type},
            )

        if len(content) > settings.max_file_upload:
            raise UploadError(
                message=f"Please upload an image less than {settings.max_file_upload} bytes",
                context={"size": len(content), "max": settings.max_file_upload},
            )

        try:
            detected = self.detect_mime_type(content)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )
        if not detected.startswith("image/"):
            raise UploadError(
                message="Please upload an image file",
                context={"detected_mime": detected},
            )

    @staticmethod
    def photo_filename(bootcamp_id: uuid.UUID, original_name: Optional[str]) -> str:
        ext = Path(original_name or "").suffix.lower()
        if not _SAFE_EXTENSION.match(ext):
            ext = ""
        return f"photo_{bootcamp_id}{ext}"

    async def store_photo(self, filename: str, content: bytes) -> Path:
        """
        Write the photo asynchronously.

        Raises:
            FileStorageError: directory creation or write failed
        """
        path = self.upload_root / filename
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store photo at %s: %s", path, str(e))
            raise FileStorageError(context={"path": str(path), "os_error": str(e)})

        logger.info("Photo stored: %s (%d bytes)", filename, len(content))
        return path

    def resolve(self, filename: str) -> Path:
        """
        Absolute path of a stored upload.

        Raises:
            NotFoundError: file missing, or the name escapes the upload root
        """
        path = (self.upload_root / filename).resolve()
        if self.upload_root not in path.parents or not path.is_file():
            logger.warning("Rejected upload lookup for %r", filename)
            raise NotFoundError(resource="file", message="File not found")
        return path


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
