"""Disk storage for uploaded image files."""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from fastapi import HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from imageshare.config import Settings

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"
# Matches images.original_name
MAX_ORIGINAL_NAME_LENGTH = 255
MAX_SUFFIX_LENGTH = 16


@dataclass(frozen=True)
class StoredFile:
    """A file written to the upload directory."""

    filename: str
    original_name: str
    mimetype: str
    size: int
    path: str


def file_url(filename: str) -> str:
    return f"{UPLOAD_URL_PREFIX}/{filename}"


class UploadStorage:
    """Validates image uploads and writes them under generated names."""

    def __init__(self, settings: Settings):
        self.upload_dir = Path(settings.upload_dir)
        self.max_bytes = settings.max_upload_bytes

    def ensure_directory(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def save(self, upload: UploadFile | None) -> StoredFile:
        """Validate and persist an uploaded image.

        Only ``image/*`` content types up to ``max_bytes`` are accepted.
        """
        if upload is None or not upload.filename:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No valid image was uploaded",
            )

        content_type = upload.content_type or ""
        if not content_type.startswith("image/"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid file type. Only images are allowed",
            )

        data = await upload.read(self.max_bytes + 1)
        if len(data) > self.max_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File too large. Maximum size is {self.max_bytes // (1024 * 1024)}MB",
            )

        suffix = Path(upload.filename).suffix
        if len(suffix) > MAX_SUFFIX_LENGTH:
            suffix = ""
        filename = uuid.uuid4().hex + suffix
        path = self.upload_dir / filename
        self.ensure_directory()
        await run_in_threadpool(path.write_bytes, data)

        return StoredFile(
            filename=filename,
            original_name=upload.filename[:MAX_ORIGINAL_NAME_LENGTH],
            mimetype=content_type,
            size=len(data),
            path=str(path),
        )

    def discard(self, stored: StoredFile) -> None:
        """Remove a stored file whose database record could not be written."""
        try:
            Path(stored.path).unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove orphaned upload {stored.filename}: {e}")
