"""
Todo image uploads: validation and storage on local disk.

Files are written to ``Settings.upload_dir`` and exposed by the app under
``/uploads``; the todo row keeps the public path only.
"""

from __future__ import annotations

import logging
import pathlib
import re
import time
import uuid
from typing import Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from config.settings import Settings
from utils.errors import ErrorKind, Result

logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"
_IMAGE_TYPES = re.compile(r"jpeg|jpg|png|gif")


def is_image(filename: str, content_type: Optional[str]) -> bool:
    """Both the MIME type and the file extension have to look like an image."""
    extension = pathlib.Path(filename).suffix.lower()
    return bool(_IMAGE_TYPES.search(content_type or "")) and bool(_IMAGE_TYPES.search(extension))


class ImageStorage:
    def __init__(self, settings: Settings) -> None:
        self.directory = pathlib.Path(settings.upload_dir)
        self.max_bytes = settings.max_upload_bytes

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    async def save(self, upload: UploadFile) -> Result[str]:
        """Store an uploaded image and return its public path."""
        filename = upload.filename or ""
        if not is_image(filename, upload.content_type):
            return Result.failure(ErrorKind.VALIDATION, "Only image files are allowed!")

        data = await upload.read(self.max_bytes + 1)
        if len(data) > self.max_bytes:
            return Result.failure(
                ErrorKind.VALIDATION,
                f"Image exceeds the {self.max_bytes // (1024 * 1024)}MB limit",
            )

        stored_name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{pathlib.Path(filename).suffix.lower()}"
        target = self.directory / stored_name
        try:
            await run_in_threadpool(self._write, target, data)
        except OSError:
            logger.exception("Failed to store upload %s", filename)
            return Result.failure(ErrorKind.UNEXPECTED, "Failed to store image")

        logger.info("Stored upload %s as %s (%d bytes)", filename, stored_name, len(data))
        return Result.success(f"{UPLOADS_URL_PREFIX}/{stored_name}")

    async def discard(self, public_path: str) -> None:
        """Remove a stored image by the public path ``save`` returned."""
        target = self.directory / pathlib.PurePosixPath(public_path).name
        try:
            await run_in_threadpool(target.unlink, missing_ok=True)
        except OSError:
            logger.exception("Failed to remove upload %s", target)

    def _write(self, target: pathlib.Path, data: bytes) -> None:
        self.ensure_directory()
        target.write_bytes(data)
