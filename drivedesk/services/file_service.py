"""
DriveDesk Relay — Temporary Upload Service
============================================

What:  Validates the uploaded licence image, writes it to the upload directory,
       reads it back as base64 and removes it again.
Why:   The upload is the only resource a request owns. Keeping its whole
       lifetime here means the route cannot forget to delete it.
How:   temporary_upload() is an async context manager: the file is stored on
       entry and deleted in a finally block, so it disappears on success,
       on a Gemini failure and on any local fault alike.
Who:   Called by the /extract-info route.

Validation order:
    1. Presence: an absent upload (or one with no filename) is rejected before
       any of its attributes are looked at.
    2. Declared MIME type must start with "image/". The type is the one the
       client declared; content sniffing is not done.
"""

import base64
import logging
import os
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional

import aiofiles
from fastapi import UploadFile

from drivedesk.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

IMAGE_MIME_PREFIX = "image/"
INVALID_IMAGE_MESSAGE = "Invalid or missing image file"


@dataclass(frozen=True)
class StoredUpload:
    """A request's uploaded image as written to disk."""

    path: Path
    mime_type: str
    size: int


class FileService:
    """
    Manages the lifecycle of one uploaded image per request.

    Lifecycle:
        1. validate_image_upload() → declared MIME type
        2. store_upload() → <upload_dir>/<uuid4 hex>
        3. read_base64() → base64 text of the stored bytes
        4. cleanup_file() → file removed (always, via temporary_upload)

    Filenames are uuid4 values with no user input, so concurrent uploads never
    collide and no path traversal is possible.
    """

    def __init__(self, upload_dir: str):
        # Created at startup by the lifespan and again on each store
        self.upload_dir = Path(upload_dir).resolve()
        logger.info("FileService initialized with upload_dir=%s", self.upload_dir)

    def validate_image_upload(self, upload: Optional[UploadFile]) -> str:
        """
        Check presence first, then the declared MIME type.

        Returns:  The declared MIME type (e.g. "image/jpeg").
        Raises:   ValidationError for a missing file or a non-image type.
        """
        if upload is None or not upload.filename:
            raise ValidationError(
                message=INVALID_IMAGE_MESSAGE,
                field="image",
                context={"reason": "missing"},
            )

        mime_type = upload.content_type or ""
        if not mime_type.startswith(IMAGE_MIME_PREFIX):
            raise ValidationError(
                message=INVALID_IMAGE_MESSAGE,
                field="image",
                context={"reason": "not_an_image", "declared_mime": mime_type},
            )
        return mime_type

    async def store_upload(self, upload: UploadFile, mime_type: str) -> StoredUpload:
        """
        Write the uploaded bytes to a uniquely named file in the upload directory.

        Raises:
            FileStorageError if the directory or file cannot be written.
        """
        path = self.upload_dir / uuid.uuid4().hex

        try:
            content = await upload.read()
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", path, str(e))
            # A partial write may have left the file behind
            await self.cleanup_file(path)
            raise FileStorageError(
                message="Failed to process image",
                context={"path": str(path), "os_error": str(e)},
            )

        logger.info("Upload stored: %s (%d bytes, %s)", path.name, len(content), mime_type)
        return StoredUpload(path=path, mime_type=mime_type, size=len(content))

    async def read_base64(self, path: Path) -> str:
        """
        Read the stored image and return its content as base64 text.

        Raises:
            FileStorageError if the file cannot be read.
        """
        try:
            async with aiofiles.open(path, "rb") as f:
                content = await f.read()
        except OSError as e:
            logger.error("Failed to read upload %s: %s", path.name, str(e))
            raise FileStorageError(
                message="Failed to process image",
                context={"path": str(path), "os_error": str(e)},
            )
        return base64.b64encode(content).decode("ascii")

    async def cleanup_file(self, path: Path) -> None:
        """
        Remove a stored upload if it exists.

        A file that is already gone is not an error. Other OS errors are
        logged and not raised, so a failed delete never masks the response.
        """
        try:
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up upload: %s", path.name)
            else:
                logger.debug("Cleanup: upload already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up upload %s: %s", path, str(e))

    @asynccontextmanager
    async def temporary_upload(self, upload: Optional[UploadFile]) -> AsyncIterator[StoredUpload]:
        """
        Validate and store an upload for the duration of a block.

        Usage:
            async with file_service.temporary_upload(image) as stored:
                image_base64 = await file_service.read_base64(stored.path)
                ...
        The stored file is deleted when the block exits, however it exits.
        """
        mime_type = self.validate_image_upload(upload)
        stored = await self.store_upload(upload, mime_type)
        try:
            yield stored
        finally:
            await self.cleanup_file(stored.path)
