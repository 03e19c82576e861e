"""Local filesystem storage for uploaded product images."""

import uuid
from pathlib import Path, PurePosixPath
from typing import Optional

import aiofiles
import aiofiles.os
from fastapi import UploadFile
import structlog

from app.core.config import settings

logger = structlog.get_logger()

IMAGE_CONTENT_TYPE_PREFIX = "image/"
MAX_IMAGE_SIZE = 10 * 1024 * 1024
CHUNK_SIZE = 64 * 1024
# Most filesystems cap a single path component at 255 bytes
MAX_FILENAME_BYTES = 255


class InvalidImageFileError(OSError):
    """Raised when a file cannot be stored as a product image"""


def is_image_content_type(content_type: Optional[str]) -> bool:
    return content_type is not None and content_type.startswith(IMAGE_CONTENT_TYPE_PREFIX)


def clean_filename(filename: str) -> str:
    """Drop directory components so the name cannot escape the upload directory"""
    name = PurePosixPath(filename.replace("\\", "/")).name
    if name in ("", ".", ".."):
        raise InvalidImageFileError(f"Invalid file name: {filename!r}")
    return name


def fit_filename(prefix: str, name: str) -> str:
    """Join prefix and name, shortening the stem so the result fits MAX_FILENAME_BYTES"""
    budget = MAX_FILENAME_BYTES - len(prefix.encode("utf-8"))
    if len(name.encode("utf-8")) <= budget:
        return prefix + name

    path = PurePosixPath(name)
    suffix = path.suffix
    stem_budget = budget - len(suffix.encode("utf-8"))
    if stem_budget < 1:
        raise InvalidImageFileError("File name is too long")
    stem = path.stem.encode("utf-8")[:stem_budget].decode("utf-8", errors="ignore")
    return prefix + stem + suffix


class ImageStorage:
    def __init__(self, upload_dir: Path):
        self.upload_dir = Path(upload_dir)

    async def store(self, file: UploadFile) -> str:
        """
        Persist an uploaded image under a unique name.

        Returns the generated filename, relative to the upload directory.

        Raises:
            InvalidImageFileError: content type is not an image or filename is missing
        """
        if not is_image_content_type(file.content_type) or not file.filename:
            raise InvalidImageFileError("Invalid image format")

        unique_filename = fit_filename(f"{uuid.uuid4()}_", clean_filename(file.filename))

        await aiofiles.os.makedirs(self.upload_dir, exist_ok=True)
        destination = self.upload_dir / unique_filename

        await file.seek(0)
        written = 0
        try:
            async with aiofiles.open(destination, "wb") as out:
                while True:
                    chunk = await file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    await out.write(chunk)
                    written += len(chunk)
        except Exception:
            logger.error("Failed to store product image", filename=unique_filename, written=written)
            if await aiofiles.os.path.isfile(destination):
                await aiofiles.os.remove(destination)
            raise

        logger.info("Stored product image", filename=unique_filename, size=written)
        return unique_filename

    async def delete(self, filename: str) -> bool:
        path = self.upload_dir / clean_filename(filename)
        if not await aiofiles.os.path.isfile(path):
            return False
        await aiofiles.os.remove(path)
        logger.info("Removed product image", filename=filename)
        return True


image_storage = ImageStorage(Path(settings.upload_dir))


def get_image_storage() -> ImageStorage:
    """FastAPI dependency for the image storage"""
    return image_storage
