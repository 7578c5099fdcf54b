"""
File upload utilities for image validation and storage.
Uploaded listing images are stored on disk and exposed under the uploads URL path.
"""

import io
import uuid
import logging
from pathlib import Path
from typing import List, Optional
from PIL import Image, UnidentifiedImageError
import aiofiles
from fastapi import UploadFile

from marketplace.config import Settings
from marketplace.utils.exceptions import (
    FileUploadError,
    FileSizeExceededError,
    UnsupportedFileTypeError,
)

logger = logging.getLogger(__name__)


class FileValidator:
    """Validation of uploaded image files."""

    # Supported image formats and their extensions
    SUPPORTED_FORMATS = {
        "image/jpeg": [".jpg", ".jpeg"],
        "image/png": [".png"],
        "image/webp": [".webp"]
    }

    # Pillow format names per MIME type
    PIL_FORMATS = {
        "image/jpeg": "jpeg",
        "image/png": "png",
        "image/webp": "webp"
    }

    def __init__(self, allowed_types: List[str], max_file_size: int):
        self.allowed_types = [t for t in allowed_types if t in self.SUPPORTED_FORMATS]
        self.max_file_size = max_file_size

    def validate_extension(self, filename: Optional[str], mime_type: str) -> str:
        """
        Validate the file extension against its declared MIME type.

        Returns:
            Lowercase file extension

        Raises:
            FileUploadError: If the filename has no extension or it doesn't match the MIME type
        """
        if not filename:
            raise FileUploadError("Filename is required")

        extension = Path(filename).suffix.lower()
        if not extension:
            raise FileUploadError("File must have an extension")

        if extension not in self.SUPPORTED_FORMATS[mime_type]:
            raise FileUploadError(
                f"File extension '{extension}' doesn't match MIME type '{mime_type}'"
            )
        return extension

    def validate_mime_type(self, mime_type: Optional[str]) -> str:
        if not mime_type or mime_type not in self.allowed_types:
            raise UnsupportedFileTypeError(mime_type or "unknown", self.allowed_types)
        return mime_type

    def validate_size(self, size: int) -> int:
        if size <= 0:
            raise FileUploadError("File is empty")
        if size > self.max_file_size:
            raise FileSizeExceededError(size, self.max_file_size)
        return size

    def validate_image_content(self, content: bytes, mime_type: str) -> None:
        """
        Check that the bytes decode as an image of the declared format.

        Raises:
            FileUploadError: If Pillow cannot read the image or the format differs
        """
        try:
            with Image.open(io.BytesIO(content)) as img:
                pil_format = img.format.lower() if img.format else ""
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise FileUploadError(f"Invalid image file: {str(e)}")

        if pil_format != self.PIL_FORMATS[mime_type]:
            raise FileUploadError(
                f"Image format '{pil_format}' doesn't match MIME type '{mime_type}'"
            )

    async def read_validated(self, file: UploadFile) -> tuple:
        """
        Run every check on an uploaded file.

        Returns:
            Tuple of (content, extension)
        """
        mime_type = self.validate_mime_type(file.content_type)
        extension = self.validate_extension(file.filename, mime_type)

        await file.seek(0)
        content = await file.read()

        self.validate_size(len(content))
        self.validate_image_content(content, mime_type)
        return content, extension


class AssetStore:
    """
    On-disk storage for uploaded images.
    Stored paths are URL paths such as ``/uploads/<uuid>.png`` and are made
    absolute with ``public_url`` when a response is shaped.
    """

    def __init__(self, settings: Settings):
        self.base_dir = Path(settings.upload_dir)
        self.url_path = "/" + settings.uploads_url_path.strip("/")
        self.public_base_url = settings.public_base_url
        self.max_files = settings.max_files_per_upload
        self.validator = FileValidator(settings.allowed_file_types, settings.max_file_size)

    def ensure_directory(self) -> Path:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        return self.base_dir

    def generate_unique_filename(self, extension: str) -> str:
        return f"{uuid.uuid4()}{extension}"

    async def save(self, file: UploadFile) -> str:
        """
        Validate and save one upload.

        Returns:
            Stored URL path of the saved file

        Raises:
            FileUploadError: If validation fails or the file cannot be written
        """
        content, extension = await self.validator.read_validated(file)
        filename = self.generate_unique_filename(extension)
        file_path = self.ensure_directory() / filename

        try:
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            self.delete_file(file_path)
            logger.error(f"Failed to write upload {file_path}: {e}")
            raise FileUploadError("Failed to save file")

        return f"{self.url_path}/{filename}"

    async def save_many(self, files: List[UploadFile]) -> List[str]:
        """
        Save a batch of uploads. Nothing is kept if any file in the batch fails.

        Raises:
            FileUploadError: If the batch is empty or has too many files
            BadRequestError: Whatever rejected the failing file; files saved before it are deleted
        """
        if not files:
            raise FileUploadError("No files provided")
        if len(files) > self.max_files:
            raise FileUploadError(f"At most {self.max_files} files can be uploaded at once")

        stored: List[str] = []
        try:
            for file in files:
                stored.append(await self.save(file))
        except Exception:
            for path in stored:
                self.delete_stored(path)
            raise
        return stored

    def path_for(self, stored_path: str) -> Optional[Path]:
        """Local file backing a stored URL path, or None for external URLs."""
        prefix = self.url_path + "/"
        if not stored_path.startswith(prefix):
            return None
        return self.base_dir / stored_path[len(prefix):]

    def delete_file(self, file_path: Path) -> bool:
        try:
            if file_path.exists():
                file_path.unlink()
                return True
            return False
        except OSError as e:
            logger.warning(f"Could not delete {file_path}: {e}")
            return False

    def delete_stored(self, stored_path: str) -> bool:
        file_path = self.path_for(stored_path)
        if file_path is None:
            return False
        return self.delete_file(file_path)

    def public_url(self, stored_path: str, base_url: Optional[str] = None) -> str:
        """
        Make a stored image path absolute.

        Args:
            stored_path: Stored path or an already absolute URL
            base_url: Request base URL used when no public base URL is configured

        Returns:
            Absolute URL; absolute inputs are returned unchanged
        """
        if stored_path.startswith(("http://", "https://")):
            return stored_path

        base = self.public_base_url or (base_url or "").rstrip("/")
        if not stored_path.startswith("/"):
            stored_path = "/" + stored_path
        return f"{base}{stored_path}"
