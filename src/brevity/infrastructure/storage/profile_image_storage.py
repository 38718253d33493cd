"""Local filesystem storage for profile images."""

import asyncio
import uuid
from pathlib import Path

from brevity.core.config import Settings, get_settings
from brevity.core.exceptions import ValidationError
from brevity.core.logging import get_logger
from brevity.domain.entities.account import ProfileImage

logger = get_logger(__name__)

PROFILE_IMAGE_DIR = "profile-images"

# Stored names never take their extension from the client
IMAGE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def _matches_signature(content: bytes, mime_type: str) -> bool:
    if mime_type == "image/jpeg":
        return content.startswith(b"\xff\xd8\xff")
    if mime_type == "image/png":
        return content.startswith(b"\x89PNG\r\n\x1a\n")
    if mime_type == "image/gif":
        return content.startswith((b"GIF87a", b"GIF89a"))
    if mime_type == "image/webp":
        return content[:4] == b"RIFF" and content[8:12] == b"WEBP"
    return False


class ProfileImageStorage:
    """Stores uploaded profile images under ``storage_path/profile-images``.

    Files are renamed to ``<uuid><ext>``; the new name is the image's
    ``public_id`` and is all that is needed to delete it again.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.storage_path = Path(self.settings.storage_path)

    @property
    def directory(self) -> Path:
        return self.storage_path / PROFILE_IMAGE_DIR

    def validate_file_size(self, size: int) -> None:
        if size == 0:
            raise ValidationError("Profile image is empty")
        if size > self.settings.max_file_size:
            max_size_mb = self.settings.max_file_size / (1024 * 1024)
            actual_size_mb = size / (1024 * 1024)
            raise ValidationError(
                f"File size ({actual_size_mb:.2f}MB) exceeds maximum allowed "
                f"size ({max_size_mb:.2f}MB)"
            )

    def validate_mime_type(self, mime_type: str | None) -> None:
        if (
            mime_type not in self.settings.allowed_image_mime_types
            or mime_type not in IMAGE_EXTENSIONS
        ):
            raise ValidationError(
                f"File type '{mime_type}' is not allowed. "
                f"Allowed types: {', '.join(self.settings.allowed_image_mime_types)}"
            )

    def validate_content(self, content: bytes, mime_type: str) -> None:
        if not _matches_signature(content, mime_type):
            raise ValidationError(f"File content does not match its type '{mime_type}'")

    def url_for(self, public_id: str) -> str:
        return f"{self.settings.external_url.rstrip('/')}/files/{PROFILE_IMAGE_DIR}/{public_id}"

    def save(self, content: bytes, mime_type: str | None) -> ProfileImage:
        """Validate and store an uploaded image.

        The stored extension is derived from the validated type, so the
        file is always served back as that image type.

        Args:
            content: Raw file bytes.
            mime_type: Client-declared content type; the bytes must match it.

        Returns:
            Reference to the stored image.

        Raises:
            ValidationError: If the file is empty, too large or not an image.
        """
        self.validate_file_size(len(content))
        self.validate_mime_type(mime_type)
        self.validate_content(content, mime_type)

        public_id = f"{uuid.uuid4()}{IMAGE_EXTENSIONS[mime_type]}"
        file_path = self.directory / public_id
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "wb") as f:
            f.write(content)

        logger.info("Profile image saved", public_id=public_id, size=len(content))
        return ProfileImage(url=self.url_for(public_id), public_id=public_id)

    async def save_async(self, content: bytes, mime_type: str | None) -> ProfileImage:
        return await asyncio.to_thread(self.save, content, mime_type)

    def delete(self, public_id: str) -> None:
        """Remove a stored image; missing files are ignored."""
        file_path = (self.directory / public_id).resolve()
        if file_path.parent != self.directory.resolve():
            raise ValidationError("Invalid file path")
        file_path.unlink(missing_ok=True)
        logger.info("Profile image deleted", public_id=public_id)

    async def delete_async(self, public_id: str) -> None:
        await asyncio.to_thread(self.delete, public_id)
