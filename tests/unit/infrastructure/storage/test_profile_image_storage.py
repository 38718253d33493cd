"""Unit tests for ProfileImageStorage."""

import pytest

from brevity.core.exceptions import ValidationError
from brevity.infrastructure.storage import PROFILE_IMAGE_DIR, ProfileImageStorage

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def test_save_writes_file_under_profile_image_dir(profile_image_storage: ProfileImageStorage):
    image = profile_image_storage.save(PNG, "image/png")

    assert image.public_id.endswith(".png")
    stored = profile_image_storage.storage_path / PROFILE_IMAGE_DIR / image.public_id
    assert stored.read_bytes() == PNG
    assert image.url.endswith(f"/files/{PROFILE_IMAGE_DIR}/{image.public_id}")


@pytest.mark.parametrize(
    "content,mime_type,suffix",
    [
        (b"\xff\xd8\xff\xe0" + b"\x00" * 16, "image/jpeg", ".jpg"),
        (b"GIF89a" + b"\x00" * 16, "image/gif", ".gif"),
        (b"RIFF\x10\x00\x00\x00WEBPVP8 " + b"\x00" * 8, "image/webp", ".webp"),
    ],
)
def test_suffix_follows_declared_type(profile_image_storage, content, mime_type, suffix):
    image = profile_image_storage.save(content, mime_type)

    assert image.public_id.endswith(suffix)


def test_markup_declared_as_image_is_rejected(profile_image_storage: ProfileImageStorage):
    with pytest.raises(ValidationError) as exc_info:
        profile_image_storage.save(b"<script>alert(1)</script>", "image/png")

    assert "does not match" in exc_info.value.message
    assert not profile_image_storage.directory.exists()


def test_save_rejects_non_image(profile_image_storage: ProfileImageStorage):
    with pytest.raises(ValidationError) as exc_info:
        profile_image_storage.save(b"%PDF-1.4", "application/pdf")

    assert "not allowed" in exc_info.value.message


def test_save_rejects_configured_type_without_known_extension(profile_image_storage):
    storage = ProfileImageStorage(
        profile_image_storage.settings.model_copy(
            update={"allowed_image_mime_types": ["image/png", "text/html"]}
        )
    )

    with pytest.raises(ValidationError):
        storage.save(b"<html></html>", "text/html")


def test_save_rejects_empty_file(profile_image_storage: ProfileImageStorage):
    with pytest.raises(ValidationError):
        profile_image_storage.save(b"", "image/png")


def test_save_rejects_oversized_file(profile_image_storage: ProfileImageStorage):
    too_big = b"\x00" * (profile_image_storage.settings.max_file_size + 1)

    with pytest.raises(ValidationError) as exc_info:
        profile_image_storage.save(too_big, "image/png")

    assert "exceeds maximum" in exc_info.value.message


@pytest.mark.asyncio
async def test_save_and_delete_async(profile_image_storage: ProfileImageStorage):
    image = await profile_image_storage.save_async(PNG, "image/png")
    assert (profile_image_storage.directory / image.public_id).exists()

    await profile_image_storage.delete_async(image.public_id)

    assert not (profile_image_storage.directory / image.public_id).exists()


def test_delete_removes_file(profile_image_storage: ProfileImageStorage):
    image = profile_image_storage.save(PNG, "image/png")

    profile_image_storage.delete(image.public_id)
    profile_image_storage.delete(image.public_id)

    assert not (profile_image_storage.directory / image.public_id).exists()


def test_delete_refuses_path_traversal(profile_image_storage: ProfileImageStorage):
    with pytest.raises(ValidationError):
        profile_image_storage.delete("../../etc/passwd")
