"""Unit tests for the register route's profile image handling."""

from io import BytesIO
from unittest.mock import AsyncMock

import pytest
from starlette.datastructures import Headers, UploadFile

from brevity.core.exceptions import ValidationError
from brevity.infrastructure.api.routes.auth_router import register

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def upload(content: bytes, filename: str = "avatar.png", mime_type: str = "image/png"):
    return UploadFile(
        BytesIO(content),
        size=len(content),
        filename=filename,
        headers=Headers({"content-type": mime_type}),
    )


@pytest.mark.asyncio
async def test_unexpected_error_removes_stored_image(profile_image_storage):
    auth = AsyncMock()
    auth.register.side_effect = RuntimeError("database went away")

    with pytest.raises(RuntimeError):
        await register(
            auth=auth,
            storage=profile_image_storage,
            display_name="Jane",
            email="jane@example.com",
            password="Password123!",
            profile_image=upload(PNG),
        )

    assert list(profile_image_storage.directory.iterdir()) == []


@pytest.mark.asyncio
async def test_oversized_upload_rejected_before_reading(profile_image_storage):
    auth = AsyncMock()
    image = upload(PNG)
    image.size = profile_image_storage.settings.max_file_size + 1
    image.read = AsyncMock(return_value=PNG)

    with pytest.raises(ValidationError):
        await register(
            auth=auth,
            storage=profile_image_storage,
            display_name="Jane",
            email="jane@example.com",
            password="Password123!",
            profile_image=image,
        )

    image.read.assert_not_awaited()
    auth.register.assert_not_awaited()
