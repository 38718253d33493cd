"""File storage for uploaded profile images."""

from brevity.infrastructure.storage.profile_image_storage import (
    PROFILE_IMAGE_DIR,
    ProfileImageStorage,
)

__all__ = ["PROFILE_IMAGE_DIR", "ProfileImageStorage"]
