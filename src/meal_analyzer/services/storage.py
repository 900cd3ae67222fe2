"""Object store contracts used by the signed URL transport."""

from typing import Protocol
from uuid import uuid4


class ObjectStore(Protocol):
    """Key-addressed blob storage able to mint signed read URLs."""

    def put_object(self, key: str, data: bytes, content_type: str) -> None:
        """Upload bytes under the given key, replacing any existing object."""

    def sign_url(self, key: str, ttl_seconds: int) -> str:
        """Return a read URL for the key that expires after ttl_seconds."""


class ImageProbe(Protocol):
    """Checks that a signed URL actually serves the image."""

    async def check(self, url: str) -> None:
        """Raise ObjectStoreFailed when the URL cannot be fetched."""


def new_image_key(prefix: str = "meal_images") -> str:
    """Generate a unique storage key for a meal photo."""
    return f"{prefix}/{uuid4()}.jpg"
