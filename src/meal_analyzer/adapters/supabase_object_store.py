"""Supabase Storage implementation of the object store."""

from dataclasses import dataclass

from supabase import Client

from meal_analyzer.domain.errors import ObjectStoreFailed
from meal_analyzer.services.storage import ObjectStore

DEFAULT_BUCKET = "meals"


@dataclass
class SupabaseObjectStore(ObjectStore):
    """Stores meal photos in a Supabase Storage bucket."""

    client: Client
    bucket: str = DEFAULT_BUCKET

    def put_object(self, key: str, data: bytes, content_type: str) -> None:
        """Upload bytes, overwriting an existing object with the same key."""
        try:
            self.client.storage.from_(self.bucket).upload(
                path=key,
                file=data,
                file_options={"content-type": content_type, "upsert": "true"},
            )
        except Exception as exc:
            raise ObjectStoreFailed(f"Upload of {key} failed: {exc}") from exc

    def sign_url(self, key: str, ttl_seconds: int) -> str:
        """Create a signed read URL for the key."""
        try:
            response = self.client.storage.from_(self.bucket).create_signed_url(
                key, ttl_seconds
            )
        except Exception as exc:
            raise ObjectStoreFailed(f"Signing {key} failed: {exc}") from exc
        url = response.get("signedURL") or response.get("signedUrl")
        if not url:
            raise ObjectStoreFailed(f"Storage returned no signed URL for {key}")
        return str(url)
