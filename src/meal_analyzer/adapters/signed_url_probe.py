"""HTTP check that a signed URL serves the uploaded image."""

from dataclasses import dataclass

import httpx

from meal_analyzer.domain.errors import ObjectStoreFailed
from meal_analyzer.services.storage import ImageProbe


@dataclass
class HttpxImageProbe(ImageProbe):
    """Image probe using httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxImageProbe":
        """Create a probe with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient())

    async def check(self, url: str) -> None:
        """Open the URL and fail unless it answers with a success status."""
        try:
            async with self.http_client.stream("GET", url, timeout=10) as response:
                if response.is_error:
                    raise ObjectStoreFailed(
                        f"Signed URL check failed with HTTP {response.status_code}"
                    )
        except httpx.HTTPError as exc:
            raise ObjectStoreFailed(f"Signed URL check failed: {exc}") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
