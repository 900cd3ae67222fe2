"""Image encoding for analysis transport."""

import base64
import io
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from meal_analyzer.domain.errors import ImageEncodingFailed

DEFAULT_JPEG_QUALITY = 80


@dataclass(frozen=True)
class EncodedImage:
    """Compressed image bytes ready for upload or inline transport."""

    data: bytes
    mime_type: str = "image/jpeg"

    def to_base64(self) -> str:
        """Return the base64 text encoding of the bytes."""
        return base64.b64encode(self.data).decode("utf-8")

    def to_data_url(self) -> str:
        """Return a data URL usable as an inline image reference."""
        return f"data:{self.mime_type};base64,{self.to_base64()}"


@dataclass(frozen=True)
class ImageCodec:
    """Converts captured bitmaps to JPEG at a fixed quality."""

    quality: int = DEFAULT_JPEG_QUALITY

    def encode(self, image: Image.Image) -> EncodedImage:
        """Serialize an in-memory bitmap as JPEG."""
        width, height = image.size
        if width == 0 or height == 0:
            raise ImageEncodingFailed(f"Cannot encode a {width}x{height} image")
        buffer = io.BytesIO()
        try:
            _to_rgb(image).save(buffer, format="JPEG", quality=self.quality)
        except (OSError, ValueError) as exc:
            raise ImageEncodingFailed(f"JPEG encoding failed: {exc}") from exc
        return EncodedImage(data=buffer.getvalue())

    def decode(self, data: bytes) -> Image.Image:
        """Open uploaded image bytes as a bitmap."""
        if not data:
            raise ImageEncodingFailed("Image data is empty")
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise ImageEncodingFailed(f"Unreadable image data: {exc}") from exc
        return image


def decode_base64(text: str) -> bytes:
    """Decode base64 image text, accepting an optional data URL prefix."""
    if text.startswith("data:") and "," in text:
        text = text.split(",", maxsplit=1)[1]
    try:
        return base64.b64decode(text, validate=True)
    except ValueError as exc:
        raise ImageEncodingFailed("Image data is not valid base64") from exc


def _to_rgb(image: Image.Image) -> Image.Image:
    # JPEG has no alpha channel; composite transparent images on white.
    if image.mode in ("RGBA", "LA", "P"):
        if image.mode == "P":
            image = image.convert("RGBA")
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[-1])
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image
