"""Re-encode downloaded images so they fit a byte budget."""

from __future__ import annotations

import io
import logging
from typing import Optional

from filetype import guess
from PIL import Image

from .errors import DecodeError, EncodeError
from .models import ReencodeResult

logger = logging.getLogger("json_shake")

QUALITY_LADDER = (85, 75, 65, 55, 45, 35, 25)
FALLBACK_QUALITY = 20
REENCODABLE_FORMATS = frozenset({"jpeg", "png", "gif"})

_KNOWN_FORMATS = {
    "jpg": "jpeg",
    "jpeg": "jpeg",
    "png": "png",
    "gif": "gif",
    "bmp": "bmp",
    "webp": "webp",
}
_SVG_SNIFF_BYTES = 1024


def _looks_like_svg(data: bytes) -> bool:
    head = data[:_SVG_SNIFF_BYTES].lstrip().lower()
    if head.startswith(b"\xef\xbb\xbf"):
        head = head[3:].lstrip()
    return head.startswith((b"<svg", b"<?xml", b"<!doctype svg")) and b"<svg" in head


def sniff_image_format(data: bytes) -> str:
    """Detect an image format tag from the payload signature."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        return _KNOWN_FORMATS.get(kind.extension.lower(), "unknown")
    if _looks_like_svg(data):
        return "svg"
    return "unknown"


def _decode(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"failed to decode image: {exc}") from exc
    # JPEG has no alpha or palette; animated GIFs keep their first frame.
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    return image


def encode_jpeg(image: Image.Image, quality: int) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def _try_encode(image: Image.Image, quality: int) -> Optional[bytes]:
    try:
        return encode_jpeg(image, quality)
    except (OSError, ValueError) as exc:
        logger.debug("JPEG encode at quality %d failed: %s", quality, exc)
        return None


def reencode(data: bytes, budget_bytes: int) -> ReencodeResult:
    """Return ``data`` re-encoded as JPEG so that it fits ``budget_bytes``.

    Payloads already within budget, and formats other than JPEG, PNG and GIF,
    are returned untouched. Otherwise the quality ladder is walked from the
    highest level down and the first encode that fits wins. When none fits the
    quality-20 encode is returned even if it is still too large.

    Raises:
        DecodeError: the payload could not be decoded.
        EncodeError: even the quality-20 encode failed.
    """
    original_size = len(data)
    source_format = sniff_image_format(data)
    if original_size <= budget_bytes:
        return ReencodeResult(data, source_format, original_size)

    if source_format not in REENCODABLE_FORMATS:
        logger.debug("Leaving %s payload unchanged", source_format)
        return ReencodeResult(data, source_format, original_size)

    image = _decode(data)
    try:
        for quality in QUALITY_LADDER:
            encoded = _try_encode(image, quality)
            if encoded is None:
                continue
            if len(encoded) <= budget_bytes:
                return ReencodeResult(encoded, "jpeg", original_size, quality)

        try:
            encoded = encode_jpeg(image, FALLBACK_QUALITY)
        except (OSError, ValueError) as exc:
            raise EncodeError(f"failed to encode image: {exc}") from exc
        return ReencodeResult(encoded, "jpeg", original_size, FALLBACK_QUALITY)
    finally:
        image.close()
