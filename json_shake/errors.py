"""Exception types raised while downloading and re-encoding images."""

from __future__ import annotations


class JsonShakeError(Exception):
    """Base class for per-image failures."""


class InvalidURLError(JsonShakeError):
    """The candidate URL could not be parsed into a download target."""


class FetchError(JsonShakeError):
    """The HTTP request failed or returned a non-200 status."""


class FilesystemError(JsonShakeError):
    """The image could not be written to disk."""


class ReencodeError(JsonShakeError):
    """Re-encoding could not produce a smaller payload."""


class DecodeError(ReencodeError):
    """The payload claims a raster format but Pillow cannot decode it."""


class EncodeError(ReencodeError):
    """Every JPEG encode attempt failed, including the final fallback."""
