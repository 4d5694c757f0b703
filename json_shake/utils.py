"""Utility helpers for filename handling."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

_UNSAFE_FILENAME_CHARS = ("?", "&")


def clean_filename(value: str) -> str:
    """Replace characters that break filenames derived from URLs."""
    for char in _UNSAFE_FILENAME_CHARS:
        value = value.replace(char, "_")
    return value


def url_path_basename(path: str) -> str:
    """Return the last segment of a URL path, or an empty string."""
    name = PurePosixPath(path).name if path else ""
    if name in ("", ".", "/"):
        return ""
    return name


def file_extension(filename: str) -> str:
    """Return the text from the last dot onwards (``".png"``), or ``""``."""
    idx = filename.rfind(".")
    if idx < 0:
        return ""
    return filename[idx:]


def replace_extension(filename: str, extension: str) -> str:
    current = file_extension(filename)
    if current:
        filename = filename[: -len(current)]
    return filename + extension


def document_stem(path: Path) -> str:
    """Name of the per-document output folder: the JSON filename without extension."""
    return path.stem or path.name
