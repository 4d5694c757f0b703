"""Discovery of image URLs inside parsed JSON documents."""

from __future__ import annotations

import re
import string
from typing import Any, Iterator, List
from urllib.parse import urlparse

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "bmp", "webp", "svg")

# Scheme is case-insensitive, the extension list is matched as written.
IMAGE_URL_PATTERN = re.compile(
    r"(?i:https?)://[^\s\"'<>]+\.(?:"
    + "|".join(IMAGE_EXTENSIONS)
    + r")(?:\?[^\s\"'<>]*)?",
    re.ASCII,
)

IMAGE_KEYWORDS = (
    "image",
    "img",
    "photo",
    "picture",
    "pic",
    "avatar",
    "thumbnail",
    "thumb",
    "banner",
    "gallery",
)

_URL_PREFIXES = ("http://", "https://")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_HOST_CHARS = frozenset(string.ascii_letters + string.digits + "-._~!$&'()*+,;=:[]%")


def find_explicit_image_urls(text: str) -> List[str]:
    """Return every URL in ``text`` that ends in a known image extension."""
    return IMAGE_URL_PATTERN.findall(text)


def _is_valid_url(value: str) -> bool:
    """Syntax check: no control characters, well-formed %-escapes, clean host."""
    if _CONTROL_CHARS.search(value) or _BAD_ESCAPE.search(value):
        return False
    try:
        parsed = urlparse(value)
        # Accessing port validates the netloc (e.g. "host:abc").
        parsed.port
    except ValueError:
        return False
    host = parsed.netloc.rpartition("@")[2]
    return all(char >= "\x80" or char in _HOST_CHARS for char in host)


def looks_like_image_url(value: str) -> bool:
    """Keyword heuristic for image URLs that carry no file extension."""
    if not value.startswith(_URL_PREFIXES):
        return False
    if not _is_valid_url(value):
        return False
    lowered = value.lower()
    return any(keyword in lowered for keyword in IMAGE_KEYWORDS)


def _urls_from_string(text: str) -> List[str]:
    matches = find_explicit_image_urls(text)
    if matches:
        return matches
    if looks_like_image_url(text):
        return [text]
    return []


def iter_image_urls(value: Any) -> Iterator[str]:
    """Yield candidate image URLs from a JSON value in traversal order.

    Objects are walked in key insertion order and arrays in index order.
    Strings contribute every explicit ``http(s)://...<ext>`` match they contain;
    only when there is none is the whole string considered by the keyword
    heuristic. Numbers, booleans and ``None`` contribute nothing.
    """
    stack: List[Iterator[Any]] = [iter((value,))]
    while stack:
        try:
            node = next(stack[-1])
        except StopIteration:
            stack.pop()
            continue
        if isinstance(node, dict):
            stack.append(iter(node.values()))
        elif isinstance(node, list):
            stack.append(iter(node))
        elif isinstance(node, str):
            yield from _urls_from_string(node)


def extract_image_urls(value: Any) -> List[str]:
    """Collect candidate image URLs from a parsed JSON document.

    Duplicates are preserved; the result may be empty.
    """
    return list(iter_image_urls(value))
