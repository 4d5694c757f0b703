"""Image downloading and persistence utilities."""

from __future__ import annotations

import logging
from dataclasses import replace
from functools import reduce
from pathlib import Path
from typing import Optional, Sequence, Tuple
from urllib.parse import unquote, urlparse

import requests

from .compress import reencode
from .config import DownloadConfig
from .errors import (
    FetchError,
    FilesystemError,
    InvalidURLError,
    JsonShakeError,
    ReencodeError,
)
from .models import DownloadSummary, ImageAsset
from .progress import LoggingProgressObserver, ProgressObserver
from .utils import clean_filename, file_extension, replace_extension, url_path_basename

logger = logging.getLogger("json_shake")

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/bmp": ".bmp",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
}
JPEG_RENAMED_EXTENSIONS = {".png", ".gif"}


def extension_from_content_type(content_type: Optional[str]) -> str:
    """Map an HTTP Content-Type to a file extension, or ``""`` if unknown."""
    if not content_type:
        return ""
    mime = content_type.split(";")[0].strip().lower()
    return CONTENT_TYPE_EXTENSIONS.get(mime, "")


def build_filename(url: str, index: int) -> str:
    """Derive the on-disk filename for the ``index``-th (1-based) candidate."""
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise InvalidURLError(f"invalid URL: {exc}") from exc

    basename = url_path_basename(unquote(parsed.path))
    if not basename:
        return f"image_{index}"
    filename = clean_filename(basename)
    if "." not in filename:
        filename = f"{filename}_{index}"
    return filename


def fetch_image(
    session: requests.Session,
    url: str,
    timeout: float,
) -> Tuple[bytes, str]:
    """GET ``url`` and return the body and its Content-Type header."""
    try:
        resp = session.get(url, timeout=timeout)
    except (
        requests.exceptions.InvalidURL,
        requests.exceptions.InvalidSchema,
        requests.exceptions.MissingSchema,
    ) as exc:
        raise InvalidURLError(f"invalid URL: {exc}") from exc
    except requests.RequestException as exc:
        raise FetchError(f"download failed: {exc}") from exc

    try:
        if resp.status_code != requests.codes.ok:
            raise FetchError(f"HTTP error: {resp.status_code} {resp.reason}")
        return resp.content, resp.headers.get("Content-Type", "")
    except requests.RequestException as exc:
        raise FetchError(f"failed to read response: {exc}") from exc
    finally:
        resp.close()


def save_image(destination: Path, data: bytes) -> None:
    try:
        destination.write_bytes(data)
    except OSError as exc:
        raise FilesystemError(f"failed to write file {destination}: {exc}") from exc


def _existing_asset(url: str, destination: Path) -> Optional[ImageAsset]:
    if not destination.exists():
        return None
    return ImageAsset(
        url=url,
        filename=destination.name,
        path=destination,
        size=destination.stat().st_size,
        skipped=True,
    )


def download_image(
    session: requests.Session,
    url: str,
    index: int,
    config: DownloadConfig,
    observer: ProgressObserver,
) -> ImageAsset:
    """Fetch one image, fit it into the size limit and write it to disk."""
    filename = build_filename(url, index)
    existing = _existing_asset(url, config.output_dir / filename)
    if existing:
        observer.on_existing(existing)
        return existing

    data, content_type = fetch_image(session, url, config.timeout)
    logger.debug("Fetched %s (%d bytes, Content-Type=%s)", url, len(data), content_type)

    if "." not in filename:
        filename += extension_from_content_type(content_type)

    result = None
    limit_bytes = config.limit_bytes
    if limit_bytes and len(data) > limit_bytes:
        observer.on_reencode_start(url, len(data), limit_bytes)
        try:
            result = reencode(data, limit_bytes)
        except ReencodeError as exc:
            observer.on_reencode_failed(url, exc)
        else:
            observer.on_reencoded(url, result, limit_bytes)
            data = result.data
            extension = file_extension(filename)
            if result.compressed and extension in JPEG_RENAMED_EXTENSIONS:
                filename = replace_extension(filename, ".jpg")

    destination = config.output_dir / filename
    existing = _existing_asset(url, destination)
    if existing:
        observer.on_existing(existing)
        return existing

    save_image(destination, data)
    asset = ImageAsset(
        url=url,
        filename=filename,
        path=destination,
        size=len(data),
        reencode=result,
    )
    observer.on_saved(asset)
    return asset


def download_images(
    urls: Sequence[str],
    config: DownloadConfig,
    session: Optional[requests.Session] = None,
    observer: Optional[ProgressObserver] = None,
) -> DownloadSummary:
    """Download every candidate URL in order; failures never stop the batch."""
    observer = observer or LoggingProgressObserver()
    owns_session = session is None
    if session is None:
        session = requests.Session()
    total = len(urls)

    def _step(summary: DownloadSummary, item: Tuple[int, str]) -> DownloadSummary:
        index, url = item
        observer.on_start(index, total, url)
        try:
            asset = download_image(session, url, index, config, observer)
        except JsonShakeError as exc:
            observer.on_failed(index, url, exc)
            return replace(summary, failed=summary.failed + 1)
        return replace(
            summary,
            success=summary.success + 1,
            assets=[*summary.assets, asset],
        )

    try:
        summary = reduce(_step, enumerate(urls, start=1), DownloadSummary(total=total))
    finally:
        if owns_session:
            session.close()
    observer.on_finished(summary)
    return summary
