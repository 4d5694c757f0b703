"""Progress reporting hooks for the download loop."""

from __future__ import annotations

import logging

from .compress import FALLBACK_QUALITY
from .errors import JsonShakeError
from .models import DownloadSummary, ImageAsset, ReencodeResult

logger = logging.getLogger("json_shake")

_MB = 1024 * 1024


def _mb(size: int) -> float:
    return size / _MB


class ProgressObserver:
    """No-op base; override the hooks you care about."""

    def on_start(self, index: int, total: int, url: str) -> None:
        pass

    def on_existing(self, asset: ImageAsset) -> None:
        pass

    def on_reencode_start(self, url: str, size: int, limit_bytes: int) -> None:
        pass

    def on_reencoded(self, url: str, result: ReencodeResult, limit_bytes: int) -> None:
        pass

    def on_reencode_failed(self, url: str, exc: JsonShakeError) -> None:
        pass

    def on_saved(self, asset: ImageAsset) -> None:
        pass

    def on_failed(self, index: int, url: str, exc: JsonShakeError) -> None:
        pass

    def on_finished(self, summary: DownloadSummary) -> None:
        pass


class LoggingProgressObserver(ProgressObserver):
    """Emit one log line per download event."""

    def on_start(self, index: int, total: int, url: str) -> None:
        logger.info("[%d/%d] Downloading: %s", index, total, url)

    def on_existing(self, asset: ImageAsset) -> None:
        logger.info("File already exists, skipping: %s", asset.filename)

    def on_reencode_start(self, url: str, size: int, limit_bytes: int) -> None:
        logger.info(
            "  Image size %.2fMB exceeds limit %.2fMB, compressing...",
            _mb(size),
            _mb(limit_bytes),
        )

    def on_reencoded(self, url: str, result: ReencodeResult, limit_bytes: int) -> None:
        if not result.compressed:
            return
        suffix = " - minimum" if result.quality == FALLBACK_QUALITY else ""
        logger.info(
            "  Compressed from %.2fMB to %.2fMB (quality: %d%s)",
            _mb(result.original_size),
            _mb(result.size),
            result.quality,
            suffix,
        )

    def on_reencode_failed(self, url: str, exc: JsonShakeError) -> None:
        logger.warning("  Compression failed, saving original: %s", exc)

    def on_saved(self, asset: ImageAsset) -> None:
        logger.info("Downloaded: %s (%.2fMB)", asset.filename, _mb(asset.size))

    def on_failed(self, index: int, url: str, exc: JsonShakeError) -> None:
        logger.error("Error: %s", exc)

    def on_finished(self, summary: DownloadSummary) -> None:
        logger.info("Download complete!")
        logger.info(
            "Success: %d, Failed: %d, Total: %d",
            summary.success,
            summary.failed,
            summary.total,
        )
