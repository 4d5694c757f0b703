"""Data models used throughout the download pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class ReencodeResult:
    """Outcome of fitting an image payload into a byte budget."""

    data: bytes
    image_format: str
    original_size: int
    quality: Optional[int] = None

    @property
    def compressed(self) -> bool:
        return self.quality is not None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ImageAsset:
    """Image stored on disk for one candidate URL."""

    url: str
    filename: str
    path: Path
    size: int = 0
    skipped: bool = False
    reencode: Optional[ReencodeResult] = None


@dataclass
class DownloadSummary:
    """Counters accumulated over a batch of downloads."""

    success: int = 0
    failed: int = 0
    total: int = 0
    assets: List[ImageAsset] = field(default_factory=list)
