"""MCP server exposing json-shake extract/download tools."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from mcp.server.fastmcp import FastMCP

from .cli import load_document
from .config import DownloadConfig
from .extractor import extract_image_urls
from .images import download_images
from .progress import ProgressObserver

logger = logging.getLogger("json_shake.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="json-shake")


def _load_urls(path: str) -> List[str]:
    source = Path(path).expanduser()
    if not source.exists():
        raise FileNotFoundError(f"JSON document does not exist: {source}")
    return extract_image_urls(load_document(source))


@mcp.tool()
def extract(path: str) -> List[str]:
    """List every candidate image URL found in a JSON document."""
    return _load_urls(path)


@mcp.tool()
def download(path: str, output: str, limit_mb: float = 0.0) -> str:
    """Download the images linked from a JSON document into ``output``."""
    urls = _load_urls(path)
    if not urls:
        return "No image links found"

    output_dir = Path(output).expanduser().resolve()
    output_dir.mkdir(parents=True, exist_ok=True)
    config = DownloadConfig(output_dir=output_dir, limit_mb=max(limit_mb, 0.0))
    # Progress is reported through the returned summary only.
    summary = download_images(urls, config, observer=ProgressObserver())
    lines = [
        f"Success: {summary.success}, Failed: {summary.failed}, Total: {summary.total}",
    ]
    lines.extend(str(asset.path) for asset in summary.assets)
    return "\n".join(lines)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
