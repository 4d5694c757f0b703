"""Command-line entry point for json-shake."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Optional, Sequence

from .config import DEFAULT_TIMEOUT, DownloadConfig, resolve_download_dir
from .extractor import extract_image_urls
from .images import download_images
from .utils import document_stem

logger = logging.getLogger("json_shake.cli")

USAGE_EXAMPLES = """\
examples:
  json-shake data.json
  json-shake -limit 1 data.json
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="json-shake",
        description="Download every image linked from a JSON document.",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "json_file",
        nargs="?",
        type=Path,
        help="JSON document to scan for image links",
    )
    parser.add_argument(
        "-limit",
        "--limit",
        dest="limit",
        type=float,
        default=0.0,
        metavar="MB",
        help="Maximum image size in MB (default: 0, no compression)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Directory to write images to (default: ~/Downloads/<json file name>)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Per-image HTTP timeout in seconds",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def load_document(path: Path) -> Any:
    """Read and parse a JSON file; errors are reported by the caller."""
    return json.loads(path.read_bytes())


def _resolve_output_dir(args: argparse.Namespace) -> Path:
    if args.output is not None:
        return Path(args.output).expanduser().resolve()
    return resolve_download_dir() / document_stem(args.json_file)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    if args.json_file is None:
        build_parser().print_help()
        return 1

    try:
        document = load_document(args.json_file)
    except OSError as exc:
        logger.error("Failed to read file: %s", exc)
        return 1
    except ValueError as exc:
        logger.error("Failed to parse JSON: %s", exc)
        return 1

    urls = extract_image_urls(document)
    if not urls:
        logger.info("No image links found")
        return 0
    logger.info("Found %d image links", len(urls))

    try:
        output_dir = _resolve_output_dir(args)
    except RuntimeError as exc:
        logger.error("Failed to get Download directory: %s", exc)
        return 1
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Failed to create directory: %s", exc)
        return 1

    config = DownloadConfig(
        output_dir=output_dir,
        limit_mb=max(args.limit, 0.0),
        timeout=args.timeout,
    )
    logger.info("Output directory: %s", output_dir)
    if config.limit_bytes:
        logger.info("Image size limit: %.2fMB", config.limit_mb)
    else:
        logger.info("No size limit, downloading original images")

    overall_start = time.perf_counter()
    summary = download_images(urls, config)
    logger.debug(
        "Finished in %.2fs (%d/%d succeeded, %d failed)",
        time.perf_counter() - overall_start,
        summary.success,
        summary.total,
        summary.failed,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
