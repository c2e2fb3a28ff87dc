"""Upload every file in a folder to the configured bucket.

Usage:
  python -m imagegen_api.batch_upload [folder]

Object keys are the bare file names; subdirectories are skipped.
"""

import argparse
import asyncio
import logging
import mimetypes
import sys
from dataclasses import dataclass, field
from pathlib import Path

from imagegen_api.config import settings
from imagegen_api.errors import StorageUnavailable
from imagegen_api.observability import configure_logging
from imagegen_api.services.generation import Uploader
from imagegen_api.storage import StorageUploader

logger = logging.getLogger("imagegen.batch_upload")

DEFAULT_FOLDER = "./images"


@dataclass
class BatchResult:
    uploaded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


def guess_content_type(path: Path) -> str:
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or "application/octet-stream"


async def upload_folder(uploader: Uploader, folder: Path) -> BatchResult:
    result = BatchResult()
    files = sorted(path for path in folder.iterdir() if path.is_file())
    if not files:
        logger.warning("no files found in %s", folder)

    async def _upload_one(path: Path) -> None:
        try:
            await uploader.upload(path.read_bytes(), path.name, guess_content_type(path))
        except (StorageUnavailable, OSError) as exc:
            logger.error("error uploading %s: %s", path.name, exc)
            result.failed[path.name] = str(exc)
            return
        logger.info("uploaded: %s", path.name)
        result.uploaded.append(path.name)

    await asyncio.gather(*(_upload_one(path) for path in files))
    return result


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Upload a folder of files to object storage.")
    parser.add_argument("folder", nargs="?", default=DEFAULT_FOLDER)
    args = parser.parse_args(argv)

    configure_logging()
    folder = Path(args.folder)
    if not folder.is_dir():
        logger.error("folder not found: %s", folder)
        return 2

    result = asyncio.run(upload_folder(StorageUploader.from_settings(settings), folder))
    logger.info("batch complete: %d uploaded, %d failed", len(result.uploaded), len(result.failed))
    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
