# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Loading of CRX containers from the local filesystem."""

import asyncio
import logging
import os
from pathlib import Path

from crx_extract.core.errors import ExtractorError, FailureReason

logger = logging.getLogger(__name__)


async def load_local_file(path: Path, max_file_size: int) -> bytes:
    """Read a local container file.

    Existence check, stat and the full read are independent and run
    concurrently; all three must succeed.

    Args:
        path: File to read.
        max_file_size: Largest accepted size in bytes.

    Returns:
        The file contents.

    Raises:
        ExtractorError: NOT_FOUND if the file is missing or unreadable,
            TOO_LARGE if it exceeds ``max_file_size``.
    """
    exists, stats, data = await asyncio.gather(
        asyncio.to_thread(path.is_file),
        asyncio.to_thread(path.stat),
        asyncio.to_thread(path.read_bytes),
        return_exceptions=True,
    )

    if (
        exists is not True
        or not isinstance(stats, os.stat_result)
        or not isinstance(data, bytes)
    ):
        raise ExtractorError(
            FailureReason.NOT_FOUND,
            f'File not found or inaccessible: "{path}"',
        )

    logger.info(f"Loading local file: {path}")

    if stats.st_size > max_file_size:
        max_mb = max_file_size / 1024 / 1024
        raise ExtractorError(
            FailureReason.TOO_LARGE,
            f"File too large. Maximum size is {max_mb:.0f}MB",
        )

    logger.debug(f"Local file loaded: size={stats.st_size}")
    return data
