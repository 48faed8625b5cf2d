# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt
"""Acquisition of container bytes from the Web Store or the filesystem.

An input containing a 32-letter lowercase token anywhere (a bare id or a
Web Store URL) is downloaded; anything else is read as a local path.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import httpx

from crx_extract.acquisition.local import load_local_file
from crx_extract.acquisition.remote import ExtensionDownloader, build_download_url
from crx_extract.core.config import ExtractorConfiguration
from crx_extract.core.constants import (
    CRX_SUFFIX,
    EXTENSION_ID_PATTERN,
    LOCAL_EXTENSION_ID,
    LOCAL_EXTENSION_NAME,
)
from crx_extract.core.types import ExtensionInfo
from crx_extract.security.path_guard import sanitize_name

logger = logging.getLogger(__name__)

_EXTENSION_ID_SEARCH = re.compile(EXTENSION_ID_PATTERN)


@dataclass(frozen=True)
class AcquiredInput:
    """Container bytes plus the identity of the extension they belong to."""

    data: bytes
    extension: ExtensionInfo


def find_extension_id(text: str) -> str | None:
    """Return the first 32-letter lowercase token in ``text``, if any."""
    match = _EXTENSION_ID_SEARCH.search(text)
    extension_id = match.group(0) if match else None
    logger.debug(f"Extension ID search: input={text!r}, found={extension_id}")
    return extension_id


def local_extension_name(path: Path) -> str:
    """Derive a sanitized extension name from a local file path."""
    name = path.name
    if name.endswith(CRX_SUFFIX):
        name = name[: -len(CRX_SUFFIX)]
    return sanitize_name(name or LOCAL_EXTENSION_NAME)


async def acquire(
    source: str,
    config: ExtractorConfiguration,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AcquiredInput:
    """Load container bytes for ``source`` in remote or local mode."""
    extension_id = find_extension_id(source)
    if extension_id:
        downloader = ExtensionDownloader(config.download_timeout, transport=transport)
        data = await downloader.download(extension_id)
        return AcquiredInput(
            data=data, extension=ExtensionInfo(id=extension_id, name=extension_id)
        )

    path = Path(source)
    data = await load_local_file(path, config.max_file_size)
    return AcquiredInput(
        data=data,
        extension=ExtensionInfo(
            id=LOCAL_EXTENSION_ID, name=local_extension_name(path)
        ),
    )


__all__ = [
    "AcquiredInput",
    "ExtensionDownloader",
    "acquire",
    "build_download_url",
    "find_extension_id",
    "load_local_file",
    "local_extension_name",
]
