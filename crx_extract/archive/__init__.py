# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""External archive utility boundary.

The pipeline never parses ZIP data itself. It needs two capabilities from a
collaborator: a listing-only summary (entry count and total uncompressed
size, taken from the archive index) and a full extraction into a directory.
"""

from pathlib import Path
from typing import Protocol

from crx_extract.archive.unzip_runner import ArchiveSummary, UnzipRunner


class ArchiveTool(Protocol):
    """Minimal interface the pipeline requires from an archive utility."""

    async def list_summary(self, archive_path: Path) -> ArchiveSummary:
        """Return entry count and uncompressed size without extracting."""
        ...

    async def extract(self, archive_path: Path, target_dir: Path) -> int:
        """Extract the archive into ``target_dir`` and return the exit code."""
        ...


__all__ = [
    "ArchiveSummary",
    "ArchiveTool",
    "UnzipRunner",
]
