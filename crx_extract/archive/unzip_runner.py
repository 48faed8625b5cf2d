# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Runs the external ``unzip`` utility as a subprocess."""

import asyncio
import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path

from crx_extract.core.errors import ExtractorError, FailureReason

logger = logging.getLogger(__name__)

# Trailing line of `unzip -l`, e.g. "     1234                     3 files"
_SUMMARY_PATTERN = re.compile(r"^\s*(\d+)\s+(\d+)\s+files?\s*$")


@dataclass(frozen=True)
class ArchiveSummary:
    """Index-level summary of an archive."""

    file_count: int
    uncompressed_size: int


def parse_listing_summary(output: str) -> ArchiveSummary | None:
    """Parse the summary line of ``unzip -l`` output.

    Args:
        output: Full stdout of ``unzip -l``.

    Returns:
        The parsed summary, or None if no summary line was found.
    """
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        return None
    match = _SUMMARY_PATTERN.match(lines[-1])
    if not match:
        return None
    return ArchiveSummary(
        file_count=int(match.group(2)), uncompressed_size=int(match.group(1))
    )


class UnzipRunner:
    """Executes ``unzip`` for archive listing and extraction."""

    def __init__(self, executable: str | None = None):
        """Initialize the runner.

        Args:
            executable: Path to the unzip binary. Looked up on PATH if omitted.
        """
        self.executable = executable or shutil.which("unzip")

    def _require_executable(self, reason: FailureReason) -> str:
        if not self.executable:
            raise ExtractorError(reason, "unzip executable not found on PATH")
        return self.executable

    async def _run(self, *args: str) -> tuple[int, str]:
        cmd = list(args)
        logger.debug(f"Executing command: {' '.join(cmd)}")
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        stdout, _ = await process.communicate()
        output = stdout.decode("utf-8", errors="replace") if stdout else ""
        return_code = process.returncode if process.returncode is not None else 1
        return return_code, output

    async def list_summary(self, archive_path: Path) -> ArchiveSummary:
        """List an archive without extracting any entry contents.

        Raises:
            ExtractorError: INSPECTION_FAILED if unzip is missing, fails or
                produces output without a summary line.
        """
        executable = self._require_executable(FailureReason.INSPECTION_FAILED)
        try:
            return_code, output = await self._run(executable, "-l", str(archive_path))
        except OSError as e:
            raise ExtractorError(
                FailureReason.INSPECTION_FAILED, f"Failed to run unzip: {e}"
            ) from e

        if return_code != 0:
            logger.error(f"unzip -l failed with return code {return_code}")
            logger.debug(output)
            raise ExtractorError(
                FailureReason.INSPECTION_FAILED, "Failed to analyze ZIP file"
            )

        summary = parse_listing_summary(output)
        if summary is None:
            raise ExtractorError(
                FailureReason.INSPECTION_FAILED, "Could not parse ZIP information"
            )
        return summary

    async def extract(self, archive_path: Path, target_dir: Path) -> int:
        """Extract an archive into ``target_dir``.

        Returns:
            The unzip return code. Anything other than 0 is a failure.
        """
        executable = self._require_executable(FailureReason.DECOMPRESSION_FAILED)
        try:
            return_code, output = await self._run(
                executable, "-q", "-o", str(archive_path), "-d", str(target_dir)
            )
        except OSError as e:
            logger.error(f"Error executing unzip: {e}")
            return 1

        if return_code != 0:
            logger.error(f"unzip failed with return code: {return_code}")
            if output:
                logger.debug(output)
        return return_code
