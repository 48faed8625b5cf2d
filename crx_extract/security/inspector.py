# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Pre-extraction security screening of staged archives.

The inspector gathers an archive's entry count and uncompressed size from
its index (via the archive tool's listing mode) and compares them, together
with the staged file size, against the configured ceilings. Nothing is
decompressed to disk until all three checks pass.
"""

import logging
from pathlib import Path

from crx_extract.archive import ArchiveTool
from crx_extract.core.config import ExtractorConfiguration
from crx_extract.core.errors import ExtractorError, FailureReason
from crx_extract.core.types import SecurityProfile

logger = logging.getLogger(__name__)

_MIB = 1024 * 1024


class ArchiveSecurityInspector:
    """Enforces compression ratio, file count and size ceilings."""

    def __init__(self, config: ExtractorConfiguration, archive_tool: ArchiveTool):
        self.config = config
        self.archive_tool = archive_tool

    async def inspect(self, archive_path: Path) -> SecurityProfile:
        """Build the security profile of a staged archive.

        Raises:
            ExtractorError: INSPECTION_FAILED if the summary is unavailable.
        """
        summary = await self.archive_tool.list_summary(archive_path)
        try:
            compressed_size = archive_path.stat().st_size
        except OSError as e:
            raise ExtractorError(
                FailureReason.INSPECTION_FAILED,
                f"Failed to stat staged archive: {e}",
            ) from e

        profile = SecurityProfile(
            file_count=summary.file_count,
            uncompressed_size=summary.uncompressed_size,
            compressed_size=compressed_size,
        )
        logger.debug(f"ZIP info retrieved: {profile}")
        return profile

    def enforce(self, profile: SecurityProfile) -> None:
        """Apply the ceilings in order; the first violation is raised.

        The ratio is checked first as the strongest ZIP bomb signal. An
        empty staged file has no meaningful ratio and is rejected outright.

        Raises:
            ExtractorError: SUSPICIOUS_COMPRESSION_RATIO, TOO_MANY_FILES or
                EXTRACTED_SIZE_TOO_LARGE.
        """
        if profile.compressed_size <= 0:
            raise ExtractorError(
                FailureReason.SUSPICIOUS_COMPRESSION_RATIO,
                "Suspicious compression ratio (empty archive file). Possible ZIP bomb.",
            )

        ratio = profile.compression_ratio
        if ratio > self.config.max_extraction_ratio:
            raise ExtractorError(
                FailureReason.SUSPICIOUS_COMPRESSION_RATIO,
                f"Suspicious compression ratio ({ratio:.1f}:1). Possible ZIP bomb.",
            )

        if profile.file_count > self.config.max_extracted_files:
            raise ExtractorError(
                FailureReason.TOO_MANY_FILES,
                f"Too many files in archive ({profile.file_count}). "
                f"Maximum allowed: {self.config.max_extracted_files}",
            )

        if profile.uncompressed_size > self.config.max_extracted_size:
            size_mb = profile.uncompressed_size / _MIB
            max_mb = self.config.max_extracted_size / _MIB
            raise ExtractorError(
                FailureReason.EXTRACTED_SIZE_TOO_LARGE,
                f"Extracted size too large ({size_mb:.0f}MB). "
                f"Maximum allowed: {max_mb:.0f}MB",
            )

    async def check(self, archive_path: Path) -> SecurityProfile:
        """Inspect a staged archive and enforce every ceiling."""
        profile = await self.inspect(archive_path)
        self.enforce(profile)
        logger.info("ZIP security validation passed")
        return profile
