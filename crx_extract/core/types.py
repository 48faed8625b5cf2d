# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Core types for the crx-extract pipeline."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, NewType

from crx_extract.core.constants import (
    CRX_VERSION_2,
    CRX_VERSION_3,
    EXIT_FAILURE,
    EXIT_SUCCESS,
)
from crx_extract.core.errors import ExtractorError

# A path proven to lie inside an allowed root. Only PathGuard creates these.
ResolvedPath = NewType("ResolvedPath", Path)


class ContainerVersion(IntEnum):
    """Supported CRX container versions."""

    V2 = CRX_VERSION_2
    V3 = CRX_VERSION_3


@dataclass(frozen=True)
class ContainerHeader:
    """Parsed CRX container header.

    Attributes:
        version: Container format version.
        payload_offset: Byte offset at which the embedded ZIP payload starts.
    """

    version: ContainerVersion
    payload_offset: int


@dataclass(frozen=True)
class SecurityProfile:
    """Archive summary gathered before any entry is decompressed.

    Attributes:
        file_count: Number of entries listed in the archive index.
        uncompressed_size: Total uncompressed size from the archive index.
        compressed_size: On-disk size of the staged archive file.
    """

    file_count: int
    uncompressed_size: int
    compressed_size: int

    @property
    def compression_ratio(self) -> float:
        """Uncompressed to compressed ratio; infinite for an empty archive file."""
        if self.compressed_size <= 0:
            return float("inf")
        return self.uncompressed_size / self.compressed_size


@dataclass(frozen=True)
class ExtensionInfo:
    """Identity of the extension being extracted.

    Attributes:
        id: Chrome Web Store id, or "local" for files read from disk.
        name: Sanitized name used for output directories.
    """

    id: str
    name: str


@dataclass(frozen=True)
class ExtensionManifest:
    """The validated subset of an extension's manifest.json.

    ``raw`` holds the original mapping, unknown keys included.
    """

    name: str
    version: str
    manifest_version: int | float
    description: str | None = None
    permissions: tuple[str, ...] | None = None
    host_permissions: tuple[str, ...] | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


class ExtractionState(str, Enum):
    """Extraction pipeline states, in order of progression."""

    IDLE = "idle"
    ACQUIRING = "acquiring"
    HEADER_PARSED = "header_parsed"
    STAGED = "staged"
    SECURITY_CHECKED = "security_checked"
    EXTRACTED = "extracted"
    PUBLISHED = "published"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ExtractionOutcome:
    """Terminal result of one extraction attempt.

    Attributes:
        state: DONE on success, FAILED otherwise.
        failed_at: State the pipeline was in when it failed.
        output_dir: Populated output directory (success only).
        crx_path: Saved copy of the original container (success only).
        manifest: Validated manifest, if one could be read.
        extension: Identity of the extension, once acquired.
        error: The failure, if any.
    """

    state: ExtractionState
    failed_at: ExtractionState | None = None
    output_dir: Path | None = None
    crx_path: Path | None = None
    manifest: ExtensionManifest | None = None
    extension: ExtensionInfo | None = None
    error: ExtractorError | None = None

    @classmethod
    def succeeded(
        cls,
        output_dir: Path,
        crx_path: Path,
        extension: ExtensionInfo,
        manifest: ExtensionManifest | None = None,
    ) -> "ExtractionOutcome":
        """Create a successful outcome."""
        return cls(
            state=ExtractionState.DONE,
            output_dir=output_dir,
            crx_path=crx_path,
            manifest=manifest,
            extension=extension,
        )

    @classmethod
    def from_error(
        cls,
        error: ExtractorError,
        failed_at: ExtractionState,
        extension: ExtensionInfo | None = None,
    ) -> "ExtractionOutcome":
        """Create an outcome representing a failed attempt.

        Args:
            error: The failure that ended the attempt.
            failed_at: State the pipeline had reached.
            extension: Extension identity, if acquisition got that far.
        """
        return cls(
            state=ExtractionState.FAILED,
            failed_at=failed_at,
            extension=extension,
            error=error,
        )

    @property
    def success(self) -> bool:
        """Check if the extraction completed."""
        return self.state == ExtractionState.DONE

    @property
    def recovery_path(self) -> Path | None:
        """Preserved artifact left behind by a failed decompression."""
        return self.error.recovery_path if self.error is not None else None

    @property
    def exit_code(self) -> int:
        """Process exit code for this outcome."""
        return EXIT_SUCCESS if self.success else EXIT_FAILURE

    def __str__(self) -> str:
        if self.success:
            return f"ExtractionOutcome(done: {self.output_dir})"
        code = self.error.code if self.error is not None else "UNKNOWN"
        stage = self.failed_at.value if self.failed_at is not None else "unknown"
        return f"ExtractionOutcome(failed at {stage}: {code})"
