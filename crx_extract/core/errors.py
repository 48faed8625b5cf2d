# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt
"""Error model for the extraction pipeline.

Every failure is raised as a single exception type, ``ExtractorError``, that
carries a closed pair of tags: the coarse ``ErrorKind`` (whose value is the
stable machine-readable code shown to users) and the precise
``FailureReason``. Callers dispatch on ``error.kind`` or ``error.reason``;
there is deliberately no subclass hierarchy to match against.
"""

from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    """Top-level error classification reported to callers."""

    VALIDATION = "VALIDATION_ERROR"
    DOWNLOAD = "DOWNLOAD_ERROR"
    SECURITY = "SECURITY_ERROR"
    EXTRACTION = "EXTRACTION_ERROR"


class FailureReason(str, Enum):
    """Precise cause of a failure. Each reason belongs to exactly one kind."""

    MALFORMED_INPUT = "malformed_input"
    UNSUPPORTED_VERSION = "unsupported_version"
    NOT_FOUND = "not_found"
    TOO_LARGE = "too_large"
    INVALID_MANIFEST = "invalid_manifest"
    INVALID_CONFIGURATION = "invalid_configuration"
    INTERNAL_STATE = "internal_state"
    DOWNLOAD_TIMEOUT = "download_timeout"
    DOWNLOAD_FAILED = "download_failed"
    PATH_OUTSIDE_ALLOWED_ROOTS = "path_outside_allowed_roots"
    SUSPICIOUS_COMPRESSION_RATIO = "suspicious_compression_ratio"
    TOO_MANY_FILES = "too_many_files"
    EXTRACTED_SIZE_TOO_LARGE = "extracted_size_too_large"
    INSPECTION_FAILED = "inspection_failed"
    DECOMPRESSION_FAILED = "decompression_failed"
    DIRECTORY_CREATION_FAILED = "directory_creation_failed"
    WRITE_FAILED = "write_failed"


REASON_KINDS: dict[FailureReason, ErrorKind] = {
    FailureReason.MALFORMED_INPUT: ErrorKind.VALIDATION,
    FailureReason.UNSUPPORTED_VERSION: ErrorKind.VALIDATION,
    FailureReason.NOT_FOUND: ErrorKind.VALIDATION,
    FailureReason.TOO_LARGE: ErrorKind.VALIDATION,
    FailureReason.INVALID_MANIFEST: ErrorKind.VALIDATION,
    FailureReason.INVALID_CONFIGURATION: ErrorKind.VALIDATION,
    FailureReason.INTERNAL_STATE: ErrorKind.VALIDATION,
    FailureReason.DOWNLOAD_TIMEOUT: ErrorKind.DOWNLOAD,
    FailureReason.DOWNLOAD_FAILED: ErrorKind.DOWNLOAD,
    FailureReason.PATH_OUTSIDE_ALLOWED_ROOTS: ErrorKind.SECURITY,
    FailureReason.SUSPICIOUS_COMPRESSION_RATIO: ErrorKind.SECURITY,
    FailureReason.TOO_MANY_FILES: ErrorKind.SECURITY,
    FailureReason.EXTRACTED_SIZE_TOO_LARGE: ErrorKind.SECURITY,
    FailureReason.INSPECTION_FAILED: ErrorKind.EXTRACTION,
    FailureReason.DECOMPRESSION_FAILED: ErrorKind.EXTRACTION,
    FailureReason.DIRECTORY_CREATION_FAILED: ErrorKind.EXTRACTION,
    FailureReason.WRITE_FAILED: ErrorKind.EXTRACTION,
}


class ExtractorError(Exception):
    """A typed pipeline failure.

    Attributes:
        reason: Precise failure cause.
        kind: Error classification derived from the reason.
        message: Human-readable description.
        field: Offending manifest field for INVALID_MANIFEST failures.
        recovery_path: Location of a preserved artifact, if one was kept.
    """

    def __init__(
        self,
        reason: FailureReason,
        message: str,
        *,
        field: str | None = None,
        recovery_path: Path | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.kind = REASON_KINDS[reason]
        self.message = message
        self.field = field
        self.recovery_path = recovery_path

    @property
    def code(self) -> str:
        """Stable machine-readable code (e.g. ``SECURITY_ERROR``)."""
        return self.kind.value

    def __repr__(self) -> str:
        return f"ExtractorError({self.reason.name}, {self.message!r})"
