"""Core components of the crx-extract pipeline."""

from crx_extract.core.errors import ErrorKind, ExtractorError, FailureReason
from crx_extract.core.types import (
    ContainerHeader,
    ContainerVersion,
    ExtensionInfo,
    ExtensionManifest,
    ExtractionOutcome,
    ExtractionState,
    ResolvedPath,
    SecurityProfile,
)

__all__ = [
    # Errors
    "ErrorKind",
    "ExtractorError",
    "FailureReason",
    # Types
    "ContainerHeader",
    "ContainerVersion",
    "ExtensionInfo",
    "ExtensionManifest",
    "ExtractionOutcome",
    "ExtractionState",
    "ResolvedPath",
    "SecurityProfile",
]
