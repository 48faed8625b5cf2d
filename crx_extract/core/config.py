# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt
"""Extractor configuration.

The configuration is an immutable record built once per run. Values come
from the defaults below, optionally overlaid by a YAML file and then by
command line options or environment variables.
"""

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from crx_extract.core.constants import (
    DEFAULT_ALLOWED_OUTPUT_PATHS,
    DEFAULT_DOWNLOAD_TIMEOUT_MS,
    DEFAULT_EXTENSIONS_DIR,
    DEFAULT_MAX_EXTRACTED_FILES,
    DEFAULT_MAX_EXTRACTED_SIZE,
    DEFAULT_MAX_EXTRACTION_RATIO,
    DEFAULT_MAX_FILE_SIZE,
)
from crx_extract.core.errors import ExtractorError, FailureReason
from crx_extract.utils.logging import VerbosityLevel, redact_secrets

logger = logging.getLogger(__name__)

_INTEGER_FIELDS = (
    "max_file_size",
    "download_timeout",
    "max_extracted_files",
    "max_extracted_size",
)


def _invalid(message: str) -> ExtractorError:
    return ExtractorError(FailureReason.INVALID_CONFIGURATION, message)


@dataclass(frozen=True)
class ExtractorConfiguration:
    """Ceilings, timeouts and locations for one extraction run.

    Attributes:
        max_file_size: Largest accepted local container file, in bytes.
        download_timeout: Download timeout in milliseconds.
        max_extraction_ratio: Largest accepted uncompressed/compressed ratio.
        max_extracted_files: Largest accepted archive entry count.
        max_extracted_size: Largest accepted total uncompressed size, in bytes.
        allowed_output_paths: Roots the pipeline may write under.
        extensions_dir: Default collection directory for extracted extensions.
        verbosity: Log verbosity.
    """

    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    download_timeout: int = DEFAULT_DOWNLOAD_TIMEOUT_MS
    max_extraction_ratio: float = DEFAULT_MAX_EXTRACTION_RATIO
    max_extracted_files: int = DEFAULT_MAX_EXTRACTED_FILES
    max_extracted_size: int = DEFAULT_MAX_EXTRACTED_SIZE
    allowed_output_paths: tuple[str, ...] = DEFAULT_ALLOWED_OUTPUT_PATHS
    extensions_dir: str = DEFAULT_EXTENSIONS_DIR
    verbosity: VerbosityLevel = VerbosityLevel.INFO

    def __post_init__(self) -> None:
        for name in _INTEGER_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise _invalid(f"{name} must be a positive integer, got {value!r}")

        ratio = self.max_extraction_ratio
        if isinstance(ratio, bool) or not isinstance(ratio, (int, float)) or ratio <= 0:
            raise _invalid(f"max_extraction_ratio must be a positive number, got {ratio!r}")

        paths = self.allowed_output_paths
        if isinstance(paths, str) or not all(
            isinstance(p, (str, Path)) and str(p) for p in paths
        ):
            raise _invalid("allowed_output_paths must be a list of non-empty paths")
        if not paths:
            raise _invalid("allowed_output_paths must not be empty")
        object.__setattr__(self, "allowed_output_paths", tuple(str(p) for p in paths))

        if not isinstance(self.extensions_dir, (str, Path)) or not str(self.extensions_dir):
            raise _invalid("extensions_dir must be a non-empty path")
        object.__setattr__(self, "extensions_dir", str(self.extensions_dir))

        try:
            verbosity = VerbosityLevel(
                str(getattr(self.verbosity, "value", self.verbosity)).upper()
            )
        except ValueError as e:
            raise _invalid(f"Unknown verbosity level: {self.verbosity!r}") from e
        object.__setattr__(self, "verbosity", verbosity)

    @property
    def download_timeout_seconds(self) -> float:
        return self.download_timeout / 1000

    def with_overrides(self, **overrides: Any) -> "ExtractorConfiguration":
        """Return a copy with every non-None override applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        unknown = set(values) - field_names()
        if unknown:
            raise _invalid(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return dataclasses.replace(self, **values)

    def as_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["allowed_output_paths"] = list(self.allowed_output_paths)
        data["verbosity"] = self.verbosity.value
        return data


def field_names() -> set[str]:
    return {f.name for f in dataclasses.fields(ExtractorConfiguration)}


def load_config(
    path: Path | None = None, base: ExtractorConfiguration | None = None
) -> ExtractorConfiguration:
    """Load configuration from a YAML file.

    Args:
        path: YAML file with a mapping of configuration keys. When None, the
            base configuration is returned unchanged.
        base: Configuration to overlay; defaults are used if omitted.

    Returns:
        The resulting configuration.

    Raises:
        ExtractorError: INVALID_CONFIGURATION for unreadable files, invalid
            YAML, non-mapping documents, unknown keys or invalid values.
    """
    config = base or ExtractorConfiguration()
    if path is None:
        return config

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise _invalid(f"Cannot read configuration file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise _invalid(f"Invalid YAML in configuration file {path}: {e}") from e

    if data is None:
        return config
    if not isinstance(data, dict) or not all(isinstance(k, str) for k in data):
        raise _invalid(f"Configuration file {path} must contain a mapping")

    config = config.with_overrides(**data)
    logger.debug(f"Configuration loaded from {path}: {redact_secrets(config.as_dict())}")
    return config
