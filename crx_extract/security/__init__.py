# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt
"""Security gates of the extraction pipeline."""

from crx_extract.security.archive_security import validate_extracted_tree
from crx_extract.security.path_guard import (
    PathGuard,
    normalize_path,
    sanitize_name,
)

__all__ = [
    "PathGuard",
    "normalize_path",
    "sanitize_name",
    "validate_extracted_tree",
]
