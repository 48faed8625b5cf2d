# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Containment checks for extracted archive trees.

This module provides the Zip Slip check applied after the archive tool has
unpacked into the staging directory and before anything is published.
"""

import logging
from pathlib import Path

from crx_extract.core.errors import ExtractorError, FailureReason

logger = logging.getLogger(__name__)


def validate_extracted_tree(extract_dir: Path) -> int:
    """Validate that every extracted entry stays inside ``extract_dir``.

    Zip Slip is a vulnerability that allows attackers to write files outside
    the intended extraction directory using path traversal sequences like
    "../" in archive member names, or symlink members pointing elsewhere.
    Each entry is resolved (following symlinks) and must remain a
    descendant of the resolved extraction directory.

    Args:
        extract_dir: Directory the archive was unpacked into.

    Returns:
        Number of entries checked.

    Raises:
        ExtractorError: PATH_OUTSIDE_ALLOWED_ROOTS if any entry escapes or
            cannot be resolved (a symlink loop or a dangling link).

    Example:
        >>> validate_extracted_tree(Path("/tmp/staging/contents"))
        3
    """
    resolved_extract_dir = extract_dir.resolve()
    checked = 0
    for entry in extract_dir.rglob("*"):
        try:
            target = entry.resolve(strict=True)
        except (OSError, RuntimeError) as e:
            # Loops raise RuntimeError before 3.13 and OSError from 3.13 on
            raise ExtractorError(
                FailureReason.PATH_OUTSIDE_ALLOWED_ROOTS,
                f"Unresolvable archive member: {entry.relative_to(extract_dir)} ({e})",
            ) from e
        if target != resolved_extract_dir and not target.is_relative_to(
            resolved_extract_dir
        ):
            raise ExtractorError(
                FailureReason.PATH_OUTSIDE_ALLOWED_ROOTS,
                f"Path traversal detected in archive member: "
                f"{entry.relative_to(extract_dir)}",
            )
        checked += 1
    logger.debug(f"Validated {checked} extracted entries")
    return checked
