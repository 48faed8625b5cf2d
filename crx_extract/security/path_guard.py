# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Output path containment for the extraction pipeline.

PathGuard decides whether a filesystem location may be written to. The
allowed roots are resolved once, at construction, against a working
directory snapshot that the caller supplies; later changes of the process
working directory have no effect on the trust boundary.
"""

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from crx_extract.core.constants import MAX_NAME_LENGTH, UNNAMED_PLACEHOLDER
from crx_extract.core.errors import ExtractorError, FailureReason
from crx_extract.core.types import ResolvedPath

logger = logging.getLogger(__name__)

_ILLEGAL_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')
_DOT_RUNS = re.compile(r"\.{2,}")


def normalize_path(path: Path) -> Path:
    """Lexically resolve ``.`` and ``..`` segments without touching the disk.

    ``..`` never climbs above the anchor: ``/../etc`` normalizes to ``/etc``.
    """
    anchor = path.anchor
    parts: list[str] = []
    for part in path.parts[1 if anchor else 0 :]:
        if part == "..":
            if parts:
                parts.pop()
            continue
        if part in ("", "."):
            continue
        parts.append(part)
    return Path(anchor, *parts)


def sanitize_name(raw: str) -> str:
    """Turn an untrusted display name into a safe single path component.

    Illegal and control characters become ``_``, runs of dots collapse to
    ``_``, surrounding whitespace is removed and the result is capped at
    200 characters. Applying it twice gives the same result as once.

    Examples:
        >>> sanitize_name("My Extension")
        'My Extension'
        >>> sanitize_name("../../etc/passwd")
        '____etc_passwd'
        >>> sanitize_name("   ")
        'unnamed'
    """
    sanitized = _ILLEGAL_NAME_CHARS.sub("_", raw)
    sanitized = _DOT_RUNS.sub("_", sanitized).strip()
    if len(sanitized) > MAX_NAME_LENGTH:
        sanitized = sanitized[:MAX_NAME_LENGTH].rstrip()
    if not sanitized or sanitized == ".":
        return UNNAMED_PLACEHOLDER
    return sanitized


class PathGuard:
    """Validates candidate paths against a fixed set of allowed roots."""

    def __init__(self, allowed_roots: Iterable[str | Path], working_directory: Path):
        """Initialize the guard.

        Args:
            allowed_roots: Directories the pipeline may write under. Relative
                entries, including ".", are taken relative to
                ``working_directory``.
            working_directory: Absolute working directory snapshot.
        """
        self.working_directory = normalize_path(Path(working_directory))
        if not self.working_directory.is_absolute():
            raise ValueError(
                f"Working directory must be absolute: {working_directory}"
            )

        self.allowed_roots: tuple[Path, ...] = tuple(
            self._resolve_root(root) for root in allowed_roots
        )
        logger.debug(f"Allowed output roots: {[str(r) for r in self.allowed_roots]}")

    def _resolve_root(self, root: str | Path) -> Path:
        if str(root) == ".":
            return self.working_directory
        root_path = Path(root)
        if not root_path.is_absolute():
            root_path = self.working_directory / root_path
        return normalize_path(root_path)

    def is_allowed(self, path: Path) -> bool:
        """Check a normalized absolute path against the allowed roots."""
        return any(path == root or path.is_relative_to(root) for root in self.allowed_roots)

    def resolve(
        self, candidate: str | Path, base: str | Path | None = None
    ) -> ResolvedPath:
        """Resolve a candidate path and prove it lies within an allowed root.

        Args:
            candidate: Path to validate.
            base: Optional directory the candidate is relative to.

        Returns:
            The normalized absolute path.

        Raises:
            ExtractorError: PATH_OUTSIDE_ALLOWED_ROOTS if the path escapes
                every allowed root.
        """
        if base is not None:
            joined = Path(base) / candidate
        else:
            joined = Path(candidate)
        if not joined.is_absolute():
            joined = self.working_directory / joined

        normalized = normalize_path(joined)
        if not self.is_allowed(normalized):
            raise ExtractorError(
                FailureReason.PATH_OUTSIDE_ALLOWED_ROOTS,
                f'Path "{candidate}" resolves outside allowed directories',
            )
        return ResolvedPath(normalized)

    def ensure_directory(self, path: str | Path) -> ResolvedPath:
        """Create a directory and any missing parents, checking each one.

        Every directory is validated immediately before it is created, so a
        missing ancestor that lies above the allowed roots is never made.

        Raises:
            ExtractorError: PATH_OUTSIDE_ALLOWED_ROOTS for an escaping path,
                DIRECTORY_CREATION_FAILED if the filesystem refuses.
        """
        target = self.resolve(path)
        missing = [p for p in (target, *target.parents) if not p.exists()]
        for directory in reversed(missing):
            checked = self.resolve(directory)
            try:
                checked.mkdir(exist_ok=True)
            except OSError as e:
                raise ExtractorError(
                    FailureReason.DIRECTORY_CREATION_FAILED,
                    f"Failed to create directory: {checked} ({e})",
                ) from e
            logger.debug(f"Directory created: {checked}")
        if not target.is_dir():
            raise ExtractorError(
                FailureReason.DIRECTORY_CREATION_FAILED,
                f"Failed to create directory: {target} (not a directory)",
            )
        return target
