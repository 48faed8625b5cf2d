# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Builders and fakes shared across the test suite."""

import io
import json
import struct
import zipfile
from pathlib import Path
from typing import Any, Callable

from crx_extract.archive.unzip_runner import ArchiveSummary
from crx_extract.core.constants import CRX_MAGIC_BYTES

VALID_MANIFEST: dict[str, Any] = {
    "name": "Test",
    "version": "1.0.0",
    "manifest_version": 3,
}


def make_zip(files: dict[str, bytes | str]) -> bytes:
    """Build an in-memory ZIP archive from a name -> content mapping."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def make_extension_zip(
    manifest: dict[str, Any] | None = None, extra: dict[str, bytes | str] | None = None
) -> bytes:
    """Build a ZIP holding a manifest.json plus optional extra files."""
    files: dict[str, bytes | str] = {
        "manifest.json": json.dumps(VALID_MANIFEST if manifest is None else manifest)
    }
    files.update(extra or {})
    return make_zip(files)


def build_crx3(payload: bytes, header: bytes = b"\x0a\x02\x08\x01") -> bytes:
    """Wrap a payload in a version 3 CRX container."""
    return CRX_MAGIC_BYTES + struct.pack("<II", 3, len(header)) + header + payload


def build_crx2(
    payload: bytes, public_key: bytes = b"pubkey", signature: bytes = b"signature!"
) -> bytes:
    """Wrap a payload in a version 2 CRX container."""
    return (
        CRX_MAGIC_BYTES
        + struct.pack("<III", 2, len(public_key), len(signature))
        + public_key
        + signature
        + payload
    )


class FakeArchiveTool:
    """In-process stand-in for the unzip utility, backed by zipfile.

    Attributes:
        return_code: Exit code reported by ``extract``.
        summary: Summary to report instead of reading the archive index.
        after_extract: Hook run after a successful extraction.
    """

    def __init__(
        self,
        return_code: int = 0,
        summary: ArchiveSummary | None = None,
        after_extract: Callable[[Path], None] | None = None,
    ) -> None:
        self.return_code = return_code
        self.summary = summary
        self.after_extract = after_extract
        self.listed: list[Path] = []
        self.extracted: list[tuple[Path, Path]] = []

    async def list_summary(self, archive_path: Path) -> ArchiveSummary:
        self.listed.append(archive_path)
        if self.summary is not None:
            return self.summary
        with zipfile.ZipFile(archive_path) as zf:
            infos = zf.infolist()
        return ArchiveSummary(
            file_count=len(infos),
            uncompressed_size=sum(info.file_size for info in infos),
        )

    async def extract(self, archive_path: Path, target_dir: Path) -> int:
        self.extracted.append((archive_path, target_dir))
        if self.return_code != 0:
            return self.return_code
        with zipfile.ZipFile(archive_path) as zf:
            zf.extractall(target_dir)
        if self.after_extract is not None:
            self.after_extract(target_dir)
        return 0
