# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""End-to-end extraction through the system unzip binary."""

import asyncio
import shutil
from pathlib import Path

import pytest

from crx_extract.archive import UnzipRunner
from crx_extract.core.config import ExtractorConfiguration
from crx_extract.core.coordinator import ExtractionCoordinator
from crx_extract.core.errors import ErrorKind, ExtractorError, FailureReason
from tests.helpers import build_crx3, make_extension_zip, make_zip

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("unzip") is None, reason="unzip not installed"),
]


def _run(crx: Path, workspace: Path, config: ExtractorConfiguration | None = None):
    coordinator = ExtractionCoordinator(
        str(crx), config or ExtractorConfiguration(), working_directory=workspace
    )
    return asyncio.run(coordinator.run("out/extension"))


class TestUnzipRunner:
    def test_list_summary(self, tmp_path: Path) -> None:
        archive = tmp_path / "archive.zip"
        archive.write_bytes(make_zip({"a.txt": "abc", "dir/b.txt": "defg"}))

        summary = asyncio.run(UnzipRunner().list_summary(archive))

        assert summary.file_count == 2
        assert summary.uncompressed_size == 7

    def test_list_summary_of_garbage(self, tmp_path: Path) -> None:
        archive = tmp_path / "archive.zip"
        archive.write_bytes(b"definitely not a zip archive")

        with pytest.raises(ExtractorError) as exc_info:
            asyncio.run(UnzipRunner().list_summary(archive))

        assert exc_info.value.reason == FailureReason.INSPECTION_FAILED


class TestExtraction:
    def test_extracts_extension(self, workspace: Path, crx_file: Path) -> None:
        outcome = _run(crx_file, workspace)

        target = workspace / "out" / "extension"
        assert outcome.success
        assert outcome.manifest is not None
        assert outcome.manifest.name == "Test"
        assert (target / "background.js").is_file()
        assert (workspace / "out" / "extension.crx").read_bytes() == crx_file.read_bytes()

    def test_rejects_zip_bomb(self, workspace: Path) -> None:
        crx = workspace / "bomb.crx"
        crx.write_bytes(
            build_crx3(make_extension_zip(extra={"zeros.bin": b"\x00" * 20_000_000}))
        )

        outcome = _run(crx, workspace)

        assert outcome.error is not None
        assert outcome.error.kind == ErrorKind.SECURITY
        assert outcome.error.reason == FailureReason.SUSPICIOUS_COMPRESSION_RATIO
        assert list((workspace / "out").iterdir()) == []

    def test_corrupt_payload_is_preserved(self, workspace: Path) -> None:
        payload = bytearray(make_extension_zip(extra={"app.js": "x" * 4000}))
        # Corrupt the deflate stream of manifest.json, keep the central directory intact
        payload[43:53] = b"\xff" * 10
        crx = workspace / "corrupt.crx"
        crx.write_bytes(build_crx3(bytes(payload)))

        outcome = _run(crx, workspace)

        assert outcome.error is not None
        assert outcome.error.reason == FailureReason.DECOMPRESSION_FAILED
        assert outcome.recovery_path == workspace / "out" / "extension" / "failed_extraction.zip"
        assert outcome.recovery_path.read_bytes() == bytes(payload)
