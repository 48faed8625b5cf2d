# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Global pytest fixtures shared across all test modules."""

from pathlib import Path

import pytest

from crx_extract.core.config import ExtractorConfiguration
from tests.helpers import FakeArchiveTool, build_crx3, make_extension_zip


@pytest.fixture
def config() -> ExtractorConfiguration:
    """Default configuration."""
    return ExtractorConfiguration()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Working directory snapshot used as the only allowed output root."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def fake_tool() -> FakeArchiveTool:
    return FakeArchiveTool()


@pytest.fixture
def payload() -> bytes:
    """ZIP payload of a minimal valid extension."""
    return make_extension_zip(extra={"background.js": "console.log('hi');"})


@pytest.fixture
def crx_file(workspace: Path, payload: bytes) -> Path:
    """A version 3 CRX file on disk inside the workspace."""
    path = workspace / "my-extension.crx"
    path.write_bytes(build_crx3(payload))
    return path
