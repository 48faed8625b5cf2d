# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Unit tests for the crx-extract command line."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

import crx_extract
import crx_extract.cli.main as cli_main
from crx_extract.core.errors import ExtractorError, FailureReason
from crx_extract.core.types import (
    ExtensionInfo,
    ExtensionManifest,
    ExtractionOutcome,
    ExtractionState,
)
from crx_extract.utils.logging import VerbosityLevel


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_error_handler():
    """Errors logged by other tests must not leak into the exit code."""
    cli_main.error_handler.reset()
    yield
    cli_main.error_handler.reset()


@pytest.fixture
def mock_configure_logging():
    with patch("crx_extract.cli.main.configure_logging") as mock:
        yield mock


def _success_outcome(tmp_path: Path) -> ExtractionOutcome:
    return ExtractionOutcome.succeeded(
        output_dir=tmp_path / "out",
        crx_path=tmp_path / "out.crx",
        extension=ExtensionInfo(id="local", name="out"),
        manifest=ExtensionManifest(
            name="Test", version="1.0.0", manifest_version=3, description="Demo"
        ),
    )


def _failure_outcome(tmp_path: Path) -> ExtractionOutcome:
    error = ExtractorError(
        FailureReason.DECOMPRESSION_FAILED,
        "Extraction failed (exit code 1).",
        recovery_path=tmp_path / "out" / "failed_extraction.zip",
    )
    return ExtractionOutcome.from_error(error, ExtractionState.SECURITY_CHECKED)


def _patch_coordinator(outcome: ExtractionOutcome):
    coordinator = MagicMock()
    coordinator.run = AsyncMock(return_value=outcome)
    return patch("crx_extract.cli.main.ExtractionCoordinator", return_value=coordinator)


class TestVersion:
    def test_version_flag(self, runner: CliRunner) -> None:
        result = runner.invoke(cli_main.app, ["--version"])

        assert result.exit_code == 0
        assert f"crx-extract, version {crx_extract.__version__}" in result.stdout


class TestHelp:
    def test_output_dir_help_mentions_staging(self, runner: CliRunner) -> None:
        result = runner.invoke(cli_main.app, ["--help"], env={"COLUMNS": "200"})

        assert result.exit_code == 0
        assert "staging" in result.output


class TestMainCommand:
    def test_success(
        self, runner: CliRunner, tmp_path: Path, mock_configure_logging: MagicMock
    ) -> None:
        with _patch_coordinator(_success_outcome(tmp_path)) as mock_cls:
            result = runner.invoke(cli_main.app, ["ext.crx", "out"])

        assert result.exit_code == 0
        assert "Extension Information:" in result.stdout
        assert "Name: Test" in result.stdout
        assert "Manifest: v3" in result.stdout
        assert "Successfully extracted to:" in result.stdout
        assert "Original CRX saved to:" in result.stdout
        assert mock_cls.call_args[0][0] == "ext.crx"
        mock_cls.return_value.run.assert_awaited_once_with(Path("out"))

    def test_failure_exit_code(
        self, runner: CliRunner, tmp_path: Path, mock_configure_logging: MagicMock
    ) -> None:
        with _patch_coordinator(_failure_outcome(tmp_path)):
            result = runner.invoke(cli_main.app, ["ext.crx"])

        assert result.exit_code == 1
        assert "EXTRACTION_ERROR: Extraction failed" in result.output
        assert "failed_extraction.zip" in result.output

    def test_quiet_suppresses_success_output(
        self, runner: CliRunner, tmp_path: Path, mock_configure_logging: MagicMock
    ) -> None:
        with _patch_coordinator(_success_outcome(tmp_path)):
            result = runner.invoke(cli_main.app, ["ext.crx", "--quiet"])

        assert result.exit_code == 0
        assert "Successfully extracted" not in result.stdout

    def test_constructor_error(
        self, runner: CliRunner, mock_configure_logging: MagicMock
    ) -> None:
        with patch(
            "crx_extract.cli.main.ExtractionCoordinator",
            side_effect=ExtractorError(FailureReason.MALFORMED_INPUT, "bad input"),
        ):
            result = runner.invoke(cli_main.app, ["ext.crx"])

        assert result.exit_code == 1
        assert "VALIDATION_ERROR: bad input" in result.output

    def test_unexpected_error(
        self, runner: CliRunner, mock_configure_logging: MagicMock
    ) -> None:
        coordinator = MagicMock()
        coordinator.run = AsyncMock(side_effect=RuntimeError("kaboom"))
        with patch("crx_extract.cli.main.ExtractionCoordinator", return_value=coordinator):
            result = runner.invoke(cli_main.app, ["ext.crx"])

        assert result.exit_code == 1
        assert "Unexpected error: kaboom" in result.output

    def test_missing_source(self, runner: CliRunner) -> None:
        result = runner.invoke(cli_main.app, [])

        assert result.exit_code != 0


class TestConfiguration:
    def test_options_override_config_file(
        self, runner: CliRunner, tmp_path: Path, mock_configure_logging: MagicMock
    ) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("max_extracted_files: 50\nmax_extraction_ratio: 10\n")

        with _patch_coordinator(_success_outcome(tmp_path)) as mock_cls:
            result = runner.invoke(
                cli_main.app,
                [
                    "ext.crx",
                    "-c",
                    str(config_file),
                    "--max-extracted-files",
                    "7",
                    "--allowed-path",
                    ".",
                    "--allowed-path",
                    "/srv/extensions",
                ],
            )

        assert result.exit_code == 0
        configuration = mock_cls.call_args[0][1]
        assert configuration.max_extracted_files == 7
        assert configuration.max_extraction_ratio == 10
        assert configuration.allowed_output_paths == (".", "/srv/extensions")

    def test_environment_variable(
        self, runner: CliRunner, tmp_path: Path, mock_configure_logging: MagicMock
    ) -> None:
        with _patch_coordinator(_success_outcome(tmp_path)) as mock_cls:
            result = runner.invoke(
                cli_main.app,
                ["ext.crx"],
                env={"CRX_EXTRACT_DOWNLOAD_TIMEOUT": "1500"},
            )

        assert result.exit_code == 0
        assert mock_cls.call_args[0][1].download_timeout == 1500

    def test_invalid_config_file(
        self, runner: CliRunner, tmp_path: Path, mock_configure_logging: MagicMock
    ) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("unknown_key: 1\n")

        result = runner.invoke(cli_main.app, ["ext.crx", "-c", str(config_file)])

        assert result.exit_code == 1
        assert "VALIDATION_ERROR" in result.output
        mock_configure_logging.assert_not_called()


class TestVerbosity:
    @pytest.mark.parametrize(
        "args,expected",
        [
            ([], VerbosityLevel.INFO),
            (["--debug"], VerbosityLevel.DEBUG),
            (["--quiet"], VerbosityLevel.ERROR),
            (["-v", "WARNING"], VerbosityLevel.WARNING),
            (["-v", "WARNING", "--debug"], VerbosityLevel.WARNING),
            (["--debug", "--quiet"], VerbosityLevel.DEBUG),
        ],
    )
    def test_cli_level(
        self,
        runner: CliRunner,
        tmp_path: Path,
        mock_configure_logging: MagicMock,
        args: list[str],
        expected: VerbosityLevel,
    ) -> None:
        with _patch_coordinator(_success_outcome(tmp_path)):
            result = runner.invoke(cli_main.app, ["ext.crx", *args])

        assert result.exit_code == 0
        assert mock_configure_logging.call_args[0][0] == expected

    def test_config_file_level(
        self, runner: CliRunner, tmp_path: Path, mock_configure_logging: MagicMock
    ) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("verbosity: debug\n")

        with _patch_coordinator(_success_outcome(tmp_path)):
            runner.invoke(cli_main.app, ["ext.crx", "-c", str(config_file)])

        assert mock_configure_logging.call_args[0][0] == VerbosityLevel.DEBUG


class TestResolveVerbosity:
    def test_explicit_level_wins(self) -> None:
        assert (
            cli_main.resolve_verbosity(
                VerbosityLevel.CRITICAL, True, True, VerbosityLevel.DEBUG
            )
            == VerbosityLevel.CRITICAL
        )

    def test_falls_back_to_configured(self) -> None:
        assert (
            cli_main.resolve_verbosity(None, False, False, VerbosityLevel.WARNING)
            == VerbosityLevel.WARNING
        )
