# -*- coding: utf-8 -*-

# Copyright: (c) 2025, Daniel Schmidt

import asyncio
import logging
from pathlib import Path
from typing import Optional

import errorhandler
import typer
from typing_extensions import Annotated

import crx_extract
from crx_extract.core.config import ExtractorConfiguration, load_config
from crx_extract.core.constants import CHROME_WEBSTORE_URL_BASE, EXIT_FAILURE
from crx_extract.core.coordinator import ExtractionCoordinator
from crx_extract.core.errors import ExtractorError
from crx_extract.cli.ui.summary import format_failure, format_success
from crx_extract.utils.logging import VerbosityLevel, configure_logging
from crx_extract.utils.terminal import TerminalColors


app = typer.Typer(add_completion=False)

logger = logging.getLogger(__name__)

error_handler = errorhandler.ErrorHandler()


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"crx-extract, version {crx_extract.__version__}")
        raise typer.Exit()


Source = Annotated[
    str,
    typer.Argument(
        help=(
            "Chrome Web Store URL, extension ID (32 lowercase letters) or path "
            f"to a local .crx file, e.g. {CHROME_WEBSTORE_URL_BASE}<id>."
        ),
        show_default=False,
    ),
]


OutputDir = Annotated[
    Optional[Path],
    typer.Argument(
        help=(
            "Directory to extract files into. Defaults to <extensions-dir>/<name>. "
            "Must lie below an allowed path, not be one itself, since a temporary "
            "staging directory is created next to it."
        ),
        file_okay=False,
        dir_okay=True,
        show_default=False,
    ),
]


ConfigFile = Annotated[
    Optional[Path],
    typer.Option(
        "-c",
        "--config",
        exists=True,
        dir_okay=False,
        file_okay=True,
        help="Path to a YAML configuration file.",
        envvar="CRX_EXTRACT_CONFIG",
    ),
]


MaxFileSize = Annotated[
    Optional[int],
    typer.Option(
        "--max-file-size",
        help="Maximum size of a local CRX file in bytes.",
        envvar="CRX_EXTRACT_MAX_FILE_SIZE",
        min=1,
    ),
]


DownloadTimeout = Annotated[
    Optional[int],
    typer.Option(
        "--download-timeout",
        help="Download timeout in milliseconds.",
        envvar="CRX_EXTRACT_DOWNLOAD_TIMEOUT",
        min=1,
    ),
]


MaxExtractionRatio = Annotated[
    Optional[float],
    typer.Option(
        "--max-extraction-ratio",
        help="Maximum uncompressed to compressed size ratio.",
        envvar="CRX_EXTRACT_MAX_EXTRACTION_RATIO",
    ),
]


MaxExtractedFiles = Annotated[
    Optional[int],
    typer.Option(
        "--max-extracted-files",
        help="Maximum number of entries in the archive.",
        envvar="CRX_EXTRACT_MAX_EXTRACTED_FILES",
        min=1,
    ),
]


MaxExtractedSize = Annotated[
    Optional[int],
    typer.Option(
        "--max-extracted-size",
        help="Maximum total uncompressed size in bytes.",
        envvar="CRX_EXTRACT_MAX_EXTRACTED_SIZE",
        min=1,
    ),
]


AllowedPaths = Annotated[
    Optional[list[str]],
    typer.Option(
        "--allowed-path",
        help="Directory output may be written under (repeatable). Defaults to the current directory.",
        envvar="CRX_EXTRACT_ALLOWED_PATHS",
    ),
]


ExtensionsDir = Annotated[
    Optional[str],
    typer.Option(
        "--extensions-dir",
        help="Collection directory used when no output directory is given.",
        envvar="CRX_EXTRACT_EXTENSIONS_DIR",
    ),
]


Verbosity = Annotated[
    Optional[VerbosityLevel],
    typer.Option(
        "-v",
        "--verbosity",
        help="Verbosity level.",
        envvar="CRX_EXTRACT_VERBOSITY",
        is_eager=True,
    ),
]


Debug = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Enable debug logging (same as -v DEBUG unless -v is given).",
    ),
]


Quiet = Annotated[
    bool,
    typer.Option(
        "--quiet",
        help="Minimal output, errors only.",
    ),
]


Version = Annotated[
    bool,
    typer.Option(
        "--version",
        callback=version_callback,
        help="Display version number.",
        is_eager=True,
    ),
]


def resolve_verbosity(
    verbosity: VerbosityLevel | None,
    debug: bool,
    quiet: bool,
    configured: VerbosityLevel,
) -> VerbosityLevel:
    """Pick the effective level: explicit -v, then --debug, then --quiet, then config."""
    if verbosity is not None:
        return verbosity
    if debug:
        return VerbosityLevel.DEBUG
    if quiet:
        return VerbosityLevel.ERROR
    return configured


@app.command()
def main(
    source: Source,
    output_dir: OutputDir = None,
    config: ConfigFile = None,
    max_file_size: MaxFileSize = None,
    download_timeout: DownloadTimeout = None,
    max_extraction_ratio: MaxExtractionRatio = None,
    max_extracted_files: MaxExtractedFiles = None,
    max_extracted_size: MaxExtractedSize = None,
    allowed_path: AllowedPaths = None,
    extensions_dir: ExtensionsDir = None,
    verbosity: Verbosity = None,
    debug: Debug = False,
    quiet: Quiet = False,
    version: Version = False,
) -> None:
    """Securely extract a Chrome extension (CRX) file.

    Output is only written under the allowed paths (the current directory by
    default). Archives are screened for ZIP bombs before extraction.
    """
    try:
        configuration = load_config(config, ExtractorConfiguration()).with_overrides(
            max_file_size=max_file_size,
            download_timeout=download_timeout,
            max_extraction_ratio=max_extraction_ratio,
            max_extracted_files=max_extracted_files,
            max_extracted_size=max_extracted_size,
            allowed_output_paths=tuple(allowed_path) if allowed_path else None,
            extensions_dir=extensions_dir,
        )
    except ExtractorError as e:
        typer.echo(TerminalColors.failure(e.code, e.message), err=True)
        raise typer.Exit(EXIT_FAILURE)

    level = resolve_verbosity(verbosity, debug, quiet, configuration.verbosity)
    configure_logging(level, error_handler)

    try:
        coordinator = ExtractionCoordinator(source, configuration)
        outcome = asyncio.run(coordinator.run(output_dir))
    except ExtractorError as e:
        typer.echo(TerminalColors.failure(e.code, e.message), err=True)
        raise typer.Exit(EXIT_FAILURE)
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        typer.echo(TerminalColors.error(f"Unexpected error: {e}"), err=True)
        raise typer.Exit(EXIT_FAILURE)

    if outcome.success:
        if level != VerbosityLevel.ERROR and level != VerbosityLevel.CRITICAL:
            typer.echo(format_success(outcome))
    else:
        typer.echo(format_failure(outcome), err=True)

    exit(outcome.exit_code)


def exit(code: int = 0) -> None:
    if code != 0 or error_handler.fired:
        raise typer.Exit(EXIT_FAILURE)
    raise typer.Exit(0)
