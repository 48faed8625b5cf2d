# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Extraction pipeline coordinator.

One coordinator handles exactly one extraction attempt and walks it through
a fixed sequence of states::

    IDLE -> ACQUIRING -> HEADER_PARSED -> STAGED -> SECURITY_CHECKED
         -> EXTRACTED -> PUBLISHED -> DONE

Any failure ends the attempt in FAILED. Each stage's output is the input of
the next, so nothing runs in parallel. The staging directory is removed on
every exit path. Only a failed decompression leaves an artifact behind (the
payload, at ``<output>/failed_extraction.zip``); payloads rejected by the
security gate never persist.
"""

import logging
import shutil
import uuid
from pathlib import Path

import httpx

from crx_extract.acquisition import acquire
from crx_extract.archive import ArchiveTool, UnzipRunner
from crx_extract.core.config import ExtractorConfiguration
from crx_extract.core.constants import (
    CRX_SUFFIX,
    FALLBACK_ARCHIVE_NAME,
    STAGED_ARCHIVE_NAME,
    STAGED_CONTENTS_DIRNAME,
    STAGING_DIR_PREFIX,
    UNKNOWN_EXTENSION_NAME,
)
from crx_extract.core.errors import ExtractorError, FailureReason
from crx_extract.core.header import parse_header
from crx_extract.core.manifest import read_manifest
from crx_extract.core.types import (
    ExtensionInfo,
    ExtractionOutcome,
    ExtractionState,
    ResolvedPath,
)
from crx_extract.security.archive_security import validate_extracted_tree
from crx_extract.security.inspector import ArchiveSecurityInspector
from crx_extract.security.path_guard import PathGuard

logger = logging.getLogger(__name__)


class ExtractionCoordinator:
    """Runs a single CRX extraction from input to published directory."""

    def __init__(
        self,
        source: str,
        config: ExtractorConfiguration | None = None,
        archive_tool: ArchiveTool | None = None,
        working_directory: Path | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the coordinator.

        Args:
            source: Extension id, Web Store URL or local .crx path.
            config: Extraction configuration; defaults if omitted.
            archive_tool: Archive utility; ``unzip`` on PATH if omitted.
            working_directory: Snapshot used to resolve relative paths and
                allowed roots. Captured from the process once if omitted.
            transport: Optional httpx transport for downloads.
        """
        if not source or not isinstance(source, str):
            raise ExtractorError(
                FailureReason.MALFORMED_INPUT, "Input must be a non-empty string"
            )

        self.source = source
        self.config = config or ExtractorConfiguration()
        self.archive_tool: ArchiveTool = archive_tool or UnzipRunner()
        self.path_guard = PathGuard(
            self.config.allowed_output_paths, working_directory or Path.cwd()
        )
        self.inspector = ArchiveSecurityInspector(self.config, self.archive_tool)
        self.transport = transport

        self.state = ExtractionState.IDLE
        self.extension: ExtensionInfo | None = None

        logger.debug(f"ExtractionCoordinator initialized for input: {source}")

    def _transition(self, state: ExtractionState) -> None:
        logger.debug(f"State transition: {self.state.value} -> {state.value}")
        self.state = state

    async def run(self, output_dir: str | Path | None = None) -> ExtractionOutcome:
        """Run the extraction and report the result as an outcome.

        Pipeline failures are returned, not raised. Unexpected exceptions
        propagate unchanged.
        """
        try:
            return await self.extract(output_dir)
        except ExtractorError as e:
            failed_at = self.state
            self._transition(ExtractionState.FAILED)
            logger.error(f"Extraction failed: {e.code}: {e.message}")
            return ExtractionOutcome.from_error(e, failed_at, self.extension)

    async def extract(self, output_dir: str | Path | None = None) -> ExtractionOutcome:
        """Run the full pipeline.

        Args:
            output_dir: Target directory. Defaults to
                ``<extensions_dir>/<extension name>``.

        Returns:
            A successful outcome.

        Raises:
            ExtractorError: On any pipeline failure.
        """
        if self.state != ExtractionState.IDLE:
            raise ExtractorError(
                FailureReason.INTERNAL_STATE,
                "An ExtractionCoordinator can only be used for one extraction",
            )

        logger.info("Starting CRX extraction")
        self._transition(ExtractionState.ACQUIRING)
        acquired = await acquire(self.source, self.config, transport=self.transport)
        self.extension = acquired.extension

        header = parse_header(acquired.data)
        self._transition(ExtractionState.HEADER_PARSED)
        logger.info(f"CRX version: {header.version.value}")

        payload = acquired.data[header.payload_offset :]
        logger.info(f"ZIP data size: {len(payload) / 1024 / 1024:.2f} MB")

        target = self._resolve_output_dir(output_dir)
        logger.info(f"Output directory: {target}")

        staging_dir = self._create_staging_dir(target)
        try:
            archive_path = self._stage_payload(staging_dir, payload)
            self._transition(ExtractionState.STAGED)

            await self.inspector.check(archive_path)
            self._transition(ExtractionState.SECURITY_CHECKED)

            logger.info("Extracting files...")
            contents_dir = self._decompress_target(staging_dir)
            return_code = await self.archive_tool.extract(archive_path, contents_dir)
            if return_code != 0:
                recovery_path = self._preserve_payload(target, payload)
                if recovery_path is None:
                    raise ExtractorError(
                        FailureReason.DECOMPRESSION_FAILED,
                        f"Unzip failed with exit code {return_code}",
                    )
                raise ExtractorError(
                    FailureReason.DECOMPRESSION_FAILED,
                    f"Extraction failed (exit code {return_code}). "
                    f"ZIP saved to: {recovery_path}",
                    recovery_path=recovery_path,
                )
            validate_extracted_tree(contents_dir)
            self._transition(ExtractionState.EXTRACTED)

            crx_path = self._publish(contents_dir, target, acquired.data)
            self._transition(ExtractionState.PUBLISHED)
            logger.info("Extraction completed successfully")
        finally:
            self._remove_staging_dir(staging_dir)

        manifest = read_manifest(target)
        self._transition(ExtractionState.DONE)
        logger.info(f"Successfully extracted to: {target}")

        return ExtractionOutcome.succeeded(
            output_dir=target,
            crx_path=crx_path,
            extension=acquired.extension,
            manifest=manifest,
        )

    def _resolve_output_dir(self, output_dir: str | Path | None) -> ResolvedPath:
        if output_dir is not None:
            return self.path_guard.resolve(output_dir)
        name = self.extension.name if self.extension else UNKNOWN_EXTENSION_NAME
        return self.path_guard.resolve(Path(self.config.extensions_dir) / name)

    def _create_staging_dir(self, target: ResolvedPath) -> ResolvedPath:
        """Create a uniquely named staging directory beside the output directory."""
        parent = self.path_guard.ensure_directory(target.parent)
        staging_dir = self.path_guard.resolve(
            f"{STAGING_DIR_PREFIX}{target.name}_{uuid.uuid4().hex}", base=parent
        )
        try:
            staging_dir.mkdir()
        except OSError as e:
            raise ExtractorError(
                FailureReason.DIRECTORY_CREATION_FAILED,
                f"Failed to create directory: {staging_dir} ({e})",
            ) from e
        logger.debug(f"Staging directory created: {staging_dir}")
        return staging_dir

    def _stage_payload(self, staging_dir: ResolvedPath, payload: bytes) -> ResolvedPath:
        archive_path = self.path_guard.resolve(STAGED_ARCHIVE_NAME, base=staging_dir)
        self._write_file(archive_path, payload)
        logger.debug(f"Temporary ZIP created: {archive_path}")
        return archive_path

    def _decompress_target(self, staging_dir: ResolvedPath) -> ResolvedPath:
        contents_dir = self.path_guard.resolve(STAGED_CONTENTS_DIRNAME, base=staging_dir)
        return self.path_guard.ensure_directory(contents_dir)

    def _preserve_payload(self, target: ResolvedPath, payload: bytes) -> Path | None:
        """Save the payload for manual inspection after a failed decompression."""
        try:
            self.path_guard.ensure_directory(target)
            fallback_path = self.path_guard.resolve(FALLBACK_ARCHIVE_NAME, base=target)
            self._write_file(fallback_path, payload)
        except ExtractorError as e:
            logger.error(f"Failed to save ZIP for manual recovery: {e.message}")
            return None
        logger.warning(f"ZIP saved for manual recovery: {fallback_path}")
        return fallback_path

    def _publish(
        self, contents_dir: ResolvedPath, target: ResolvedPath, container: bytes
    ) -> ResolvedPath:
        """Replace the output directory with the extracted contents.

        The output directory is cleared first; each extraction represents the
        current state of one extension. The original container is saved next
        to it as ``<output name>.crx``.
        """
        target = self.path_guard.resolve(target)
        try:
            if target.is_symlink() or target.is_file():
                target.unlink()
            elif target.exists():
                shutil.rmtree(target)
        except OSError as e:
            raise ExtractorError(
                FailureReason.WRITE_FAILED,
                f"Failed to clear output directory {target}: {e}",
            ) from e
        self.path_guard.ensure_directory(target)

        for entry in sorted(contents_dir.iterdir()):
            destination = self.path_guard.resolve(entry.name, base=target)
            try:
                shutil.move(str(entry), str(destination))
            except OSError as e:
                raise ExtractorError(
                    FailureReason.WRITE_FAILED,
                    f"Failed to move {entry.name} into {target}: {e}",
                ) from e

        crx_path = self.path_guard.resolve(
            f"{target.name}{CRX_SUFFIX}", base=target.parent
        )
        self._write_file(crx_path, container)
        logger.info(f"Saved CRX file to: {crx_path}")
        return crx_path

    @staticmethod
    def _write_file(path: ResolvedPath, data: bytes) -> None:
        try:
            path.write_bytes(data)
        except OSError as e:
            raise ExtractorError(
                FailureReason.WRITE_FAILED, f"Failed to write {path}: {e}"
            ) from e

    @staticmethod
    def _remove_staging_dir(staging_dir: Path) -> None:
        try:
            shutil.rmtree(staging_dir)
            logger.debug(f"Staging directory removed: {staging_dir}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to clean up temp directory {staging_dir}: {e}")
