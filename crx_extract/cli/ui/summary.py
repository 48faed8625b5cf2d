# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt
"""Human-readable rendering of extraction outcomes."""

from crx_extract.core.types import ExtensionManifest, ExtractionOutcome
from crx_extract.utils.terminal import TerminalColors


def format_manifest_summary(manifest: ExtensionManifest) -> str:
    """Render the identity fields of a manifest.

    Examples:
        Extension Information:
           Name: Test
           Version: 1.0.0
           Manifest: v3
    """
    lines = [
        TerminalColors.bold("Extension Information:"),
        f"   Name: {manifest.name}",
        f"   Version: {manifest.version}",
        f"   Manifest: v{manifest.manifest_version}",
    ]
    if manifest.description:
        lines.append(f"   Description: {manifest.description}")
    return "\n".join(lines)


def format_success(outcome: ExtractionOutcome) -> str:
    lines = []
    if outcome.manifest is not None:
        lines.append(format_manifest_summary(outcome.manifest))
        lines.append("")
    lines.append(
        TerminalColors.success("Successfully extracted to: ")
        + TerminalColors.path(outcome.output_dir or "")
    )
    if outcome.crx_path is not None:
        lines.append(
            TerminalColors.info("Original CRX saved to: ")
            + TerminalColors.path(outcome.crx_path)
        )
    return "\n".join(lines)


def format_failure(outcome: ExtractionOutcome) -> str:
    """Render a failed outcome as ``<CODE>: <message>``."""
    error = outcome.error
    if error is None:
        return TerminalColors.error("Extraction failed")
    lines = [TerminalColors.failure(error.code, error.message)]
    if error.recovery_path is not None:
        lines.append(
            TerminalColors.warning("Recovery artifact: ")
            + TerminalColors.path(error.recovery_path)
        )
    return "\n".join(lines)
