# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt
"""Terminal output components for the CLI."""

from crx_extract.cli.ui.summary import (
    format_failure,
    format_manifest_summary,
    format_success,
)

__all__ = [
    "format_failure",
    "format_manifest_summary",
    "format_success",
]
