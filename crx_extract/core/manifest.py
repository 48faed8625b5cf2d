# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt
"""Minimal structural validation of extension manifests.

Only the fields needed to report an extension's identity are checked:
``name``, ``version`` and ``manifest_version`` are required, while
``description``, ``permissions`` and ``host_permissions`` are type-checked
when present. Permission semantics, icons and every other key are left
alone and passed through in ``ExtensionManifest.raw``.
"""

import json
import logging
from pathlib import Path
from typing import Any

from crx_extract.core.constants import MANIFEST_FILENAME
from crx_extract.core.errors import ExtractorError, FailureReason
from crx_extract.core.types import ExtensionManifest

logger = logging.getLogger(__name__)

_OPTIONAL_STRING_ARRAYS = ("permissions", "host_permissions")


def _invalid(field: str, message: str) -> ExtractorError:
    return ExtractorError(FailureReason.INVALID_MANIFEST, message, field=field)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_manifest(data: Any) -> ExtensionManifest:
    """Validate parsed manifest data.

    Args:
        data: The decoded manifest.json document.

    Returns:
        The validated manifest.

    Raises:
        ExtractorError: INVALID_MANIFEST with ``field`` naming the first
            missing or malformed field.
    """
    if not isinstance(data, dict):
        raise _invalid("<root>", "Manifest must be an object")

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise _invalid("name", 'Manifest missing required "name" field')

    version = data.get("version")
    if not isinstance(version, str) or not version:
        raise _invalid("version", 'Manifest missing required "version" field')

    manifest_version = data.get("manifest_version")
    if not _is_number(manifest_version):
        raise _invalid(
            "manifest_version", 'Manifest missing required "manifest_version" field'
        )

    description = data.get("description")
    if "description" in data and not isinstance(description, str):
        raise _invalid("description", 'Manifest "description" must be a string')

    arrays: dict[str, tuple[str, ...] | None] = {}
    for key in _OPTIONAL_STRING_ARRAYS:
        if key not in data:
            arrays[key] = None
            continue
        value = data[key]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise _invalid(key, f'Manifest "{key}" must be an array of strings')
        arrays[key] = tuple(value)

    return ExtensionManifest(
        name=name,
        version=version,
        manifest_version=manifest_version,
        description=description,
        permissions=arrays["permissions"],
        host_permissions=arrays["host_permissions"],
        raw=dict(data),
    )


def read_manifest(directory: Path) -> ExtensionManifest | None:
    """Read and validate ``manifest.json`` from an extracted extension.

    A missing or invalid manifest never fails an extraction; it is logged as
    a warning and None is returned.
    """
    manifest_path = directory / MANIFEST_FILENAME
    if not manifest_path.is_file():
        logger.warning(f"{MANIFEST_FILENAME} not found")
        return None

    try:
        # Chrome tolerates a UTF-8 BOM in manifest.json
        data = json.loads(manifest_path.read_text(encoding="utf-8-sig"))
        manifest = validate_manifest(data)
    except (OSError, ValueError, RecursionError) as e:
        logger.warning(f"Failed to parse manifest: {e}")
        return None
    except ExtractorError as e:
        logger.warning(f"Invalid manifest ({e.field}): {e.message}")
        return None

    logger.debug(
        f"Manifest validated: name={manifest.name}, version={manifest.version}, "
        f"manifest_version={manifest.manifest_version}"
    )
    return manifest
