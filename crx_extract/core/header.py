# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""CRX container header parsing.

Layout (all integers u32 little-endian)::

    magic "Cr24" | version | v2: public key length, signature length
                           | v3: header size
    ... followed by the ZIP payload at the computed offset.
"""

import logging

from crx_extract.core.constants import CRX_MAGIC, CRX_MAGIC_BYTES, CRX_MIN_LENGTH
from crx_extract.core.errors import ExtractorError, FailureReason
from crx_extract.core.types import ContainerHeader, ContainerVersion
from crx_extract.utils.byte_reader import ByteReader

logger = logging.getLogger(__name__)


def has_container_magic(buffer: bytes) -> bool:
    """Check whether a buffer starts with the CRX magic and a version word."""
    if len(buffer) < CRX_MIN_LENGTH:
        return False
    return buffer[: len(CRX_MAGIC_BYTES)] == CRX_MAGIC_BYTES


def parse_header(buffer: bytes) -> ContainerHeader:
    """Parse a CRX header and locate the embedded archive payload.

    Args:
        buffer: The complete container file.

    Returns:
        The parsed header.

    Raises:
        ExtractorError: MALFORMED_INPUT for a bad magic, a truncated header or
            an offset past the end of the buffer; UNSUPPORTED_VERSION for any
            version other than 2 or 3.
    """
    reader = ByteReader(buffer)

    magic = reader.read_u32_le()
    if magic != CRX_MAGIC:
        raise ExtractorError(
            FailureReason.MALFORMED_INPUT,
            f"Invalid CRX magic number: 0x{magic:x}",
        )

    raw_version = reader.read_u32_le()
    if raw_version == ContainerVersion.V2:
        public_key_length = reader.read_u32_le()
        signature_length = reader.read_u32_le()
        payload_offset = reader.offset + public_key_length + signature_length
    elif raw_version == ContainerVersion.V3:
        header_size = reader.read_u32_le()
        payload_offset = reader.offset + header_size
    else:
        raise ExtractorError(
            FailureReason.UNSUPPORTED_VERSION,
            f"Unsupported CRX version: {raw_version}",
        )

    if payload_offset >= len(buffer):
        raise ExtractorError(
            FailureReason.MALFORMED_INPUT,
            "Invalid CRX header: ZIP offset exceeds file size",
        )

    header = ContainerHeader(
        version=ContainerVersion(raw_version), payload_offset=payload_offset
    )
    logger.debug(f"CRX header parsed: version={raw_version}, offset={payload_offset}")
    return header
