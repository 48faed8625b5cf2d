# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Bounds-checked little-endian integer reads over byte buffers."""

import struct

from crx_extract.core.errors import ExtractorError, FailureReason

_U32_LE = struct.Struct("<I")


def read_u32_le(buffer: bytes, offset: int) -> int:
    """Read an unsigned 32-bit little-endian integer at ``offset``.

    Args:
        buffer: Buffer to read from.
        offset: Byte position of the first byte.

    Returns:
        The decoded integer.

    Raises:
        ExtractorError: MALFORMED_INPUT if fewer than 4 bytes remain.
    """
    if offset < 0 or offset + _U32_LE.size > len(buffer):
        raise ExtractorError(
            FailureReason.MALFORMED_INPUT,
            "Buffer underrun while reading UInt32LE",
        )
    return int(_U32_LE.unpack_from(buffer, offset)[0])


class ByteReader:
    """Cursor over a loaded buffer that advances on every read."""

    def __init__(self, buffer: bytes | None = None) -> None:
        self._buffer = buffer
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    def load(self, buffer: bytes) -> None:
        """Load a new buffer and rewind the cursor."""
        self._buffer = buffer
        self._offset = 0

    def seek(self, offset: int) -> None:
        self._offset = offset

    def read_u32_le(self) -> int:
        """Read the next u32 and advance by four bytes.

        Raises:
            ExtractorError: INTERNAL_STATE if no buffer is loaded,
                MALFORMED_INPUT on underrun.
        """
        if self._buffer is None:
            raise ExtractorError(
                FailureReason.INTERNAL_STATE, "Buffer not initialized"
            )
        value = read_u32_le(self._buffer, self._offset)
        self._offset += _U32_LE.size
        return value
