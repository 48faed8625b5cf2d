# -*- coding: utf-8 -*-

"""Utility modules for crx-extract."""

from crx_extract.utils.byte_reader import ByteReader, read_u32_le
from crx_extract.utils.terminal import TerminalColors

__all__ = [
    "ByteReader",
    "TerminalColors",
    "read_u32_le",
]
