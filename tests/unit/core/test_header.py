# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Unit tests for CRX header parsing."""

import struct

import pytest

from crx_extract.core.constants import CRX_VERSION_2, CRX_VERSION_3
from crx_extract.core.errors import ErrorKind, ExtractorError, FailureReason
from crx_extract.core.header import has_container_magic, parse_header
from crx_extract.core.types import ContainerVersion
from tests.helpers import build_crx2, build_crx3, make_extension_zip


class TestParseHeader:
    def test_v3_offset(self) -> None:
        payload = make_extension_zip()
        data = build_crx3(payload, header=b"x" * 100)

        header = parse_header(data)

        assert header.version == ContainerVersion.V3
        assert header.payload_offset == 12 + 100
        assert data[header.payload_offset :] == payload

    def test_v2_offset(self) -> None:
        payload = make_extension_zip()
        data = build_crx2(payload, public_key=b"k" * 10, signature=b"s" * 20)

        header = parse_header(data)

        assert header.version == ContainerVersion.V2
        assert header.payload_offset == 16 + 10 + 20
        assert data[header.payload_offset :] == payload

    def test_v3_with_empty_protobuf_header(self) -> None:
        data = build_crx3(b"PK\x03\x04", header=b"")

        assert parse_header(data).payload_offset == 12

    def test_bad_magic(self) -> None:
        data = b"PK\x03\x04" + struct.pack("<II", 3, 0) + b"payload"

        with pytest.raises(ExtractorError) as exc_info:
            parse_header(data)

        assert exc_info.value.reason == FailureReason.MALFORMED_INPUT
        assert exc_info.value.kind == ErrorKind.VALIDATION
        assert "Invalid CRX magic number" in exc_info.value.message

    @pytest.mark.parametrize("version", [0, 1, 4, 0xFFFFFFFF])
    def test_unsupported_version(self, version: int) -> None:
        data = b"Cr24" + struct.pack("<III", version, 0, 0) + b"payload"

        with pytest.raises(ExtractorError) as exc_info:
            parse_header(data)

        assert exc_info.value.reason == FailureReason.UNSUPPORTED_VERSION
        assert exc_info.value.kind == ErrorKind.VALIDATION

    def test_offset_at_end_of_buffer(self) -> None:
        data = b"Cr24" + struct.pack("<II", 3, 0)

        with pytest.raises(ExtractorError) as exc_info:
            parse_header(data)

        assert exc_info.value.reason == FailureReason.MALFORMED_INPUT
        assert "exceeds file size" in exc_info.value.message

    def test_offset_past_end_of_buffer(self) -> None:
        data = b"Cr24" + struct.pack("<II", 3, 0xFFFFFFFF) + b"short"

        with pytest.raises(ExtractorError) as exc_info:
            parse_header(data)

        assert exc_info.value.reason == FailureReason.MALFORMED_INPUT

    @pytest.mark.parametrize(
        "data",
        [
            b"",
            b"Cr2",
            b"Cr24",
            b"Cr24\x03\x00\x00\x00",
            b"Cr24\x02\x00\x00\x00\x05\x00\x00\x00",
        ],
    )
    def test_truncated_header(self, data: bytes) -> None:
        with pytest.raises(ExtractorError) as exc_info:
            parse_header(data)

        assert exc_info.value.reason == FailureReason.MALFORMED_INPUT


class TestHasContainerMagic:
    def test_valid(self) -> None:
        assert has_container_magic(build_crx3(b"PK"))

    @pytest.mark.parametrize("data", [b"", b"Cr24", b"<html></html>", b"PK\x03\x04xxxx"])
    def test_invalid(self, data: bytes) -> None:
        assert not has_container_magic(data)


class TestContainerVersion:
    def test_values_match_format_constants(self) -> None:
        assert ContainerVersion.V2 == CRX_VERSION_2
        assert ContainerVersion.V3 == CRX_VERSION_3
