"""Tests for the primitive field readers."""

import struct
from datetime import UTC, datetime

import pytest

from podsift.db.atoms import MAC_EPOCH_OFFSET, MhsdHeader
from podsift.db.codec import (
    decode_string,
    mac_to_datetime,
    read_bytes,
    read_mac_timestamp,
    read_struct,
    read_uint,
    read_utf8_string,
    read_utf16_string,
)
from podsift.db.errors import InvalidEncodingError, OutOfBoundsError


class TestTimestampConversion:
    """Tests for Mac HFS+ timestamp conversion."""

    def test_mac_to_datetime_zero(self) -> None:
        """Test converting zero timestamp."""
        assert mac_to_datetime(0) == datetime(1904, 1, 1, tzinfo=UTC)

    def test_mac_to_datetime_unix_epoch(self) -> None:
        """Test converting Mac timestamp for Unix epoch."""
        assert mac_to_datetime(MAC_EPOCH_OFFSET) == datetime(1970, 1, 1, tzinfo=UTC)

    def test_mac_to_datetime_2008(self) -> None:
        """Test a timestamp in the iTunes 7 era."""
        timestamp = MAC_EPOCH_OFFSET + 1_220_918_400
        assert mac_to_datetime(timestamp) == datetime(2008, 9, 9, tzinfo=UTC)


class TestReadUint:
    """Tests for fixed-width unsigned reads."""

    @pytest.mark.parametrize(
        ("width", "fmt", "value"),
        [
            (1, "<B", 0xAB),
            (2, "<H", 0xBEEF),
            (4, "<I", 0xDEADBEEF),
            (8, "<Q", 0x0123456789ABCDEF),
        ],
    )
    def test_read_each_width(self, width: int, fmt: str, value: int) -> None:
        """Test that every supported width decodes little-endian."""
        buffer = b"\xff" + struct.pack(fmt, value) + b"\xff"
        assert read_uint(buffer, 1, width) == value

    def test_read_maximum_values(self) -> None:
        """Test all-ones values stay unsigned."""
        assert read_uint(b"\xff" * 8, 0, 4) == 0xFFFFFFFF
        assert read_uint(b"\xff" * 8, 0, 8) == 2**64 - 1

    def test_read_at_exact_end(self) -> None:
        """Test a read ending exactly at the buffer end."""
        assert read_uint(b"\x00\x00\x01\x00", 2, 2) == 1

    def test_read_past_end(self) -> None:
        """Test a read running past the end fails."""
        with pytest.raises(OutOfBoundsError) as excinfo:
            read_uint(b"\x00\x00\x00", 0, 4)
        assert excinfo.value.offset == 0

    def test_negative_offset(self) -> None:
        """Test negative offsets are rejected rather than wrapping."""
        with pytest.raises(OutOfBoundsError):
            read_uint(b"\x00" * 8, -2, 2)

    def test_unsupported_width(self) -> None:
        """Test widths other than 1, 2, 4, 8."""
        with pytest.raises(ValueError):
            read_uint(b"\x00" * 8, 0, 3)


class TestReadBytes:
    """Tests for raw byte reads."""

    def test_returns_copy(self) -> None:
        """Test that the slice is an independent bytes object."""
        buffer = bytearray(b"abcdef")
        result = read_bytes(buffer, 1, 3)
        buffer[1] = ord("z")
        assert result == b"bcd"

    def test_zero_length(self) -> None:
        """Test empty reads at the end are allowed."""
        assert read_bytes(b"abc", 3, 0) == b""

    def test_past_end(self) -> None:
        """Test reads beyond the buffer fail."""
        with pytest.raises(OutOfBoundsError):
            read_bytes(b"abc", 2, 2)


class TestReadMacTimestamp:
    """Tests for Mac timestamp fields."""

    def test_converts_value(self) -> None:
        """Test a real timestamp."""
        buffer = struct.pack("<I", MAC_EPOCH_OFFSET + 86400)
        assert read_mac_timestamp(buffer, 0) == datetime(1970, 1, 2, tzinfo=UTC)

    def test_optional_zero_is_none(self) -> None:
        """Test that zero means unset for optional fields."""
        assert read_mac_timestamp(b"\x00" * 4, 0, optional=True) is None

    def test_required_zero_is_converted(self) -> None:
        """Test that zero is converted when unset is not distinguished."""
        assert read_mac_timestamp(b"\x00" * 4, 0) == datetime(1904, 1, 1, tzinfo=UTC)

    def test_truncated(self) -> None:
        """Test a truncated timestamp fails."""
        with pytest.raises(OutOfBoundsError):
            read_mac_timestamp(b"\x00\x00", 0)


class TestReadStrings:
    """Tests for UTF-16 and UTF-8 payloads."""

    def test_utf16(self) -> None:
        """Test decoding a UTF-16LE payload."""
        data = "Björk ♪".encode("utf-16-le")
        assert read_utf16_string(b"xx" + data, 2, len(data)) == "Björk ♪"

    def test_utf16_surrogate_pair(self) -> None:
        """Test characters outside the BMP."""
        data = "🎵".encode("utf-16-le")
        assert len(data) == 4
        assert read_utf16_string(data, 0, 4) == "🎵"

    def test_utf16_empty(self) -> None:
        """Test a zero-length string."""
        assert read_utf16_string(b"", 0, 0) == ""

    def test_utf16_unpaired_surrogate(self) -> None:
        """Test a lone high surrogate is rejected."""
        data = b"\x00\xd8A\x00"
        with pytest.raises(InvalidEncodingError):
            read_utf16_string(data, 0, len(data))

    def test_utf16_lone_low_surrogate(self) -> None:
        """Test a lone low surrogate is rejected."""
        with pytest.raises(InvalidEncodingError):
            read_utf16_string(b"\x00\xdc", 0, 2)

    def test_utf16_odd_length(self) -> None:
        """Test a truncated code unit is rejected."""
        with pytest.raises(InvalidEncodingError):
            read_utf16_string(b"A\x00B", 0, 3)

    def test_utf16_past_end(self) -> None:
        """Test a declared length beyond the buffer."""
        with pytest.raises(OutOfBoundsError):
            read_utf16_string(b"A\x00", 0, 4)

    def test_utf8(self) -> None:
        """Test decoding a URL payload."""
        url = "http://example.com/feed.xml"
        assert read_utf8_string(url.encode(), 0, len(url)) == url

    def test_utf8_malformed(self) -> None:
        """Test invalid UTF-8 is rejected."""
        with pytest.raises(InvalidEncodingError):
            read_utf8_string(b"\xff\xfe", 0, 2)

    def test_decode_string_no_bom(self) -> None:
        """Test mhod strings are decoded without a BOM."""
        assert decode_string(b"a\x00b\x00") == "ab"


class TestReadStruct:
    """Tests for fixed-size record headers."""

    def test_parses_header(self) -> None:
        """Test parsing an mhsd header at an offset."""
        buffer = b"\x00\x00" + b"mhsd" + struct.pack("<III", 0x60, 0x60, 3)
        header = read_struct(MhsdHeader, buffer, 2)
        assert header.type == 3

    def test_truncated_header(self) -> None:
        """Test a header cut short by the buffer end."""
        buffer = b"mhsd" + struct.pack("<II", 0x60, 0x60)
        with pytest.raises(OutOfBoundsError):
            read_struct(MhsdHeader, buffer, 0)
