"""Primitive readers for little-endian fields inside an in-memory buffer.

Every reader checks its bounds before touching the buffer and raises
``OutOfBoundsError`` instead of returning short data.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from construct import Int8ul, Int16ul, Int32ul, Int64ul, Struct

from .atoms import MAC_EPOCH_OFFSET
from .errors import InvalidEncodingError, OutOfBoundsError

_UNSIGNED = {1: Int8ul, 2: Int16ul, 4: Int32ul, 8: Int64ul}

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


# =============================================================================
# Timestamp conversion
# =============================================================================


def mac_to_datetime(timestamp: int) -> datetime:
    """Convert a Mac HFS+ timestamp to an aware UTC datetime."""
    return _UNIX_EPOCH + timedelta(seconds=timestamp - MAC_EPOCH_OFFSET)


# =============================================================================
# Binary reading helpers
# =============================================================================


def _check_bounds(buffer: bytes, offset: int, length: int) -> None:
    if offset < 0 or length < 0 or offset + length > len(buffer):
        raise OutOfBoundsError(
            f"Read of {length} bytes past end of {len(buffer)}-byte buffer",
            offset=offset,
        )


def read_uint(buffer: bytes, offset: int, width: int) -> int:
    """Read a little-endian unsigned integer of 1, 2, 4 or 8 bytes."""
    if width not in _UNSIGNED:
        raise ValueError(f"Unsupported integer width: {width}")
    _check_bounds(buffer, offset, width)
    return _UNSIGNED[width].parse(buffer[offset : offset + width])


def read_bytes(buffer: bytes, offset: int, length: int) -> bytes:
    """Read ``length`` bytes as an independent copy."""
    _check_bounds(buffer, offset, length)
    return bytes(buffer[offset : offset + length])


def read_mac_timestamp(buffer: bytes, offset: int, *, optional: bool = False) -> datetime | None:
    """Read a 4-byte Mac timestamp.

    With ``optional=True`` a raw value of 0 means "never" and returns None;
    otherwise every value, 0 included, is converted.
    """
    raw = read_uint(buffer, offset, 4)
    if optional and raw == 0:
        return None
    return mac_to_datetime(raw)


def read_utf16_string(buffer: bytes, offset: int, byte_length: int) -> str:
    """Decode a UTF-16LE string (no BOM, no terminator)."""
    data = read_bytes(buffer, offset, byte_length)
    if byte_length % 2:
        raise InvalidEncodingError(
            f"UTF-16 payload has odd length {byte_length}", offset=offset
        )
    try:
        return decode_string(data)
    except UnicodeDecodeError as e:
        raise InvalidEncodingError(
            f"Malformed UTF-16 payload ({e.reason})", offset=offset + e.start
        ) from e


def read_utf8_string(buffer: bytes, offset: int, byte_length: int) -> str:
    """Decode a UTF-8 payload, as used by podcast URL data objects."""
    data = read_bytes(buffer, offset, byte_length)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidEncodingError(
            f"Malformed UTF-8 payload ({e.reason})", offset=offset + e.start
        ) from e


def read_struct(layout: Struct, buffer: bytes, offset: int) -> Any:
    """Parse a fixed-size record header starting at ``offset``."""
    _check_bounds(buffer, offset, layout.sizeof())
    return layout.parse(buffer[offset : offset + layout.sizeof()])


# =============================================================================
# String decoding
# =============================================================================


def decode_string(data: bytes) -> str:
    """Decode a UTF-16LE string from an iTunesDB mhod."""
    return data.decode("utf-16-le")
