"""Helpers that build raw iTunesDB records for tests."""

import struct

MHBD_HEADER_SIZE = 0x68
MHSD_HEADER_SIZE = 0x60
MHLT_HEADER_SIZE = 0x5C
MHLA_HEADER_SIZE = 0x5C
MHIT_HEADER_SIZE = 0x148
MHYP_HEADER_SIZE = 0x6C
MHIP_HEADER_SIZE = 0x4C
MHOD_HEADER_SIZE = 0x18

# Byte offsets inside an mhit, with their struct format
MHIT_FIELDS = {
    "filetype": (0x18, "<I"),
    "vbr": (0x1C, "<B"),
    "compilation": (0x1E, "<B"),
    "rating": (0x1F, "<B"),
    "last_modified": (0x20, "<I"),
    "size": (0x24, "<I"),
    "length": (0x28, "<I"),
    "track_number": (0x2C, "<I"),
    "total_tracks": (0x30, "<I"),
    "year": (0x34, "<I"),
    "bitrate": (0x38, "<I"),
    "sample_rate": (0x3C, "<I"),
    "volume": (0x40, "<i"),
    "start_time": (0x44, "<I"),
    "stop_time": (0x48, "<I"),
    "play_count": (0x50, "<I"),
    "last_played": (0x58, "<I"),
    "date_added": (0x68, "<I"),
    "bpm": (0x7A, "<H"),
    "artwork_size": (0x80, "<I"),
    "date_released": (0x8C, "<I"),
    "skip_count": (0x9C, "<I"),
    "last_skipped": (0xA0, "<I"),
    "has_artwork": (0xA4, "<B"),
    "has_lyrics": (0xB0, "<B"),
    "pregap": (0xB8, "<I"),
    "sample_count": (0xBC, "<Q"),
    "postgap": (0xC8, "<I"),
    "media_type": (0xD0, "<I"),
    "season_number": (0xD4, "<I"),
    "episode_number": (0xD8, "<I"),
    "gapless_track_flag": (0x100, "<H"),
    "crossfade_flag": (0x102, "<H"),
}


def build_mhbd(version: int = 0x13, language: bytes = b"en") -> bytes:
    data = bytearray(MHBD_HEADER_SIZE)
    data[0:4] = b"mhbd"
    struct.pack_into("<III", data, 4, MHBD_HEADER_SIZE, MHBD_HEADER_SIZE, 1)
    struct.pack_into("<I", data, 0x10, version)
    data[0x46:0x48] = language
    return bytes(data)


def build_mhsd(dataset_type: int) -> bytes:
    data = bytearray(MHSD_HEADER_SIZE)
    data[0:4] = b"mhsd"
    struct.pack_into("<III", data, 4, MHSD_HEADER_SIZE, MHSD_HEADER_SIZE, dataset_type)
    return bytes(data)


def build_mhlt(num_tracks: int) -> bytes:
    data = bytearray(MHLT_HEADER_SIZE)
    data[0:4] = b"mhlt"
    struct.pack_into("<II", data, 4, MHLT_HEADER_SIZE, num_tracks)
    return bytes(data)


def build_mhla(num_albums: int) -> bytes:
    data = bytearray(MHLA_HEADER_SIZE)
    data[0:4] = b"mhla"
    struct.pack_into("<II", data, 4, MHLA_HEADER_SIZE, num_albums)
    return bytes(data)


def build_mhit(
    size: int = 5_000_000,
    length: int = 180_000,
    media_type: int = 1,
    header_length: int = MHIT_HEADER_SIZE,
    **fields: int,
) -> bytes:
    """Build an mhit header; extra fields are named as in ``MHIT_FIELDS``.

    Fields that fall outside a shortened header are left out.
    """
    data = bytearray(header_length)
    data[0:4] = b"mhit"
    struct.pack_into("<II", data, 4, header_length, header_length)
    values = {"size": size, "length": length, "media_type": media_type, **fields}
    for name, value in values.items():
        offset, fmt = MHIT_FIELDS[name]
        if offset + struct.calcsize(fmt) > header_length:
            continue
        struct.pack_into(fmt, data, offset, value)
    return bytes(data)


def build_mhyp(is_master: bool = False, timestamp: int = 0, sort_order: int = 1) -> bytes:
    data = bytearray(MHYP_HEADER_SIZE)
    data[0:4] = b"mhyp"
    struct.pack_into("<II", data, 4, MHYP_HEADER_SIZE, MHYP_HEADER_SIZE)
    data[0x14] = 1 if is_master else 0
    struct.pack_into("<I", data, 0x18, timestamp)
    struct.pack_into("<I", data, 0x2C, sort_order)
    return bytes(data)


def build_mhip(track_id: int, timestamp: int = 0) -> bytes:
    data = bytearray(MHIP_HEADER_SIZE)
    data[0:4] = b"mhip"
    struct.pack_into("<II", data, 4, MHIP_HEADER_SIZE, MHIP_HEADER_SIZE)
    struct.pack_into("<II", data, 0x18, track_id, timestamp)
    return bytes(data)


def build_string_mhod(mhod_type: int, text: str) -> bytes:
    """Build a string MHOD with a UTF-16LE payload."""
    string_data = text.encode("utf-16-le")
    total = MHOD_HEADER_SIZE + 16 + len(string_data)
    header = b"mhod" + struct.pack("<IIIII", MHOD_HEADER_SIZE, total, mhod_type, 0, 0)
    sub_header = struct.pack("<IIII", 1, len(string_data), 1, 0)
    return header + sub_header + string_data


def build_url_mhod(mhod_type: int, url: str) -> bytes:
    """Build a podcast URL MHOD with a UTF-8 payload."""
    url_data = url.encode("utf-8")
    total = MHOD_HEADER_SIZE + len(url_data)
    header = b"mhod" + struct.pack("<IIIII", MHOD_HEADER_SIZE, total, mhod_type, 0, 0)
    return header + url_data


def build_raw_mhod(mhod_type: int, payload: bytes) -> bytes:
    """Build an MHOD whose payload is opaque bytes."""
    total = MHOD_HEADER_SIZE + len(payload)
    header = b"mhod" + struct.pack("<IIIII", MHOD_HEADER_SIZE, total, mhod_type, 0, 0)
    return header + payload
