"""Construct schemas for the iTunesDB records the scanner understands.

Each schema describes the fixed header of one record kind, starting at the
4-byte marker. Only the leading part of every header is declared: parsing
stops after the last field the decoders use, and that length doubles as the
stride the scanner advances by for fixed-layout records.

All integers are little-endian. Strings are UTF-16LE.
"""

from construct import (
    Bytes,
    Const,
    Int8ul,
    Int16ul,
    Int32sl,
    Int32ul,
    Int64ul,
    Padding,
    Struct,
)

# =============================================================================
# Constants
# =============================================================================

# Mac HFS+ epoch: seconds between 1904-01-01 and 1970-01-01
MAC_EPOCH_OFFSET = 2082844800

MARKER_SIZE = 4

DATABASE_MARKER = b"mhbd"
DATASET_MARKER = b"mhsd"
TRACK_LIST_MARKER = b"mhlt"
TRACK_ITEM_MARKER = b"mhit"
PLAYLIST_MARKER = b"mhyp"
PLAYLIST_ITEM_MARKER = b"mhip"
ALBUM_LIST_MARKER = b"mhla"
DATA_OBJECT_MARKER = b"mhod"

RECORD_KINDS: dict[bytes, str] = {
    DATABASE_MARKER: "database header",
    DATASET_MARKER: "dataset",
    TRACK_LIST_MARKER: "track list",
    TRACK_ITEM_MARKER: "track item",
    PLAYLIST_MARKER: "playlist",
    PLAYLIST_ITEM_MARKER: "playlist item",
    ALBUM_LIST_MARKER: "album list",
    DATA_OBJECT_MARKER: "data object",
}

# Offsets inside a string MHOD (relative to the record start)
MHOD_HEADER_SIZE = 0x18  # 24 bytes
MHOD_STRING_LENGTH_OFFSET = 0x1C
MHOD_STRING_DATA_OFFSET = 0x28

# Reported as the failing offset for zero-size tracks
MHIT_SIZE_OFFSET = 0x24

# =============================================================================
# MHBD (Database Header)
# =============================================================================

MhbdHeader = Struct(
    "identifier" / Const(DATABASE_MARKER),
    "header_length" / Int32ul,
    "total_length" / Int32ul,
    "unknown1" / Int32ul,
    "db_version" / Int32ul,  # 0x09 (iTunes 4.2) .. 0x19 (iTunes 7.4)
    "num_children" / Int32ul,
    "database_id" / Int64ul,
    "unknown2" / Int16ul,
    "unknown3" / Int32ul,
    "unknown4" / Int64ul,
    "unknown5" / Bytes(24),
    "language" / Bytes(2),  # e.g. "en"
)

# =============================================================================
# MHSD (Dataset)
# =============================================================================

MhsdHeader = Struct(
    "identifier" / Const(DATASET_MARKER),
    "header_length" / Int32ul,
    "total_length" / Int32ul,
    "type" / Int32ul,  # 1=tracks, 2=playlists, 3=podcasts, 4=albums
)

# =============================================================================
# MHLT (Track List) / MHLA (Album List)
# =============================================================================

MhltHeader = Struct(
    "identifier" / Const(TRACK_LIST_MARKER),
    "header_length" / Int32ul,
    "num_tracks" / Int32ul,  # NOT total_length!
)

MhlaHeader = Struct(
    "identifier" / Const(ALBUM_LIST_MARKER),
    "header_length" / Int32ul,
    "num_albums" / Int32ul,
)

# =============================================================================
# MHIT (Track Item)
# =============================================================================

MhitHeader = Struct(
    "identifier" / Const(TRACK_ITEM_MARKER),
    "header_length" / Int32ul,
    "total_length" / Int32ul,
    "num_mhods" / Int32ul,
    "unique_id" / Int32ul,
    "visible" / Int32ul,
    "filetype" / Int32ul,  # Reversed ASCII: "MP3 " is stored as b" 3PM"
    "vbr" / Int8ul,  # 0x00=CBR, 0x01=VBR
    "type2" / Int8ul,
    "compilation" / Int8ul,
    "rating" / Int8ul,  # stars * 20
    "last_modified" / Int32ul,  # Mac timestamp
    "size" / Int32ul,  # File size in bytes
    "length" / Int32ul,  # Duration in milliseconds
    "track_number" / Int32ul,
    "total_tracks" / Int32ul,
    "year" / Int32ul,
    "bitrate" / Int32ul,
    "sample_rate" / Int32ul,  # sample_rate * 0x10000
    "volume" / Int32sl,  # Signed: -255 to 255
    "start_time" / Int32ul,  # ms
    "stop_time" / Int32ul,  # ms
    "soundcheck" / Int32ul,
    "play_count" / Int32ul,
    "play_count2" / Int32ul,
    "last_played" / Int32ul,  # Mac timestamp
    "disc_number" / Int32ul,
    "total_discs" / Int32ul,
    "user_id" / Int32ul,  # DRM user ID
    "date_added" / Int32ul,  # Mac timestamp
    "bookmark_time" / Int32ul,
    "dbid" / Int64ul,
    "checked" / Int8ul,
    "app_rating" / Int8ul,
    "bpm" / Int16ul,
    "artwork_count" / Int16ul,
    "unknown9" / Int16ul,
    "artwork_size" / Int32ul,
    "unknown11" / Int32ul,
    "sample_rate_float" / Int32ul,
    "date_released" / Int32ul,  # Mac timestamp
    Padding(12),
    "skip_count" / Int32ul,
    "last_skipped" / Int32ul,  # Mac timestamp
    "has_artwork" / Int8ul,  # 0x01=yes, 0x02=no
    "skip_when_shuffling" / Int8ul,
    "remember_position" / Int8ul,
    "podcast_flag" / Int8ul,
    "dbid2" / Int64ul,
    "has_lyrics" / Int8ul,
    "is_movie" / Int8ul,
    "played_mark" / Int8ul,
    "unknown17" / Int8ul,
    "unknown21" / Int32ul,
    "pregap" / Int32ul,  # Gapless: leading silent samples
    "sample_count" / Int64ul,  # Gapless: total samples
    "unknown25" / Int32ul,
    "postgap" / Int32ul,  # Gapless: trailing silent samples
    "unknown27" / Int32ul,
    "media_type" / Int32ul,
    "season_number" / Int32ul,
    "episode_number" / Int32ul,
    Padding(28),
    "gapless_data" / Int32ul,
    "unknown38" / Int32ul,
    "gapless_track_flag" / Int16ul,
    "crossfade_flag" / Int16ul,
)

# =============================================================================
# MHYP (Playlist) / MHIP (Playlist Item)
# =============================================================================

MhypHeader = Struct(
    "identifier" / Const(PLAYLIST_MARKER),
    "header_length" / Int32ul,
    "total_length" / Int32ul,
    "num_mhods" / Int32ul,
    "num_mhips" / Int32ul,
    "is_master" / Int8ul,  # 1 = Library playlist
    "unknown_flags" / Bytes(3),
    "timestamp" / Int32ul,  # Mac timestamp
    "playlist_id" / Int64ul,
    "unknown3" / Int32ul,
    "string_mhod_count" / Int16ul,
    "podcast_flag" / Int16ul,
    "sort_order" / Int32ul,
)

MhipHeader = Struct(
    "identifier" / Const(PLAYLIST_ITEM_MARKER),
    "header_length" / Int32ul,
    "total_length" / Int32ul,
    "num_mhods" / Int32ul,
    "podcast_group_flag" / Int16ul,
    "unknown4" / Int8ul,
    "unknown5" / Int8ul,
    "group_id" / Int32ul,
    "track_id" / Int32ul,  # Reference to mhit.unique_id
    "timestamp" / Int32ul,  # Mac timestamp
)

# =============================================================================
# MHOD (Data Object)
# =============================================================================

MhodHeader = Struct(
    "identifier" / Const(DATA_OBJECT_MARKER),
    "header_length" / Int32ul,
    "total_length" / Int32ul,
    "type" / Int16ul,
    Padding(2),
    "unknown1" / Int32ul,
    "unknown2" / Int32ul,
)

# =============================================================================
# Lookup tables
# =============================================================================

ITUNES_VERSIONS: dict[int, str] = {
    0x09: "iTunes 4.2",
    0x0A: "iTunes 4.5",
    0x0B: "iTunes 4.7",
    0x0C: "iTunes 4.71/4.8",
    0x0D: "iTunes 4.9",
    0x0E: "iTunes 5",
    0x0F: "iTunes 6",
    0x10: "iTunes 6.0.1",
    0x11: "iTunes 6.0.2-6.0.4",
    0x12: "iTunes 6.0.5",
    0x13: "iTunes 7.0",
    0x14: "iTunes 7.1",
    0x15: "iTunes 7.2",
    0x17: "iTunes 7.3.0",
    0x18: "iTunes 7.3.1-7.3.2",
    0x19: "iTunes 7.4",
}

DATASET_TYPES: dict[int, str] = {
    1: "Track list",
    2: "Playlist list",
    3: "Podcast list",
    4: "Album list",
    5: "Smart playlist list",
}

# Raw sample-rate field (Hz shifted left by 16) -> Hz
SAMPLE_RATES: dict[int, int] = {
    rate << 16: rate
    for rate in (8000, 11025, 12000, 16000, 22050, 24000, 32000, 44100, 48000)
}


def itunes_version_label(version: int) -> str:
    """Return the iTunes release that writes a given database version."""
    return ITUNES_VERSIONS.get(version, f"Unknown version (0x{version:X})")


def dataset_type_label(dataset_type: int) -> str:
    """Return a readable name for an mhsd type code."""
    return DATASET_TYPES.get(dataset_type, f"Unknown dataset ({dataset_type})")


def sample_rate_to_hz(raw: int) -> int:
    """Convert the raw 16.16 fixed-point sample rate field to Hz."""
    return SAMPLE_RATES.get(raw, raw >> 16)
