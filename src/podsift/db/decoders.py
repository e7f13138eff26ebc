"""Decoders for individual iTunesDB records.

Each decoder receives a ``RawRecord`` (marker, start offset, buffer), reads
the fields it needs at fixed offsets from the record start, and returns the
decoded record together with the stride the scanner should advance by.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from .atoms import (
    ALBUM_LIST_MARKER,
    DATA_OBJECT_MARKER,
    DATABASE_MARKER,
    DATASET_MARKER,
    MARKER_SIZE,
    MHIT_SIZE_OFFSET,
    MHOD_HEADER_SIZE,
    MHOD_STRING_DATA_OFFSET,
    MHOD_STRING_LENGTH_OFFSET,
    PLAYLIST_ITEM_MARKER,
    PLAYLIST_MARKER,
    TRACK_ITEM_MARKER,
    TRACK_LIST_MARKER,
    MhbdHeader,
    MhipHeader,
    MhitHeader,
    MhlaHeader,
    MhltHeader,
    MhodHeader,
    MhsdHeader,
    MhypHeader,
    dataset_type_label,
    itunes_version_label,
    sample_rate_to_hz,
)
from .codec import (
    mac_to_datetime,
    read_bytes,
    read_struct,
    read_uint,
    read_utf8_string,
    read_utf16_string,
)
from .errors import InvalidTrackError
from .models import (
    STRING_MHOD_TYPES,
    URL_MHOD_TYPES,
    AlbumList,
    DatabaseHeader,
    DataObject,
    Dataset,
    FileType,
    MediaContext,
    Playlist,
    PlaylistItem,
    RawRecord,
    Record,
    TrackItem,
    TrackList,
)

logger = logging.getLogger(__name__)

Decoder = Callable[[RawRecord], tuple[Record, int]]


def _optional_timestamp(raw: int) -> datetime | None:
    return mac_to_datetime(raw) if raw else None


def decode_file_extension(raw: int) -> str:
    """Map the reversed-ASCII file type code to an extension.

    Returns "" when the field is zero (firmware for 1st-4th gen iPods never
    writes it).
    """
    if raw == 0:
        return ""
    try:
        return FileType(raw).extension
    except ValueError:
        text = raw.to_bytes(4, "big").decode("ascii", errors="replace")
        return text.strip().lower()


# =============================================================================
# Container records
# =============================================================================


def decode_database_header(record: RawRecord) -> tuple[DatabaseHeader, int]:
    """Decode an ``mhbd`` record: format version and language."""
    header = read_struct(MhbdHeader, record.buffer, record.start_offset)
    language = header.language.decode("ascii", errors="replace").rstrip("\x00")
    logger.info(
        "Database uses language %r and was written by %s (version 0x%X)",
        language,
        itunes_version_label(header.db_version),
        header.db_version,
    )
    decoded = DatabaseHeader(
        offset=record.start_offset,
        version=header.db_version,
        language=language,
        database_id=header.database_id,
    )
    return decoded, MhbdHeader.sizeof()


def decode_dataset(record: RawRecord) -> tuple[Dataset, int]:
    """Decode an ``mhsd`` record: the dataset type code."""
    header = read_struct(MhsdHeader, record.buffer, record.start_offset)
    logger.debug("Dataset at 0x%X: %s", record.start_offset, dataset_type_label(header.type))
    return Dataset(offset=record.start_offset, dataset_type=header.type), MhsdHeader.sizeof()


def decode_track_list(record: RawRecord) -> tuple[TrackList, int]:
    """Decode an ``mhlt`` record: number of tracks."""
    header = read_struct(MhltHeader, record.buffer, record.start_offset)
    logger.info("%d songs in tracklist", header.num_tracks)
    return TrackList(offset=record.start_offset, num_tracks=header.num_tracks), MhltHeader.sizeof()


def decode_album_list(record: RawRecord) -> tuple[AlbumList, int]:
    """Decode an ``mhla`` record: number of album items."""
    header = read_struct(MhlaHeader, record.buffer, record.start_offset)
    logger.debug("%d items in album list", header.num_albums)
    return AlbumList(offset=record.start_offset, num_albums=header.num_albums), MhlaHeader.sizeof()


# =============================================================================
# Track item
# =============================================================================


def decode_track_item(record: RawRecord) -> tuple[TrackItem, int]:
    """Decode an ``mhit`` record.

    Only numeric fields live here; titles, artists and file locations follow
    as separate data objects and are routed using the context set by this
    record.

    Raises:
        InvalidTrackError: If a song-like track declares a zero-byte file.
    """
    base = record.start_offset
    header_length = read_uint(record.buffer, base + 4, 4)
    if MARKER_SIZE < header_length < MhitHeader.sizeof():
        # Older databases write shorter headers; missing fields read as zero
        data = read_bytes(record.buffer, base, header_length)
        header = MhitHeader.parse(data.ljust(MhitHeader.sizeof(), b"\x00"))
        stride = header_length
    else:
        header = read_struct(MhitHeader, record.buffer, base)
        stride = MhitHeader.sizeof()
    context = MediaContext.from_media_type(header.media_type)

    if context is MediaContext.SONG_LIKE and header.size == 0:
        raise InvalidTrackError(
            "Track must have non-zero file size",
            offset=base + MHIT_SIZE_OFFSET,
            record_kind="track item",
            record_offset=base,
        )

    gapless = header.gapless_track_flag == 1
    has_artwork = header.has_artwork == 1

    track = TrackItem(
        offset=base,
        media_type=header.media_type,
        context=context,
        size_bytes=header.size,
        duration_ms=header.length,
        file_extension=decode_file_extension(header.filetype),
        vbr=header.vbr == 1,
        bitrate_kbps=header.bitrate,
        sample_rate_hz=sample_rate_to_hz(header.sample_rate),
        volume=header.volume,
        bpm=header.bpm,
        start_time_ms=header.start_time,
        stop_time_ms=header.stop_time,
        track_number=header.track_number,
        total_tracks=header.total_tracks,
        disc_number=header.disc_number,
        total_discs=header.total_discs,
        play_count=header.play_count,
        skip_count=header.skip_count,
        last_played=_optional_timestamp(header.last_played),
        last_skipped=_optional_timestamp(header.last_skipped),
        skip_when_shuffling=bool(header.skip_when_shuffling),
        compilation=bool(header.compilation),
        has_lyrics=bool(header.has_lyrics),
        is_movie=header.is_movie == 1,
        rating_raw=header.rating,
        gapless=gapless,
        leading_silence_samples=header.pregap if gapless else None,
        trailing_silence_samples=header.postgap if gapless else None,
        sample_count=header.sample_count if gapless else None,
        crossfade=header.crossfade_flag == 1,
        has_artwork=has_artwork,
        artwork_size=header.artwork_size if has_artwork else None,
        year=header.year,
        season_number=header.season_number,
        episode_number=header.episode_number,
        user_id=header.user_id,
        added=_optional_timestamp(header.date_added),
        added_raw=header.date_added,
        modified=mac_to_datetime(header.last_modified),
        published=mac_to_datetime(header.date_released),
    )

    if context is MediaContext.TELEVISION:
        logger.debug(
            "Track item at 0x%X: season %d episode %d",
            base,
            track.season_number,
            track.episode_number,
        )
    else:
        logger.debug(
            "Track item at 0x%X: %s, %d bytes, %d ms, %d kbps (%s) ~ %d Hz",
            base,
            context.value,
            track.size_bytes,
            track.duration_ms,
            track.bitrate_kbps,
            "VBR" if track.vbr else "CBR",
            track.sample_rate_hz,
        )

    return track, stride


# =============================================================================
# Playlists
# =============================================================================


def decode_playlist(record: RawRecord) -> tuple[Playlist, int]:
    """Decode an ``mhyp`` record."""
    header = read_struct(MhypHeader, record.buffer, record.start_offset)
    playlist = Playlist(
        offset=record.start_offset,
        is_master=header.is_master == 1,
        is_podcast=bool(header.podcast_flag),
        created=mac_to_datetime(header.timestamp),
        sort_order=header.sort_order,
    )
    logger.debug(
        "%s at 0x%X created %s | %s",
        "Master playlist" if playlist.is_master else "Playlist",
        record.start_offset,
        playlist.created.isoformat(),
        playlist.sort_order_label,
    )
    return playlist, MhypHeader.sizeof()


def decode_playlist_item(record: RawRecord) -> tuple[PlaylistItem, int]:
    """Decode an ``mhip`` record."""
    header = read_struct(MhipHeader, record.buffer, record.start_offset)
    item = PlaylistItem(
        offset=record.start_offset,
        track_id=header.track_id,
        added=mac_to_datetime(header.timestamp),
    )
    return item, MhipHeader.sizeof()


# =============================================================================
# Data objects
# =============================================================================


def decode_data_object(record: RawRecord) -> tuple[DataObject, int]:
    """Decode an ``mhod`` record.

    String types carry a length at 0x1C and a UTF-16LE payload at 0x28.
    Podcast URL types carry UTF-8 bytes from the end of the common header up
    to the declared total length. Other types are skipped without decoding.
    The stride is the declared total length, or the common header size when
    the declared length is implausibly small.
    """
    base = record.start_offset
    buffer = record.buffer
    header = read_struct(MhodHeader, buffer, base)
    type_code = header.type
    value: str | None = None

    if type_code in STRING_MHOD_TYPES:
        string_length = read_uint(buffer, base + MHOD_STRING_LENGTH_OFFSET, 4)
        value = read_utf16_string(buffer, base + MHOD_STRING_DATA_OFFSET, string_length)
    elif type_code in URL_MHOD_TYPES:
        url_length = max(header.total_length - MHOD_HEADER_SIZE, 0)
        value = read_utf8_string(buffer, base + MHOD_HEADER_SIZE, url_length)
        logger.debug("Podcast URL data object at 0x%X: %s", base, value)

    stride = header.total_length if header.total_length >= MHOD_HEADER_SIZE else MHOD_HEADER_SIZE
    data_object = DataObject(
        offset=base, type_code=type_code, total_length=header.total_length, value=value
    )
    return data_object, stride


DECODERS: dict[bytes, Decoder] = {
    DATABASE_MARKER: decode_database_header,
    DATASET_MARKER: decode_dataset,
    TRACK_LIST_MARKER: decode_track_list,
    TRACK_ITEM_MARKER: decode_track_item,
    PLAYLIST_MARKER: decode_playlist,
    PLAYLIST_ITEM_MARKER: decode_playlist_item,
    ALBUM_LIST_MARKER: decode_album_list,
    DATA_OBJECT_MARKER: decode_data_object,
}
