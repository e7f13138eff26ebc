"""End-to-end tests for decoding whole databases."""

import tempfile
from pathlib import Path

import pytest
from builders import (
    build_mhbd,
    build_mhit,
    build_mhlt,
    build_mhsd,
    build_mhyp,
    build_string_mhod,
    build_url_mhod,
)

from podsift.db import (
    InvalidEncodingError,
    InvalidTrackError,
    ITunesDBError,
    ModelKind,
    OutOfBoundsError,
    load,
    parse,
)
from podsift.db.models import MediaType, MhodType


def song_records(title: str, location: str, size: int = 5_000_000, **fields: int) -> bytes:
    return (
        build_mhit(size=size, **fields)
        + build_string_mhod(MhodType.TITLE, title)
        + build_string_mhod(MhodType.LOCATION, location)
    )


def minimal_database() -> bytes:
    return (
        build_mhbd(version=0x13)
        + build_mhit(size=5_000_000, length=180_000, media_type=MediaType.AUDIO)
        + build_string_mhod(MhodType.TITLE, "Test Song")
        + build_string_mhod(MhodType.ARTIST, "Test Artist")
        + build_string_mhod(MhodType.ALBUM, "Test Album")
        + build_string_mhod(MhodType.LOCATION, "/song.mp3")
    )


class TestParse:
    """Tests for parse()."""

    def test_single_song(self) -> None:
        """Test a header, one track item and its strings."""
        library = parse(minimal_database())

        assert len(library.songs) == 1
        song = library.songs[0]
        assert song.title == "Test Song"
        assert song.artist == "Test Artist"
        assert song.album == "Test Album"
        assert song.filename == "/song.mp3"
        assert song.duration_seconds == 180
        assert song.duration_friendly == "3:00"
        assert library.podcasts == []

    def test_device_classification(self) -> None:
        """Test a small iTunes 7.0 database is classified as a Nano."""
        library = parse(minimal_database())
        device = library.device_info

        assert device.model.kind is ModelKind.NANO
        assert device.generation == "4th Generation"
        assert device.release_year == 2008
        assert device.display_name == "iPod Nano 2GB (4th Gen)"
        assert library.songs[0].device_info is device

    def test_header_fields(self) -> None:
        """Test version and language reach the library."""
        library = parse(minimal_database())

        assert library.version == 0x13
        assert library.language == "en"

    def test_empty(self) -> None:
        """Test an empty buffer."""
        library = parse(b"")

        assert library.songs == []
        assert library.podcasts == []
        assert library.device_info.model.kind is ModelKind.UNKNOWN

    def test_no_markers(self) -> None:
        """Test a buffer without any records."""
        library = parse(bytes(range(256)) * 16)

        assert library.songs == []
        assert library.podcasts == []

    def test_capacity_from_all_tracks(self) -> None:
        """Test capacity is summed over every track item."""
        data = (
            build_mhbd(version=0x13)
            + song_records("A", "/a.mp3", size=1_500_000_000)
            + song_records("B", "/b.mp3", size=1_500_000_000)
            + song_records("C", "/c.mp3", size=1_100_000_000)
        )
        library = parse(data)

        assert len(library.songs) == 3
        assert library.device_info.display_name == "iPod Nano 8GB (4th Gen)"
        assert {song.device_info.display_name for song in library.songs} == {
            "iPod Nano 8GB (4th Gen)"
        }

    def test_late_photo_dataset_affects_earlier_songs(self) -> None:
        """Test signals after a song still change its device."""
        data = (
            build_mhbd(version=0x14)
            + build_mhsd(1)
            + build_mhlt(1)
            + song_records("Song", "/song.mp3")
            + build_mhsd(3)
        )
        library = parse(data)

        assert library.songs[0].device_info.generation == "3rd Generation"

    def test_songs_and_podcasts(self) -> None:
        """Test a library mixing songs, podcasts and a playlist."""
        data = (
            build_mhbd(version=0x13)
            + build_mhsd(1)
            + build_mhlt(2)
            + song_records("Song", "/song.mp3")
            + build_mhit(size=20_000_000, media_type=MediaType.PODCAST)
            + build_string_mhod(MhodType.TITLE, "Episode 1")
            + build_string_mhod(MhodType.ARTIST, "Publisher")
            + build_url_mhod(MhodType.PODCAST_ENCLOSURE_URL, "http://example.com/ep1.mp3")
            + build_string_mhod(MhodType.DESCRIPTION, "Show notes")
            + build_mhsd(2)
            + build_mhyp(is_master=True)
            + build_string_mhod(MhodType.TITLE, "Library")
        )
        library = parse(data)

        assert [song.title for song in library.songs] == ["Song"]
        assert len(library.podcasts) == 1
        podcast = library.podcasts[0]
        assert podcast.title == "Episode 1"
        assert podcast.publisher == "Publisher"
        assert podcast.enclosure_url == "http://example.com/ep1.mp3"
        assert podcast.description == "Show notes"

    def test_zero_size_track_aborts(self) -> None:
        """Test a zero-byte song fails the whole parse."""
        data = build_mhbd() + song_records("Good", "/good.mp3") + build_mhit(size=0)

        with pytest.raises(InvalidTrackError):
            parse(data)

    def test_zero_track_item_alone(self) -> None:
        """Test a lone track item with all fields zero."""
        with pytest.raises(InvalidTrackError):
            parse(build_mhit(size=0, length=0, media_type=0))

    def test_truncated_database(self) -> None:
        """Test a database cut off inside a track item."""
        data = minimal_database()
        with pytest.raises(OutOfBoundsError) as excinfo:
            parse(data[:0x68 + 0x40])
        assert excinfo.value.record_kind == "track item"
        assert excinfo.value.record_offset == 0x68

    def test_short_track_header(self) -> None:
        """Test strings after a shortened track header are kept."""
        data = (
            build_mhbd(version=0x12)
            + build_mhit(header_length=0xF4)
            + build_string_mhod(MhodType.TITLE, "Short Header Song")
            + build_string_mhod(MhodType.LOCATION, "/short.mp3")
        )
        library = parse(data)

        assert [song.title for song in library.songs] == ["Short Header Song"]
        assert library.songs[0].filename == "/short.mp3"

    def test_bad_string_aborts(self) -> None:
        """Test malformed UTF-16 fails the whole parse."""
        data = bytearray(minimal_database())
        title_offset = data.index(b"mhod")
        data[title_offset + 0x28 : title_offset + 0x2A] = b"\x00\xdc"

        with pytest.raises(InvalidEncodingError):
            parse(bytes(data))


class TestLoad:
    """Tests for load()."""

    def test_load_file(self) -> None:
        """Test reading a database from disk."""
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "iTunesDB"
            db_path.write_bytes(minimal_database())

            library = load(db_path)

            assert len(library.songs) == 1
            assert library.songs[0].title == "Test Song"

    def test_load_str_path(self, tmp_path: Path) -> None:
        """Test load accepts a string path."""
        db_path = tmp_path / "iTunesDB"
        db_path.write_bytes(minimal_database())

        assert len(load(str(db_path)).songs) == 1

    def test_load_nonexistent(self) -> None:
        """Test loading a missing file."""
        with pytest.raises(FileNotFoundError):
            load(Path("/nonexistent/iTunesDB"))

    def test_errors_share_base(self) -> None:
        """Test decoding errors can be caught with the base class."""
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "iTunesDB"
            db_path.write_bytes(b"junk" + b"mhbd")

            with pytest.raises(ITunesDBError):
                load(db_path)
