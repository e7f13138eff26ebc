"""Assembles songs and podcasts from the decoded record stream.

Exactly one song and one podcast are open at any time. Track items set the
media context and fill numeric song fields; data objects are routed to the
open song or podcast according to the context current when they arrive. A
file location closes the song, a podcast description closes the podcast.
Whatever is still open when the records run out is dropped.
"""

import logging
from collections.abc import Callable, Iterable

from .models import (
    DatabaseHeader,
    DataObject,
    DeviceInfo,
    Library,
    MediaContext,
    MhodType,
    Podcast,
    Record,
    Song,
    TrackItem,
)

logger = logging.getLogger(__name__)

SONG = MediaContext.SONG_LIKE
PODCAST = MediaContext.PODCAST


class LibraryBuilder:
    """Accumulates records into a ``Library``."""

    def __init__(self, device_info: DeviceInfo) -> None:
        self.device_info = device_info
        self.context = MediaContext.UNKNOWN
        self.songs: list[Song] = []
        self.podcasts: list[Podcast] = []
        self.song = Song(device_info=device_info)
        self.podcast = Podcast(device_info=device_info)
        self.version = 0
        self.language = ""
        self._handlers: dict[int, Callable[[str], None]] = {
            MhodType.TITLE: self._on_title,
            MhodType.ALBUM: self._on_album,
            MhodType.ARTIST: self._on_artist,
            MhodType.GENRE: self._on_genre,
            MhodType.COMMENT: self._on_comment,
            MhodType.COMPOSER: self._on_composer,
            MhodType.LOCATION: self._on_location,
            MhodType.FILETYPE: self._on_file_type,
            MhodType.DESCRIPTION: self._on_description,
            MhodType.PODCAST_ENCLOSURE_URL: self._on_enclosure_url,
            MhodType.PODCAST_RSS_URL: self._on_rss_url,
        }

    # -------------------------------------------------------------------------
    # Record intake
    # -------------------------------------------------------------------------

    def feed(self, record: Record) -> None:
        """Apply one decoded record."""
        if isinstance(record, TrackItem):
            self.add_track_item(record)
        elif isinstance(record, DataObject):
            self.add_data_object(record)
        elif isinstance(record, DatabaseHeader) and not self.version:
            self.version = record.version
            self.language = record.language

    def feed_all(self, records: Iterable[Record]) -> "LibraryBuilder":
        for record in records:
            self.feed(record)
        return self

    def add_track_item(self, track: TrackItem) -> None:
        """Switch context and copy numeric fields onto the open song."""
        self.context = track.context
        if track.context is not SONG:
            return

        song = self.song
        if track.file_extension:
            song.file_extension = track.file_extension
        song.bitrate_kbps = track.bitrate_kbps
        song.sample_rate_hz = track.sample_rate_hz
        song.set_file_size(track.size_bytes)
        song.set_duration(track.duration_ms)
        song.play_count = track.play_count
        if track.rating_raw > 0:
            song.rating_raw = track.rating_raw
        if track.year != 0:
            song.year = track.year
        if track.added is not None:
            song.set_added(track.added)

    def add_data_object(self, data_object: DataObject) -> None:
        """Route a string or URL payload to the open song or podcast."""
        if data_object.value is None:
            return
        handler = self._handlers.get(data_object.type_code)
        if handler is not None:
            handler(data_object.value)

    # -------------------------------------------------------------------------
    # Routing table
    # -------------------------------------------------------------------------

    def _on_title(self, value: str) -> None:
        if self.context is SONG:
            self.song.title = value
        elif self.context is PODCAST:
            self.podcast.title = value

    def _on_album(self, value: str) -> None:
        self.song.album = value

    def _on_artist(self, value: str) -> None:
        if self.context is SONG:
            self.song.artist = value
        elif self.context is PODCAST:
            self.podcast.publisher = value

    def _on_genre(self, value: str) -> None:
        if self.context is SONG:
            self.song.genre = value
        elif self.context is PODCAST and not self.podcast.genre:
            self.podcast.genre = value

    def _on_comment(self, value: str) -> None:
        if self.context is SONG:
            self.song.comment = value
        elif self.context is PODCAST:
            self.podcast.subtitle = value

    def _on_composer(self, value: str) -> None:
        self.song.composer = value

    def _on_location(self, value: str) -> None:
        self.song.filename = value
        if self.song.is_complete():
            self.songs.append(self.song)
            logger.debug("Song complete: %s", self.song.title)
            self.song = Song(device_info=self.device_info)

    def _on_file_type(self, value: str) -> None:
        if self.context is PODCAST:
            self.podcast.file_type = value

    def _on_description(self, value: str) -> None:
        if self.context is PODCAST:
            self.podcast.description = value
        if self.podcast.title:
            self.podcasts.append(self.podcast)
            logger.debug("Podcast complete: %s", self.podcast.title)
            self.podcast = Podcast(device_info=self.device_info)

    def _on_enclosure_url(self, value: str) -> None:
        if self.context is PODCAST:
            self.podcast.enclosure_url = value

    def _on_rss_url(self, value: str) -> None:
        if self.context is PODCAST:
            self.podcast.rss_url = value

    # -------------------------------------------------------------------------
    # Result
    # -------------------------------------------------------------------------

    def finish(self) -> Library:
        """Return the completed songs and podcasts; open builders are dropped."""
        logger.info("%d podcasts found", len(self.podcasts))
        logger.info("%d songs found", len(self.songs))
        return Library(
            device_info=self.device_info,
            songs=self.songs,
            podcasts=self.podcasts,
            version=self.version,
            language=self.language,
        )
