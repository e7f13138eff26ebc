"""Data models for decoded iTunesDB records and the library built from them."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum


class MediaType(IntEnum):
    """Media type codes stored in a track item."""

    AUDIO_VIDEO = 0x00000000  # Shows in both Audio and Video
    AUDIO = 0x00000001
    VIDEO = 0x00000002
    PODCAST = 0x00000004
    VIDEO_PODCAST = 0x00000006
    AUDIOBOOK = 0x00000008
    MUSIC_VIDEO = 0x00000020
    TV_SHOW = 0x00000040
    TV_SHOW_MUSIC = 0x00000060


class MediaContext(Enum):
    """Kind of entity the most recent track item describes.

    Data objects carry no back-reference to their track item, so string
    payloads are routed by whichever context was current when they arrived.
    """

    UNKNOWN = "unknown"
    SONG_LIKE = "song"
    TELEVISION = "television"
    PODCAST = "podcast"

    @classmethod
    def from_media_type(cls, raw: int) -> "MediaContext":
        """Map a raw track item media type code onto a routing context."""
        return _MEDIA_CONTEXTS.get(raw, cls.UNKNOWN)


_MEDIA_CONTEXTS = {
    MediaType.AUDIO_VIDEO: MediaContext.SONG_LIKE,
    MediaType.AUDIO: MediaContext.SONG_LIKE,
    MediaType.AUDIOBOOK: MediaContext.SONG_LIKE,
    MediaType.MUSIC_VIDEO: MediaContext.SONG_LIKE,
    MediaType.TV_SHOW: MediaContext.TELEVISION,
    MediaType.TV_SHOW_MUSIC: MediaContext.TELEVISION,
    MediaType.PODCAST: MediaContext.PODCAST,
    MediaType.VIDEO_PODCAST: MediaContext.PODCAST,
}


class FileType(IntEnum):
    """Track file types (stored as reversed 4-byte ASCII)."""

    MP3 = 0x4D503320  # "MP3 "
    AAC = 0x41414320  # "AAC "
    M4A = 0x4D344120  # "M4A "
    M4P = 0x4D345020  # "M4P "
    M4B = 0x4D344220  # "M4B "
    M4V = 0x4D345620  # "M4V "
    MP4 = 0x4D503420  # "MP4 "
    MOV = 0x4D4F5620  # "MOV "
    WAV = 0x57415620  # "WAV "
    AIFF = 0x41494646  # "AIFF"

    @property
    def extension(self) -> str:
        """File extension without the leading dot."""
        return "aif" if self is FileType.AIFF else self.name.lower()


class MhodType(IntEnum):
    """MHOD (data object) type codes."""

    TITLE = 1
    LOCATION = 2
    ALBUM = 3
    ARTIST = 4
    GENRE = 5
    FILETYPE = 6
    EQ_SETTING = 7
    COMMENT = 8
    CATEGORY = 9
    COMPOSER = 12
    GROUPING = 13
    DESCRIPTION = 14
    PODCAST_ENCLOSURE_URL = 15
    PODCAST_RSS_URL = 16
    CHAPTER_DATA = 17
    SUBTITLE = 18
    TV_SHOW = 19
    TV_EPISODE = 20
    TV_NETWORK = 21
    ALBUM_ARTIST = 22
    SORT_ARTIST = 23
    KEYWORDS = 24
    SORT_TITLE = 27
    SORT_ALBUM = 28
    SORT_ALBUM_ARTIST = 29
    SORT_COMPOSER = 30
    SORT_TV_SHOW = 31
    SMART_PLAYLIST_DATA = 50
    SMART_PLAYLIST_RULES = 51
    LIBRARY_PLAYLIST_INDEX = 52
    PLAYLIST_COLUMN = 100


# String MHODs (UTF-16LE payload behind a string sub-header)
STRING_MHOD_TYPES = frozenset(range(1, 15)) | frozenset(range(18, 32))
# URL MHODs (UTF-8 payload directly after the common header)
URL_MHOD_TYPES = frozenset({MhodType.PODCAST_ENCLOSURE_URL, MhodType.PODCAST_RSS_URL})


class SortOrder(IntEnum):
    """Playlist sort order values."""

    MANUAL = 1
    TITLE = 3
    ALBUM = 4
    ARTIST = 5
    BITRATE = 6
    GENRE = 7
    KIND = 8
    DATE_MODIFIED = 9
    TRACK_NUMBER = 10
    SIZE = 11
    TIME = 12
    YEAR = 13
    SAMPLE_RATE = 14
    COMMENT = 15
    DATE_ADDED = 16
    EQUALIZER = 17
    COMPOSER = 18
    PLAY_COUNT = 20
    LAST_PLAYED = 21
    DISC_NUMBER = 22
    RATING = 23
    RELEASE_DATE = 24
    BPM = 25
    GROUPING = 26
    CATEGORY = 27
    DESCRIPTION = 28

    @classmethod
    def label(cls, raw: int) -> str:
        """Describe a raw sort order code."""
        try:
            return "Sorted by " + cls(raw).name.replace("_", " ").lower()
        except ValueError:
            return f"Unknown sort order ({raw})"


# =============================================================================
# Device description
# =============================================================================


class ModelKind(Enum):
    """iPod product line."""

    MINI = "Mini"
    NANO = "Nano"
    CLASSIC = "Classic"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class IpodModel:
    """Product line plus the sub-variant label, e.g. Nano / 4th Generation."""

    kind: ModelKind = ModelKind.UNKNOWN
    variant: str = ""

    def __str__(self) -> str:
        if self.kind is ModelKind.UNKNOWN or not self.variant:
            return self.kind.value
        return f"{self.kind.value} ({self.variant})"


@dataclass(frozen=True)
class DeviceInfo:
    """Best guess at the iPod that wrote the database."""

    model: IpodModel = field(default_factory=IpodModel)
    generation: str = "Unknown"
    display_name: str = "Unknown iPod"
    release_year: int | None = None


# =============================================================================
# Decoded records
# =============================================================================


@dataclass(frozen=True)
class RawRecord:
    """A marker hit: the 4-byte tag, where it starts, and the whole buffer."""

    marker: bytes
    start_offset: int
    buffer: bytes


@dataclass
class DatabaseHeader:
    offset: int
    version: int
    language: str
    database_id: int = 0


@dataclass
class Dataset:
    offset: int
    dataset_type: int

    @property
    def is_photo_dataset(self) -> bool:
        # Only photo-capable firmware writes a type 3 dataset
        return self.dataset_type == 3


@dataclass
class TrackList:
    offset: int
    num_tracks: int


@dataclass
class AlbumList:
    offset: int
    num_albums: int


@dataclass
class TrackItem:
    """Numeric fields of one track; strings arrive later as data objects."""

    offset: int
    media_type: int
    context: MediaContext
    size_bytes: int
    duration_ms: int
    file_extension: str = ""
    vbr: bool = False
    bitrate_kbps: int = 0
    sample_rate_hz: int = 0
    volume: int = 0
    bpm: int = 0
    start_time_ms: int = 0
    stop_time_ms: int = 0
    track_number: int = 0
    total_tracks: int = 0
    disc_number: int = 0
    total_discs: int = 0
    play_count: int = 0
    skip_count: int = 0
    last_played: datetime | None = None
    last_skipped: datetime | None = None
    skip_when_shuffling: bool = False
    compilation: bool = False
    has_lyrics: bool = False
    is_movie: bool = False
    rating_raw: int = 0
    gapless: bool = False
    leading_silence_samples: int | None = None
    trailing_silence_samples: int | None = None
    sample_count: int | None = None
    crossfade: bool = False
    has_artwork: bool = False
    artwork_size: int | None = None
    year: int = 0
    season_number: int = 0
    episode_number: int = 0
    user_id: int = 0
    added: datetime | None = None
    added_raw: int = 0
    modified: datetime | None = None
    published: datetime | None = None

    @property
    def rating_stars(self) -> int:
        return rating_to_stars(self.rating_raw)


@dataclass
class Playlist:
    offset: int
    is_master: bool
    is_podcast: bool
    created: datetime
    sort_order: int

    @property
    def sort_order_label(self) -> str:
        return SortOrder.label(self.sort_order)


@dataclass
class PlaylistItem:
    offset: int
    track_id: int
    added: datetime


@dataclass
class DataObject:
    """A tag-value pair. ``value`` is None for types without a decoded payload."""

    offset: int
    type_code: int
    total_length: int
    value: str | None = None

    @property
    def is_string(self) -> bool:
        return self.type_code in STRING_MHOD_TYPES

    @property
    def is_url(self) -> bool:
        return self.type_code in URL_MHOD_TYPES


Record = (
    DatabaseHeader
    | Dataset
    | TrackList
    | AlbumList
    | TrackItem
    | Playlist
    | PlaylistItem
    | DataObject
)


# =============================================================================
# Library entities
# =============================================================================


def rating_to_stars(raw: int) -> int:
    """Convert the 0-100 rating scale to 0-5 stars, rounding to nearest."""
    stars = int(raw / 20 + 0.5)
    return max(0, min(5, stars))


def format_file_size(size_bytes: int) -> str:
    """Human readable size using decimal units, e.g. ``4.20 MB``."""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1000:
            return f"{size_bytes} B" if unit == "B" else f"{size:.2f} {unit}"
        size /= 1000
    return f"{size:.2f} GB"


def format_duration(seconds: int) -> str:
    """Format seconds as ``m:ss`` or ``h:mm:ss``."""
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@dataclass
class Song:
    """A song assembled from a track item and the data objects after it."""

    title: str = ""
    artist: str = ""
    album: str = ""
    genre: str = ""
    composer: str = ""
    comment: str = ""
    filename: str = ""
    file_extension: str = ""
    file_size_bytes: int = 0
    file_size_friendly: str = ""
    duration_ms: int = 0
    duration_seconds: int = 0
    duration_friendly: str = ""
    bitrate_kbps: int = 0
    sample_rate_hz: int = 0
    play_count: int = 0
    rating_raw: int = 0
    year: int = 0
    added_timestamp: datetime | None = None
    added_epoch: int = 0
    device_info: DeviceInfo = field(default_factory=DeviceInfo)

    @property
    def rating_stars(self) -> int:
        return rating_to_stars(self.rating_raw)

    def set_file_size(self, size_bytes: int) -> None:
        self.file_size_bytes = size_bytes
        self.file_size_friendly = format_file_size(size_bytes)

    def set_duration(self, duration_ms: int) -> None:
        self.duration_ms = duration_ms
        self.duration_seconds = duration_ms // 1000
        self.duration_friendly = format_duration(self.duration_seconds)

    def set_added(self, added: datetime | None) -> None:
        self.added_timestamp = added
        self.added_epoch = int(added.timestamp()) if added is not None else 0

    def is_complete(self) -> bool:
        """A song is only kept once it has both a filename and a title."""
        return bool(self.filename) and bool(self.title)


@dataclass
class Podcast:
    """A podcast episode assembled from data objects."""

    title: str = ""
    publisher: str = ""
    genre: str = ""
    subtitle: str = ""
    description: str = ""
    file_type: str = ""
    enclosure_url: str = ""
    rss_url: str = ""
    device_info: DeviceInfo = field(default_factory=DeviceInfo)


@dataclass
class Library:
    """Everything recovered from one iTunesDB file."""

    device_info: DeviceInfo = field(default_factory=DeviceInfo)
    songs: list[Song] = field(default_factory=list)
    podcasts: list[Podcast] = field(default_factory=list)
    version: int = 0
    language: str = ""
