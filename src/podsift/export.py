"""CSV and JSON output for decoded libraries.

The column order and JSON keys here are what downstream spreadsheets and
scripts rely on; keep them stable.
"""

import csv
import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .db.models import DeviceInfo, Podcast, Song

SONG_COLUMNS = [
    "Song Title",
    "Artist",
    "Album",
    "Year released",
    "File size",
    "Song Duration",
    "Filename",
    "Genre",
    "File extension",
    "Bitrate (kbps)",
    "Sample Rate (Hz)",
    "File size (bytes)",
    "Song duration (seconds)",
    "Play count",
    "Rating",
    "Added to library on (timestamp)",
    "Added to library on (epoch)",
    "Composer",
    "Comment",
    "iPod Model",
    "iPod Generation",
    "iPod Name",
    "iPod Release Year",
]

PODCAST_COLUMNS = [
    "Episode Title",
    "Publisher",
    "Genre",
    "Subtitle",
    "Description",
    "File Type",
    "iPod Model",
    "iPod Generation",
    "iPod Name",
    "iPod Release Year",
]


def stars_label(stars: int) -> str:
    """Render a 0-5 star rating, e.g. ``★★★☆☆``."""
    return "★" * stars + "☆" * (5 - stars)


def _device_row(device: DeviceInfo) -> list[str]:
    year = "Unknown" if device.release_year is None else str(device.release_year)
    return [str(device.model), device.generation, device.display_name, year]


def song_row(song: Song) -> list[str]:
    """Flatten a song into CSV cells in ``SONG_COLUMNS`` order."""
    added = song.added_timestamp.isoformat() if song.added_timestamp else ""
    return [
        song.title,
        song.artist,
        song.album,
        str(song.year),
        song.file_size_friendly,
        song.duration_friendly,
        song.filename,
        song.genre,
        song.file_extension,
        str(song.bitrate_kbps),
        str(song.sample_rate_hz),
        str(song.file_size_bytes),
        str(song.duration_seconds),
        str(song.play_count),
        stars_label(song.rating_stars),
        added,
        str(song.added_epoch),
        song.composer,
        song.comment,
        *_device_row(song.device_info),
    ]


def podcast_row(podcast: Podcast) -> list[str]:
    """Flatten a podcast into CSV cells in ``PODCAST_COLUMNS`` order."""
    return [
        podcast.title,
        podcast.publisher,
        podcast.genre,
        podcast.subtitle,
        podcast.description.replace("\n", ""),
        podcast.file_type,
        *_device_row(podcast.device_info),
    ]


def _device_fields(device: DeviceInfo) -> dict[str, Any]:
    return {
        "ipod_model": str(device.model),
        "ipod_generation": device.generation,
        "ipod_name": device.display_name,
        "ipod_release_year": device.release_year,
    }


def song_to_dict(song: Song) -> dict[str, Any]:
    """JSON representation of a song."""
    return {
        "song_title": song.title,
        "song_artist": song.artist,
        "song_album": song.album,
        "song_year": song.year,
        "song_genre": song.genre,
        "song_composer": song.composer,
        "song_comment": song.comment,
        "song_filename": song.filename,
        "file_extension": song.file_extension,
        "file_size_bytes": song.file_size_bytes,
        "file_size_friendly": song.file_size_friendly,
        "song_duration_s": song.duration_seconds,
        "song_duration_friendly": song.duration_friendly,
        "bitrate_kbps": song.bitrate_kbps,
        "sample_rate_hz": song.sample_rate_hz,
        "num_plays": song.play_count,
        "song_rating_raw": song.rating_raw,
        "song_added_to_library_ts": (
            song.added_timestamp.isoformat() if song.added_timestamp else None
        ),
        "song_added_to_library_epoch": song.added_epoch,
        **_device_fields(song.device_info),
    }


def podcast_to_dict(podcast: Podcast) -> dict[str, Any]:
    """JSON representation of a podcast."""
    return {
        "podcast_title": podcast.title,
        "podcast_publisher": podcast.publisher,
        "podcast_genre": podcast.genre,
        "podcast_subtitle": podcast.subtitle,
        "podcast_description": podcast.description,
        "podcast_file_type": podcast.file_type,
        "podcast_enclosure_url": podcast.enclosure_url,
        "podcast_rss_url": podcast.rss_url,
        **_device_fields(podcast.device_info),
    }


def write_songs_csv(songs: Iterable[Song], path: Path) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(SONG_COLUMNS)
        writer.writerows(song_row(song) for song in songs)


def write_podcasts_csv(podcasts: Iterable[Podcast], path: Path) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(PODCAST_COLUMNS)
        writer.writerows(podcast_row(podcast) for podcast in podcasts)


def write_json(items: list[dict[str, Any]], path: Path) -> None:
    """Write a pretty-printed JSON array."""
    path.write_text(json.dumps(items, indent=2, ensure_ascii=False), encoding="utf-8")


def export_library(
    songs: list[Song],
    podcasts: list[Podcast],
    output_dir: Path,
    *,
    csv_output: bool = True,
    json_output: bool = True,
) -> list[Path]:
    """Write the requested files into ``output_dir``.

    CSV files are always written (header only when empty); JSON files are
    only written when there is something to put in them.

    Returns:
        Paths of the files written
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    if csv_output:
        write_songs_csv(songs, output_dir / "music.csv")
        write_podcasts_csv(podcasts, output_dir / "podcasts.csv")
        written += [output_dir / "music.csv", output_dir / "podcasts.csv"]

    if json_output:
        if songs:
            write_json([song_to_dict(s) for s in songs], output_dir / "songs.json")
            written.append(output_dir / "songs.json")
        if podcasts:
            write_json([podcast_to_dict(p) for p in podcasts], output_dir / "podcasts.json")
            written.append(output_dir / "podcasts.json")

    return written
