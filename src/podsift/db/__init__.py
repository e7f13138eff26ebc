"""Database module for iTunesDB decoding.

This module turns the raw bytes of an iTunesDB file into songs, podcasts
and a description of the iPod that wrote it.
"""

from .errors import InvalidEncodingError, InvalidTrackError, ITunesDBError, OutOfBoundsError
from .inference import classify, collect_signals, estimate_capacity
from .models import DeviceInfo, IpodModel, Library, MediaContext, ModelKind, Podcast, Song
from .parser import load, parse

__all__ = [
    "classify",
    "collect_signals",
    "DeviceInfo",
    "estimate_capacity",
    "InvalidEncodingError",
    "InvalidTrackError",
    "IpodModel",
    "ITunesDBError",
    "Library",
    "load",
    "MediaContext",
    "ModelKind",
    "OutOfBoundsError",
    "parse",
    "Podcast",
    "Song",
]
