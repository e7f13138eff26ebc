"""Podsift - extract songs and podcasts from an iPod's iTunesDB."""

__version__ = "0.1.0"
