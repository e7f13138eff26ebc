"""UI module for Textual interface."""

from .screens import LibraryScreen, NoDatabaseScreen

__all__ = [
    "LibraryScreen",
    "NoDatabaseScreen",
]
