"""Screen definitions for Podsift TUI."""

from pathlib import Path

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.screen import Screen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Static,
    TabbedContent,
    TabPane,
)

from ..db.models import Library, Podcast, Song
from ..export import stars_label

SONG_HEADERS = ("Title", "Artist", "Album", "Genre", "Year", "Time", "Size", "Plays", "Rating")
PODCAST_HEADERS = ("Title", "Publisher", "Genre", "Subtitle", "Type")


class NoDatabaseScreen(Screen[None]):
    """Screen shown when no iTunesDB could be opened."""

    BINDINGS = [
        Binding("r", "refresh", "Refresh", show=True),
        Binding("q", "quit", "Quit", show=True),
    ]

    def compose(self) -> ComposeResult:
        """Compose the no-database screen."""
        yield Header()
        yield Container(
            Static("No iTunesDB Found", id="no-db-title"),
            Static(
                "Connect your iPod and press 'r' to refresh,\n"
                "or enter the path to an iTunesDB file below:",
                id="no-db-message",
            ),
            Input(
                placeholder="/path/to/iPod_Control/iTunes/iTunesDB...",
                id="db-path-input",
            ),
            Horizontal(
                Button("Refresh", id="refresh-btn", variant="primary"),
                Button("Open", id="open-btn", variant="success"),
                id="no-db-buttons",
            ),
            id="no-db-container",
        )
        yield Footer()

    @on(Button.Pressed, "#refresh-btn")
    def on_refresh_pressed(self) -> None:
        """Handle refresh button press."""
        self.action_refresh()

    @on(Button.Pressed, "#open-btn")
    @on(Input.Submitted, "#db-path-input")
    def on_open_requested(self) -> None:
        """Handle open button press or path submission."""
        self._try_open()

    def _try_open(self) -> None:
        """Try to open the manually entered database path."""
        path_str = self.query_one("#db-path-input", Input).value.strip()
        if not path_str:
            self.notify("Please enter a path", severity="warning")
            return

        path = Path(path_str).expanduser()
        if path.is_dir():
            path = path / "iPod_Control" / "iTunes" / "iTunesDB"
        if not path.is_file():
            self.notify(f"No iTunesDB at {path}", severity="error")
            return

        if hasattr(self.app, "open_path"):
            self.app.open_path(path)  # type: ignore[attr-defined]

    def action_refresh(self) -> None:
        """Retry device detection."""
        if hasattr(self.app, "action_refresh"):
            self.app.action_refresh()  # type: ignore[attr-defined]

    def action_quit(self) -> None:
        """Quit the application."""
        self.app.exit()


class LibraryScreen(Screen[None]):
    """Songs and podcasts recovered from the database."""

    BINDINGS = [
        Binding("f", "focus_filter", "Filter", show=True),
        Binding("escape", "clear_filter", "Clear Filter", show=False),
    ]

    def __init__(self, library: Library) -> None:
        """Initialize the library screen.

        Args:
            library: Decoded iTunesDB contents
        """
        super().__init__()
        self.library = library
        self._filter_text = ""

    def compose(self) -> ComposeResult:
        """Compose the library layout."""
        yield Header()
        yield Static(self._device_summary(), id="device-summary")
        yield Input(placeholder="Filter...", id="filter-input")
        with TabbedContent(id="library-tabs"):
            with TabPane(f"Songs ({len(self.library.songs)})", id="songs-tab"):
                yield DataTable(id="songs-table", zebra_stripes=True, cursor_type="row")
            with TabPane(f"Podcasts ({len(self.library.podcasts)})", id="podcasts-tab"):
                yield DataTable(id="podcasts-table", zebra_stripes=True, cursor_type="row")
        yield Footer()

    def on_mount(self) -> None:
        """Fill the tables."""
        self.query_one("#songs-table", DataTable).add_columns(*SONG_HEADERS)
        self.query_one("#podcasts-table", DataTable).add_columns(*PODCAST_HEADERS)
        self._populate()

    def _device_summary(self) -> str:
        device = self.library.device_info
        year = device.release_year if device.release_year is not None else "unknown year"
        return (
            f"{device.display_name} | {device.model} | {device.generation} | {year} "
            f"| database version 0x{self.library.version:X}"
        )

    def _matches(self, *fields: str) -> bool:
        if not self._filter_text:
            return True
        needle = self._filter_text.lower()
        return any(needle in value.lower() for value in fields)

    def _song_cells(self, song: Song) -> tuple[str, ...]:
        return (
            song.title,
            song.artist,
            song.album,
            song.genre,
            str(song.year) if song.year else "",
            song.duration_friendly,
            song.file_size_friendly,
            str(song.play_count),
            stars_label(song.rating_stars),
        )

    def _podcast_cells(self, podcast: Podcast) -> tuple[str, ...]:
        return (
            podcast.title,
            podcast.publisher,
            podcast.genre,
            podcast.subtitle,
            podcast.file_type,
        )

    def _populate(self) -> None:
        """Rebuild both tables from the library and the current filter."""
        songs_table = self.query_one("#songs-table", DataTable)
        songs_table.clear()
        for song in self.library.songs:
            if self._matches(song.title, song.artist, song.album, song.genre):
                songs_table.add_row(*self._song_cells(song))

        podcasts_table = self.query_one("#podcasts-table", DataTable)
        podcasts_table.clear()
        for podcast in self.library.podcasts:
            if self._matches(podcast.title, podcast.publisher, podcast.genre):
                podcasts_table.add_row(*self._podcast_cells(podcast))

    @on(Input.Changed, "#filter-input")
    def on_filter_changed(self, event: Input.Changed) -> None:
        """Handle filter input changes."""
        self._filter_text = event.value.strip()
        self._populate()

    def action_focus_filter(self) -> None:
        """Focus the filter input."""
        self.query_one("#filter-input", Input).focus()

    def action_clear_filter(self) -> None:
        """Clear the filter."""
        self.query_one("#filter-input", Input).value = ""
