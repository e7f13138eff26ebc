"""Main Textual application for Podsift."""

from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from .db import ITunesDBError, Library, load
from .device import get_ipod
from .export import export_library
from .ui.screens import LibraryScreen, NoDatabaseScreen


class PodsiftApp(App[None]):
    """Podsift - read-only iTunesDB browser."""

    TITLE = "Podsift"
    SUB_TITLE = "iTunesDB Browser"

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True, priority=True),
        Binding("r", "refresh", "Reload", show=True),
        Binding("e", "export", "Export", show=True),
        Binding("?", "help", "Help", show=True),
    ]

    def __init__(
        self,
        *,
        database_path: Path | str | None = None,
        device_path: Path | str | None = None,
        export_dir: Path | str | None = None,
    ) -> None:
        """Initialize the Podsift application.

        Args:
            database_path: Optional iTunesDB file to open directly
            device_path: Optional specific iPod mount point
            export_dir: Where the export action writes its files
        """
        super().__init__()
        self.database_path = Path(database_path) if database_path else None
        self.device_path = Path(device_path) if device_path else None
        self.export_dir = Path(export_dir) if export_dir else Path.cwd()
        self.library: Library | None = None

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Header()
        yield Footer()

    def on_mount(self) -> None:
        """Handle application mount."""
        self._open_database()

    def _find_database(self) -> Path | None:
        if self.database_path is not None:
            return self.database_path
        device = get_ipod(self.device_path)
        if device is None or not device.is_valid:
            return None
        return device.db_path

    def _open_database(self) -> None:
        """Locate and decode the database, then show it."""
        db_path = self._find_database()
        if db_path is None:
            self.push_screen(NoDatabaseScreen())
            return

        try:
            self.library = load(db_path)
        except (ITunesDBError, OSError) as e:
            self.notify(f"Database error: {e}", severity="error")
            self.push_screen(NoDatabaseScreen())
            return

        self.sub_title = self.library.device_info.display_name
        self.push_screen(LibraryScreen(self.library))

    def open_path(self, path: Path) -> None:
        """Open a database chosen from the no-database screen."""
        self.database_path = path
        self.action_refresh()

    def action_refresh(self) -> None:
        """Reload the database from disk."""
        while len(self.screen_stack) > 1:
            self.pop_screen()
        self._open_database()

    def action_export(self) -> None:
        """Write CSV and JSON files for the loaded library."""
        if self.library is None:
            self.notify("Nothing to export", severity="warning")
            return
        try:
            written = export_library(self.library.songs, self.library.podcasts, self.export_dir)
        except OSError as e:
            self.notify(f"Export failed: {e}", severity="error")
            return
        self.notify(f"Wrote {len(written)} files to {self.export_dir}")

    def action_help(self) -> None:
        """Show help dialog."""
        self.notify(
            "Tab: Switch Table | f: Filter | e: Export | r: Reload",
            title="Keyboard Shortcuts",
        )


def run(
    database_path: Path | str | None = None,
    device_path: Path | str | None = None,
    export_dir: Path | str | None = None,
) -> None:
    """Run the Podsift application.

    Args:
        database_path: Optional iTunesDB file to open directly
        device_path: Optional specific iPod mount point
        export_dir: Where the export action writes its files
    """
    app = PodsiftApp(
        database_path=database_path,
        device_path=device_path,
        export_dir=export_dir,
    )
    app.run()
