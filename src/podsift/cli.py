"""Command-line interface for Podsift."""

import argparse
import logging
import sys
from pathlib import Path

from podsift import __version__


def _resolve_database(args: argparse.Namespace) -> Path | None:
    """Pick the iTunesDB to read from the arguments or a mounted iPod."""
    if args.database is not None:
        return args.database

    from podsift.device import get_ipod

    device = get_ipod(args.device)
    if device is None or not device.is_valid:
        return None
    print(f"Found: {device.model} at {device.mount_point}")
    if device.serial:
        print(f"  Serial: {device.serial}")
    if device.firmware_version:
        print(f"  Firmware: {device.firmware_version}")
    return device.db_path


def main() -> None:
    """Entry point for the podsift command."""
    parser = argparse.ArgumentParser(
        prog="podsift",
        description="Extract songs and podcasts from an iPod's iTunesDB",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "database",
        nargs="?",
        type=Path,
        help="Path to an iTunesDB file (default: look on a mounted iPod)",
    )
    parser.add_argument(
        "-d",
        "--device",
        type=Path,
        help="Path to iPod mount point",
        metavar="PATH",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=Path.cwd(),
        help="Directory for music.csv, podcasts.csv and the JSON files",
        metavar="PATH",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=("csv", "json", "both"),
        default="both",
        help="Which output files to write",
    )
    parser.add_argument(
        "--no-tui",
        action="store_true",
        help="Write export files instead of opening the browser",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log decoding progress (-vv for every record)",
    )

    args = parser.parse_args()

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if not args.no_tui:
        from podsift.app import run

        run(
            database_path=args.database,
            device_path=args.device,
            export_dir=args.output_dir,
        )
        return

    from podsift.db import ITunesDBError, load
    from podsift.export import export_library

    db_path = _resolve_database(args)
    if db_path is None:
        print("No iTunesDB found", file=sys.stderr)
        sys.exit(1)

    try:
        library = load(db_path)
    except (ITunesDBError, OSError) as e:
        print(f"Failed to read {db_path}: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Device: {library.device_info.display_name}")
    print(f"  Songs: {len(library.songs)}")
    print(f"  Podcasts: {len(library.podcasts)}")

    written = export_library(
        library.songs,
        library.podcasts,
        args.output_dir,
        csv_output=args.format in ("csv", "both"),
        json_output=args.format in ("json", "both"),
    )
    for path in written:
        print(f"Wrote {path}")
    sys.exit(0)


if __name__ == "__main__":
    main()
