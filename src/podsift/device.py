"""Locating iTunesDB files on mounted iPods.

Searches the usual Linux mount points for an ``iPod_Control`` folder and
reads the model name the firmware leaves in ``SysInfo`` when present.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path


@dataclass
class IPodDevice:
    """A mounted iPod with an iTunesDB to read."""

    mount_point: Path
    model: str
    db_path: Path
    serial: str = ""
    firmware_version: str = ""

    @property
    def is_valid(self) -> bool:
        """Check if the device has an iTunesDB."""
        return self.db_path.exists()


def discover_ipods() -> list[IPodDevice]:
    """Scan common mount points for iPod devices.

    Searches /media, /mnt, /run/media/$USER, and ~/mnt.

    Returns:
        List of discovered IPodDevice objects.
    """
    devices: list[IPodDevice] = []
    search_paths = [Path("/media"), Path("/mnt")]

    user = os.getenv("USER", "")
    if user:
        search_paths.append(Path(f"/run/media/{user}"))
        search_paths.append(Path(f"/media/{user}"))

    search_paths.append(Path.home() / "mnt")

    for search_path in search_paths:
        if not search_path.exists():
            continue
        try:
            for entry in search_path.iterdir():
                if entry.is_dir():
                    device = _check_ipod_mount(entry)
                    if device:
                        devices.append(device)
        except PermissionError:
            continue

    return devices


def _check_ipod_mount(path: Path) -> IPodDevice | None:
    """Return an IPodDevice if ``path`` looks like an iPod mount point."""
    ipod_control = path / "iPod_Control"
    itunes_dir = ipod_control / "iTunes"
    if not itunes_dir.is_dir():
        return None

    model = "iPod"
    serial = ""
    firmware_version = ""

    for name in ("SysInfo", "SysInfoExtended"):
        sysinfo_path = ipod_control / "Device" / name
        if not sysinfo_path.exists():
            continue
        found_model, found_serial, found_fw = _parse_sysinfo(sysinfo_path)
        if model == "iPod":
            model = found_model
        serial = serial or found_serial
        firmware_version = firmware_version or found_fw

    return IPodDevice(
        mount_point=path,
        model=model,
        db_path=itunes_dir / "iTunesDB",
        serial=serial,
        firmware_version=firmware_version,
    )


def _parse_sysinfo(path: Path) -> tuple[str, str, str]:
    """Parse a SysInfo file.

    Returns:
        Tuple of (model, serial, firmware_version)
    """
    model = "iPod"
    serial = ""
    firmware_version = ""

    try:
        content = path.read_text(errors="replace")
    except OSError:
        return model, serial, firmware_version

    for line in content.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        value = value.strip()

        if key in ("ModelNumStr", "ModelNum"):
            model = _model_number_to_name(value)
        elif key in ("pszSerialNumber", "SerialNumber"):
            serial = value
        elif key in ("visibleBuildID", "BuildID"):
            firmware_version = value
        elif key == "FirewireGuid" and not serial:
            serial = value

    return model, serial, firmware_version


# Model numbers for the devices the database inference can tell apart
_MODEL_NAMES = {
    "M9160": "iPod Mini 4GB (1st Gen)",
    "M9800": "iPod Mini 4GB (2nd Gen)",
    "M9801": "iPod Mini 6GB (2nd Gen)",
    "MA004": "iPod Nano 2GB (1st Gen)",
    "MA005": "iPod Nano 4GB (1st Gen)",
    "MA477": "iPod Nano 2GB (2nd Gen)",
    "MA978": "iPod Nano 4GB (3rd Gen)",
    "MB261": "iPod Nano 8GB (3rd Gen)",
    "MB598": "iPod Nano 8GB (4th Gen)",
    "MB754": "iPod Nano 16GB (4th Gen)",
    "MA002": "iPod Video 30GB (5th Gen)",
    "MA003": "iPod Video 60GB (5th Gen)",
    "MA446": "iPod Video 30GB (5.5th Gen)",
    "MA448": "iPod Video 80GB (5.5th Gen)",
    "MB029": "iPod Classic 80GB (6th Gen)",
    "MB145": "iPod Classic 160GB (6th Gen)",
    "MB562": "iPod Classic 120GB (Late 2008)",
}


def _model_number_to_name(model_num: str) -> str:
    """Convert an iPod model number (e.g. "MA448") to a readable name."""
    model_num = model_num.upper().strip()

    # Retail part numbers carry a region suffix, e.g. "MA448LL/A"
    match = re.search(r"(M[A-Z0-9]\d{3})", model_num)
    if match and match.group(1) in _MODEL_NAMES:
        return _MODEL_NAMES[match.group(1)]

    return f"iPod ({model_num})"


def get_ipod(mount_point: Path | str | None = None) -> IPodDevice | None:
    """Get an iPod at a specific path, or the first one auto-discovered."""
    if mount_point is not None:
        return _check_ipod_mount(Path(mount_point))

    devices = discover_ipods()
    return devices[0] if devices else None
