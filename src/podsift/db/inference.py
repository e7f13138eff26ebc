"""Best-effort identification of the iPod that wrote a database.

The database never names its device, so the model is inferred from the
format version plus a few signals gathered over the whole file: whether any
track carries artwork, whether a dataset of type 3 exists, and roughly how
much music is stored. The classification is a table of rules evaluated in
order; the first rule that matches wins.
"""

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .models import (
    DatabaseHeader,
    Dataset,
    DeviceInfo,
    IpodModel,
    ModelKind,
    Record,
    TrackItem,
)

logger = logging.getLogger(__name__)

BYTES_PER_GB = 1_000_000_000

# Capacities iPods were sold in, ascending
CANONICAL_CAPACITIES = (2, 4, 8, 16, 32, 64, 128)


def estimate_capacity(total_bytes: int) -> int:
    """Round the stored bytes up to whole GB, then up to a sold capacity."""
    gigabytes = math.ceil(total_bytes / BYTES_PER_GB)
    for capacity in CANONICAL_CAPACITIES:
        if gigabytes <= capacity:
            return capacity
    return CANONICAL_CAPACITIES[-1]


@dataclass(frozen=True)
class DeviceSignals:
    """Evidence gathered from the whole database before classification."""

    version: int = 0
    has_artwork: bool = False
    has_photos: bool = False
    total_track_bytes: int = 0

    @property
    def capacity_gb(self) -> int:
        return estimate_capacity(self.total_track_bytes)


def collect_signals(records: Iterable[Record]) -> DeviceSignals:
    """Summarize decoded records into the signals used for classification."""
    version: int | None = None
    has_artwork = False
    has_photos = False
    total = 0

    for record in records:
        if isinstance(record, TrackItem):
            total += record.size_bytes
            has_artwork = has_artwork or record.has_artwork
        elif isinstance(record, Dataset):
            has_photos = has_photos or record.is_photo_dataset
        elif isinstance(record, DatabaseHeader) and version is None:
            version = record.version

    return DeviceSignals(
        version=version or 0,
        has_artwork=has_artwork,
        has_photos=has_photos,
        total_track_bytes=total,
    )


# =============================================================================
# Classification table
# =============================================================================


@dataclass(frozen=True)
class DeviceRule:
    """One row of the classification table.

    ``name`` is a template receiving ``capacity``; ``guard`` sees the signals
    and defaults to accepting everything.
    """

    versions: range
    kind: ModelKind
    variant: str
    generation: str
    name: str
    release_year: int
    max_capacity: int | None = None
    guard: Callable[[DeviceSignals], bool] | None = None

    def matches(self, signals: DeviceSignals) -> bool:
        if signals.version not in self.versions:
            return False
        if self.max_capacity is not None and signals.capacity_gb > self.max_capacity:
            return False
        return self.guard is None or self.guard(signals)

    def resolve(self, signals: DeviceSignals) -> DeviceInfo:
        return DeviceInfo(
            model=IpodModel(self.kind, self.variant),
            generation=self.generation,
            display_name=self.name.format(capacity=signals.capacity_gb),
            release_year=self.release_year,
        )


def _versions(first: int, last: int) -> range:
    return range(first, last + 1)


def _has_photos(signals: DeviceSignals) -> bool:
    return signals.has_photos


DEVICE_RULES: tuple[DeviceRule, ...] = (
    # iTunes 4.2
    DeviceRule(_versions(0x09, 0x09), ModelKind.MINI, "1st Generation", "1st Generation",
               "iPod Mini {capacity}GB (1st Gen)", 2004, max_capacity=4),
    DeviceRule(_versions(0x09, 0x09), ModelKind.CLASSIC, "3rd Generation", "3rd Generation",
               "iPod Classic {capacity}GB (3rd Gen)", 2003),
    # iTunes 4.5-4.8
    DeviceRule(_versions(0x0A, 0x0C), ModelKind.MINI, "2nd Generation", "2nd Generation",
               "iPod Mini {capacity}GB (2nd Gen)", 2005, max_capacity=6),
    DeviceRule(_versions(0x0A, 0x0C), ModelKind.CLASSIC, "4th Generation", "4th Generation",
               "iPod Classic {capacity}GB (4th Gen)", 2004),
    # iTunes 4.9-5.0
    DeviceRule(_versions(0x0D, 0x0E), ModelKind.NANO, "1st Generation", "1st Generation",
               "iPod Nano {capacity}GB (1st Gen)", 2005, max_capacity=4, guard=_has_photos),
    DeviceRule(_versions(0x0D, 0x0E), ModelKind.CLASSIC, "5th Generation (Video)", "5th Generation",
               "iPod Classic {capacity}GB Video (5th Gen)", 2005, guard=_has_photos),
    DeviceRule(_versions(0x0D, 0x0E), ModelKind.CLASSIC, "Color/Photo", "4th Generation",
               "iPod Classic {capacity}GB Color/Photo (4th Gen)", 2004),
    # iTunes 6.0-6.0.5
    DeviceRule(_versions(0x0F, 0x12), ModelKind.NANO, "2nd Generation", "2nd Generation",
               "iPod Nano {capacity}GB (2nd Gen)", 2006, max_capacity=8),
    DeviceRule(_versions(0x0F, 0x12), ModelKind.CLASSIC, "5th Generation Enhanced",
               "5th Generation",
               "iPod Classic {capacity}GB Enhanced (5th Gen)", 2006),
    # iTunes 7.0-7.4
    DeviceRule(_versions(0x13, 0x15), ModelKind.NANO, "3rd Generation", "3rd Generation",
               "iPod Nano {capacity}GB (3rd Gen)", 2007, max_capacity=8, guard=_has_photos),
    DeviceRule(_versions(0x13, 0x15), ModelKind.NANO, "4th Generation", "4th Generation",
               "iPod Nano {capacity}GB (4th Gen)", 2008, max_capacity=16),
    DeviceRule(_versions(0x17, 0x19), ModelKind.NANO, "4th Generation", "4th Generation",
               "iPod Nano {capacity}GB (4th Gen)", 2008, max_capacity=16),
    DeviceRule(_versions(0x13, 0x15), ModelKind.CLASSIC, "6th Generation", "6th Generation",
               "iPod Classic {capacity}GB (6th Gen)", 2007),
    DeviceRule(_versions(0x17, 0x19), ModelKind.CLASSIC, "6th Generation (Late 2008)",
               "6th Generation",
               "iPod Classic {capacity}GB (Late 2008)", 2008),
)


def classify(signals: DeviceSignals, rules: Iterable[DeviceRule] = DEVICE_RULES) -> DeviceInfo:
    """Resolve signals to a device description; unmatched versions are Unknown."""
    for rule in rules:
        if rule.matches(signals):
            info = rule.resolve(signals)
            break
    else:
        info = DeviceInfo(
            model=IpodModel(ModelKind.UNKNOWN),
            generation="Unknown",
            display_name=f"Unknown iPod ({signals.capacity_gb}GB)",
            release_year=None,
        )

    logger.info(
        "Device looks like %s (version 0x%X, ~%dGB, artwork=%s, photos=%s)",
        info.display_name,
        signals.version,
        signals.capacity_gb,
        signals.has_artwork,
        signals.has_photos,
    )
    return info


def infer_device(records: Iterable[Record]) -> DeviceInfo:
    """Classify the device from a full set of decoded records."""
    return classify(collect_signals(records))
