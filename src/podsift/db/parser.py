"""iTunesDB reader.

``parse`` decodes every record in the buffer first, classifies the device
from the complete record set, and only then assembles songs and podcasts, so
every entity is tagged with the final device description.
"""

import logging
from pathlib import Path

from .builder import LibraryBuilder
from .inference import infer_device
from .models import Library
from .scanner import MarkerScanner

logger = logging.getLogger(__name__)


def parse(data: bytes) -> Library:
    """Decode an in-memory iTunesDB.

    Raises:
        OutOfBoundsError: If a record runs past the end of the buffer.
        InvalidEncodingError: If a string payload is malformed.
        InvalidTrackError: If a song track item declares a zero-byte file.
    """
    records = [decoded for _, decoded in MarkerScanner().scan(data)]
    device_info = infer_device(records)
    return LibraryBuilder(device_info).feed_all(records).finish()


def load(path: Path | str) -> Library:
    """Read an iTunesDB file and decode it.

    Raises:
        ITunesDBError: If the file cannot be decoded.
        FileNotFoundError: If the file doesn't exist.
    """
    path = Path(path)
    data = path.read_bytes()
    logger.info("Read %d bytes from %s", len(data), path)
    return parse(data)
