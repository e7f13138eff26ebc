"""Marker scanner driving the record decoders.

The container has no index of record positions, so the scanner looks for the
4-byte markers at every byte offset. When a marker matches, its decoder runs
and reports a stride; otherwise the cursor moves on by a single byte. The
single-byte fallback is what lets the scan resynchronize after padding or a
record whose real size differs from what its decoder assumed.
"""

import logging
from collections.abc import Iterator, Mapping

from .atoms import MARKER_SIZE, RECORD_KINDS
from .decoders import DECODERS, Decoder
from .errors import ITunesDBError
from .models import RawRecord, Record

logger = logging.getLogger(__name__)


class MarkerScanner:
    """Walks a buffer and hands every recognized record to its decoder."""

    def __init__(self, decoders: Mapping[bytes, Decoder] | None = None) -> None:
        self.decoders: Mapping[bytes, Decoder] = DECODERS if decoders is None else decoders

    def scan(self, buffer: bytes) -> Iterator[tuple[RawRecord, Record]]:
        """Yield ``(raw, decoded)`` pairs in file order.

        Raises:
            ITunesDBError: Annotated with the record kind and offset of the
                record that failed to decode.
        """
        cursor = 0
        end = len(buffer)
        hits = 0

        while cursor + MARKER_SIZE <= end:
            marker = bytes(buffer[cursor : cursor + MARKER_SIZE])
            decoder = self.decoders.get(marker)
            if decoder is None:
                cursor += 1
                continue

            raw = RawRecord(marker=marker, start_offset=cursor, buffer=buffer)
            try:
                decoded, stride = decoder(raw)
            except ITunesDBError as e:
                e.add_context(RECORD_KINDS.get(marker, marker.decode("ascii")), cursor)
                raise

            hits += 1
            yield raw, decoded
            cursor += max(stride, 1)

        logger.debug("Scan of %d bytes finished with %d records", end, hits)


def scan(buffer: bytes) -> Iterator[tuple[RawRecord, Record]]:
    """Scan a buffer with the default decoder table."""
    return MarkerScanner().scan(buffer)
