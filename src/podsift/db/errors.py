"""Exceptions raised while decoding an iTunesDB buffer.

Every error here is fatal: once a read has gone wrong the scan cursor can no
longer be trusted, so the whole parse is aborted and the error carries enough
context (byte offset, record kind) to diagnose the container.
"""


class ITunesDBError(Exception):
    """Base exception for iTunesDB parsing errors."""

    def __init__(
        self,
        message: str,
        *,
        offset: int | None = None,
        record_kind: str | None = None,
        record_offset: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.record_kind = record_kind
        self.record_offset = record_offset

    def add_context(self, record_kind: str, record_offset: int) -> None:
        """Attach the record being decoded, keeping any context already set."""
        if self.record_kind is None:
            self.record_kind = record_kind
        if self.record_offset is None:
            self.record_offset = record_offset

    def __str__(self) -> str:
        parts = [self.message]
        if self.offset is not None:
            parts.append(f"at byte 0x{self.offset:X}")
        if self.record_kind is not None:
            where = f"in {self.record_kind} record"
            if self.record_offset is not None:
                where += f" starting at 0x{self.record_offset:X}"
            parts.append(where)
        return " ".join(parts)


class OutOfBoundsError(ITunesDBError):
    """Raised when a field read runs past the end of the buffer."""


class InvalidEncodingError(ITunesDBError):
    """Raised when a string payload is not valid UTF-16LE (or UTF-8 for URLs)."""


class InvalidTrackError(ITunesDBError):
    """Raised when a song track item declares a zero-byte file."""
