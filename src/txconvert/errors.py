"""Exception types raised by txconvert.

All errors derive from :class:`TxConvertError` so that callers (and the
command line) can handle every library failure in one place while still
inspecting the structured fields of the concrete error.

Example:
    >>> from txconvert.errors import ParseError
    >>> err = ParseError("input.gtf:12", "end < start")
    >>> str(err)
    'input.gtf:12: end < start'
"""

from __future__ import annotations


class TxConvertError(Exception):
    """Base exception for all txconvert errors."""


# =============================================================================
# Input Errors
# =============================================================================


class ParseError(TxConvertError):
    """A line or column of an input file could not be parsed.

    Attributes:
        location: Where the problem occurred (e.g. ``"line 12"``).
        reason: Human readable description.
    """

    def __init__(self, location: str | int, reason: str) -> None:
        super().__init__(f"{location}: {reason}")
        self.location = location
        self.reason = reason


class MalformedTranscript(TxConvertError):
    """A transcript violates a model invariant at finalize time."""

    def __init__(self, reason: str, transcript_id: str = "") -> None:
        message = f"{transcript_id}: {reason}" if transcript_id else reason
        super().__init__(message)
        self.reason = reason
        self.transcript_id = transcript_id


# =============================================================================
# Reference Sequence Errors
# =============================================================================


class SequenceError(TxConvertError):
    """Reference sequence lookup failed."""

    def __init__(self, message: str, chromosome: str = "") -> None:
        super().__init__(message)
        self.chromosome = chromosome


class UnknownChromosome(SequenceError):
    """The chromosome is not present in the reference."""

    def __init__(self, chromosome: str) -> None:
        super().__init__(f"Unknown chromosome: {chromosome}", chromosome)


class OutOfBounds(SequenceError):
    """The requested range lies outside the chromosome."""

    def __init__(self, chromosome: str, start: int, end: int, length: int) -> None:
        super().__init__(
            f"Region {chromosome}:{start}-{end} exceeds chromosome length {length}",
            chromosome,
        )
        self.start = start
        self.end = end
        self.length = length


# =============================================================================
# Serialization and Configuration Errors
# =============================================================================


class SerializationError(TxConvertError):
    """Binary cache could not be written or read."""


class DeserializationError(SerializationError):
    """Binary cache does not match the expected schema."""


class ConfigError(TxConvertError, ValueError):
    """Invalid configuration value, e.g. a bad genetic code specification."""
