"""Shared writer plumbing.

Every output format is a :class:`TranscriptWriter`: it consumes finalized
transcripts one at a time and never mutates them. Formats that need the
whole transcript set (e.g. gene-level consensus) buffer in
:meth:`TranscriptWriter.write_transcript` and emit in
:meth:`TranscriptWriter.close`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, TextIO

from txconvert.core.models import Transcript

logger = logging.getLogger(__name__)


class TranscriptWriter:
    """Base class of all transcript writers.

    Attributes:
        count: Number of transcripts written so far.

    Example:
        >>> with GtfWriter(sys.stdout) as writer:
        ...     writer.write_transcripts(transcripts)
    """

    def __init__(self, handle: TextIO | None) -> None:
        self._handle = handle
        self.count = 0

    def __enter__(self) -> TranscriptWriter:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, *args: Any) -> None:
        """Context manager exit; buffered output is dropped on error."""
        if exc_type is None:
            self.close()

    def write_transcript(self, transcript: Transcript) -> None:
        raise NotImplementedError

    def write_transcripts(self, transcripts: Iterable[Transcript]) -> int:
        """Write transcripts in input order.

        Returns:
            Number of transcripts passed to the writer.
        """
        n = 0
        for transcript in transcripts:
            self.write_transcript(transcript)
            n += 1
        self.count += n
        return n

    def close(self) -> None:
        """Flush buffered output. The underlying handle is left open."""
        if self._handle is not None:
            self._handle.flush()


def split_list(value: str) -> list[str]:
    """Split a comma separated (optionally comma terminated) column."""
    value = value.strip()
    if not value:
        return []
    return value.rstrip(",").split(",")


def join_list(values: Iterable[Any]) -> str:
    """Join values as a comma terminated list (UCSC style)."""
    return "".join(f"{value}," for value in values)
