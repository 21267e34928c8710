"""BED12 output.

One row per transcript with ``thickStart``/``thickEnd`` set to the CDS and
exon blocks relative to the transcript start. Non-coding transcripts get
an empty thick region (``thickStart == thickEnd == txEnd``).
"""

from __future__ import annotations

from typing import TextIO

from txconvert.config import BED_RGB
from txconvert.core.models import Transcript
from txconvert.io.base import TranscriptWriter


def format_line(transcript: Transcript, rgb: str = BED_RGB) -> str:
    """Format a transcript as a BED12 line."""
    if transcript.is_coding:
        thick_start, thick_end = transcript.cds_start, transcript.cds_end
    else:
        thick_start = thick_end = transcript.tx_end

    columns = [
        transcript.chromosome,
        str(transcript.tx_start),
        str(transcript.tx_end),
        f"{transcript.gene_symbol}:{transcript.transcript_id}",
        "0" if transcript.score is None else f"{transcript.score:g}",
        str(transcript.strand),
        str(thick_start),
        str(thick_end),
        rgb,
        str(transcript.exon_count),
        ",".join(str(exon.length) for exon in transcript.exons),
        ",".join(str(exon.start - transcript.tx_start) for exon in transcript.exons),
    ]
    return "\t".join(columns) + "\n"


class BedWriter(TranscriptWriter):
    """Write transcripts as BED12 rows."""

    def __init__(self, handle: TextIO, rgb: str = BED_RGB) -> None:
        super().__init__(handle)
        self.rgb = rgb

    def write_transcript(self, transcript: Transcript) -> None:
        self._handle.write(format_line(transcript, self.rgb))
