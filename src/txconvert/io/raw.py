"""Raw debug dump of the internal model.

Not a stable format. Each transcript is written as a header line followed
by one indented line per exon in genomic order, all in 0-based, half-open
coordinates.
"""

from __future__ import annotations

from txconvert.core.models import Transcript
from txconvert.io.base import TranscriptWriter


def format_transcript(transcript: Transcript) -> str:
    if transcript.is_coding:
        cds = f"{transcript.cds_start}-{transcript.cds_end}"
    else:
        cds = "none"
    lines = [
        f"Transcript {transcript.transcript_id} gene={transcript.gene_symbol} "
        f"{transcript.chromosome}:{transcript.tx_start}-{transcript.tx_end} "
        f"strand={transcript.strand} cds={cds} "
        f"stat={transcript.cds_start_stat}/{transcript.cds_end_stat} "
        f"exons={transcript.exon_count}"
    ]
    for exon in transcript.exons:
        coding = transcript.exon_cds(exon)
        coding_str = f"{coding.start}-{coding.end}" if coding else "-"
        frame_str = "." if exon.frame is None else str(exon.frame)
        lines.append(
            f"  exon {exon.exon_number}: {exon.start}-{exon.end} "
            f"cds={coding_str} frame={frame_str}"
        )
    return "\n".join(lines) + "\n"


class RawWriter(TranscriptWriter):
    """Write the raw debug representation of each transcript."""

    def write_transcript(self, transcript: Transcript) -> None:
        self._handle.write(format_transcript(transcript))
