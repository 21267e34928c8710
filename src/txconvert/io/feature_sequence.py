"""Per-feature sequence table.

Each transcript is broken into its 5'UTR, CDS and 3'UTR segments (one
segment per exon part), or into plain exons for non-coding transcripts,
and every segment is written with its strand-corrected sequence:

``gene  transcript  chrom  start  end  strand  feature  sequence``

``start`` is 1-based and ``end`` inclusive, as in GTF. Rows follow the
transcript 5' to 3'.
"""

from __future__ import annotations

from typing import Iterator, TextIO

from txconvert.core.models import Transcript
from txconvert.core.sequence import ReferenceProvider
from txconvert.io.base import TranscriptWriter
from txconvert.utils.intervals import Interval
from txconvert.utils.sequences import reverse_complement

FEATURE_UTR5 = "5UTR"
FEATURE_CDS = "CDS"
FEATURE_UTR3 = "3UTR"
FEATURE_NON_CODING = "non-coding"


def iter_features(transcript: Transcript) -> Iterator[tuple[str, Interval]]:
    """Yield ``(feature_type, interval)`` for every segment, 5' to 3'."""
    for exon in transcript.exons_in_transcript_order():
        if not transcript.is_coding:
            yield FEATURE_NON_CODING, exon.interval
            continue

        left, right = transcript.utr_intervals(exon)
        coding = transcript.exon_cds(exon)
        if transcript.is_reverse:
            segments = [(FEATURE_UTR5, right), (FEATURE_CDS, coding), (FEATURE_UTR3, left)]
        else:
            segments = [(FEATURE_UTR5, left), (FEATURE_CDS, coding), (FEATURE_UTR3, right)]

        for feature, interval in segments:
            if interval is not None:
                yield feature, interval


class FeatureSequenceWriter(TranscriptWriter):
    """Write one tab separated row per transcript segment."""

    def __init__(self, handle: TextIO, reference: ReferenceProvider) -> None:
        super().__init__(handle)
        self.reference = reference

    def format_rows(self, transcript: Transcript) -> list[str]:
        rows = []
        for feature, interval in iter_features(transcript):
            sequence = self.reference.sequence(
                transcript.chromosome, interval.start, interval.end
            )
            if transcript.is_reverse:
                sequence = reverse_complement(sequence)
            columns = [
                transcript.gene_symbol,
                transcript.transcript_id,
                transcript.chromosome,
                str(interval.start + 1),
                str(interval.end),
                str(transcript.strand),
                feature,
                sequence,
            ]
            rows.append("\t".join(columns) + "\n")
        return rows

    def write_transcript(self, transcript: Transcript) -> None:
        self._handle.writelines(self.format_rows(transcript))
