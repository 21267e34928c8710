"""RefGene, GenePred and GenePredExt file handling.

The three formats share one column layout (UCSC ``genePred``):

=====  ============  ======================================
Index  Column        Notes
=====  ============  ======================================
0      name          transcript id
1      chrom
2      strand
3      txStart       0-based
4      txEnd
5      cdsStart      equal to cdsEnd for non-coding
6      cdsEnd
7      exonCount
8      exonStarts    comma terminated list
9      exonEnds      comma terminated list
10     score         GenePredExt only
11     name2         gene symbol
12     cdsStartStat  none, unk, incmpl, cmpl
13     cdsEndStat
14     exonFrames    UCSC frames, -1 for non-coding exons
=====  ============  ======================================

RefGene prepends a ``bin`` column. GenePred is columns 0-9 and
GenePredExt columns 0-14.

Example:
    >>> from txconvert.io.refgene import RefGeneReader, RefGeneWriter
    >>> with open("refGene.txt") as handle:
    ...     transcripts = list(RefGeneReader(handle))
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from txconvert.core.builder import TranscriptBuilder
from txconvert.core.models import CdsStat, Strand, Transcript
from txconvert.errors import ParseError
from txconvert.io.base import TranscriptWriter, join_list, split_list

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

COL_NAME = 0
COL_CHROM = 1
COL_STRAND = 2
COL_TX_START = 3
COL_TX_END = 4
COL_CDS_START = 5
COL_CDS_END = 6
COL_EXON_COUNT = 7
COL_EXON_STARTS = 8
COL_EXON_ENDS = 9
COL_SCORE = 10
COL_NAME2 = 11
COL_CDS_START_STAT = 12
COL_CDS_END_STAT = 13
COL_EXON_FRAMES = 14

# Valid column counts once the RefGene bin column is removed
VALID_COLUMN_COUNTS = (10, 11, 15)

VALID_EXON_FRAMES = {"-1", "0", "1", "2"}


class Variant(Enum):
    """Column layout of a genePred-like file."""

    REFGENE = "refgene"
    GENEPRED = "genepred"
    GENEPREDEXT = "genepredext"


# =============================================================================
# Frame Conversion
# =============================================================================


def gtf_to_ucsc_frame(frame: int | None) -> int:
    """Convert a GTF phase to a UCSC exon frame (-1 for non-coding)."""
    if frame is None:
        return -1
    return (3 - frame) % 3


def ucsc_to_gtf_frame(frame: int) -> int | None:
    """Convert a UCSC exon frame to a GTF phase (None for -1)."""
    if frame < 0:
        return None
    return (3 - frame) % 3


# =============================================================================
# Reader
# =============================================================================


def _parse_int(value: str, column: str, location: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ParseError(location, f"invalid {column} {value!r}") from None


def parse_line(
    line: str, variant: Variant = Variant.REFGENE, location: str | int = ""
) -> Transcript | None:
    """Parse one genePred-like line into a transcript.

    Args:
        line: Raw tab separated line.
        variant: Column layout of the input.
        location: Location used in error messages.

    Returns:
        The transcript, or None for comments and blank lines.

    Raises:
        ParseError: If the column count or any column is invalid.
        MalformedTranscript: If the exons and CDS are inconsistent.
    """
    line = line.rstrip("\r\n")
    if not line.strip() or line.startswith("#"):
        return None

    cols = line.split("\t")
    if variant is Variant.REFGENE:
        _parse_int(cols[0], "bin", location)
        cols = cols[1:]
    if len(cols) not in VALID_COLUMN_COUNTS:
        raise ParseError(
            location,
            f"invalid number of columns for {variant.value}: {len(cols)}",
        )

    try:
        strand = Strand.from_str(cols[COL_STRAND])
    except ValueError as e:
        raise ParseError(location, str(e)) from None

    exon_count = _parse_int(cols[COL_EXON_COUNT], "exonCount", location)
    starts = [_parse_int(v, "exonStarts", location) for v in split_list(cols[COL_EXON_STARTS])]
    ends = [_parse_int(v, "exonEnds", location) for v in split_list(cols[COL_EXON_ENDS])]
    if len(starts) != len(ends):
        raise ParseError(
            location, f"{len(starts)} exonStarts but {len(ends)} exonEnds"
        )
    if len(starts) != exon_count:
        raise ParseError(location, f"exonCount {exon_count} but {len(starts)} exons listed")

    cds_start = _parse_int(cols[COL_CDS_START], "cdsStart", location)
    cds_end = _parse_int(cols[COL_CDS_END], "cdsEnd", location)
    tx_start = _parse_int(cols[COL_TX_START], "txStart", location)
    tx_end = _parse_int(cols[COL_TX_END], "txEnd", location)
    if tx_end < tx_start:
        raise ParseError(location, f"txEnd {tx_end} before txStart {tx_start}")

    builder = TranscriptBuilder(
        cols[COL_NAME], chromosome=cols[COL_CHROM], strand=strand
    )
    for start, end in zip(starts, ends):
        builder.add_exon(start, end)
    if cds_start != cds_end:
        builder.set_cds(cds_start, cds_end)

    if len(cols) >= 15:
        builder.set_attributes(gene_symbol=cols[COL_NAME2] or None)
        try:
            builder.set_attributes(
                cds_start_stat=CdsStat.from_str(cols[COL_CDS_START_STAT]),
                cds_end_stat=CdsStat.from_str(cols[COL_CDS_END_STAT]),
            )
        except ValueError as e:
            raise ParseError(location, str(e)) from None

        frames = split_list(cols[COL_EXON_FRAMES])
        if len(frames) != exon_count:
            raise ParseError(
                location, f"exonCount {exon_count} but {len(frames)} exonFrames listed"
            )
        invalid = [frame for frame in frames if frame.strip() not in VALID_EXON_FRAMES]
        if invalid:
            raise ParseError(location, f"invalid exon frame {invalid[0]!r}")
        builder.set_frames([ucsc_to_gtf_frame(int(frame)) for frame in frames])

    return builder.finalize()


class RefGeneReader:
    """Parse RefGene, GenePred or GenePredExt lines into transcripts.

    Example:
        >>> with open("genes.genePred") as handle:
        ...     for tx in RefGeneReader(handle, variant=Variant.GENEPRED):
        ...         print(tx.transcript_id)
    """

    def __init__(
        self,
        handle: Iterable[str],
        variant: Variant = Variant.REFGENE,
        name: str = "<input>",
    ) -> None:
        self._handle = handle
        self.variant = variant
        self.name = name

    def __iter__(self) -> Iterator[Transcript]:
        n_transcripts = 0
        for lineno, line in enumerate(self._handle, start=1):
            transcript = parse_line(line, self.variant, f"{self.name}:{lineno}")
            if transcript is None:
                continue
            n_transcripts += 1
            yield transcript
        logger.info(f"Read {n_transcripts} {self.variant.value} transcripts from {self.name}")


def read_refgene(path: Path | str, variant: Variant = Variant.REFGENE) -> list[Transcript]:
    """Read all transcripts from a RefGene-like file."""
    path = Path(path)
    with open(path) as handle:
        return list(RefGeneReader(handle, variant=variant, name=path.name))


# =============================================================================
# Writer
# =============================================================================


def format_columns(transcript: Transcript) -> list[str]:
    """Format the 16 RefGene columns of a transcript."""
    if transcript.is_coding:
        cds_start, cds_end = transcript.cds_start, transcript.cds_end
    else:
        cds_start = cds_end = transcript.tx_end

    return [
        "0",
        transcript.transcript_id,
        transcript.chromosome,
        str(transcript.strand),
        str(transcript.tx_start),
        str(transcript.tx_end),
        str(cds_start),
        str(cds_end),
        str(transcript.exon_count),
        join_list(exon.start for exon in transcript.exons),
        join_list(exon.end for exon in transcript.exons),
        "0",
        transcript.gene_symbol,
        str(transcript.cds_start_stat),
        str(transcript.cds_end_stat),
        join_list(gtf_to_ucsc_frame(exon.frame) for exon in transcript.exons),
    ]


class RefGeneWriter(TranscriptWriter):
    """Write transcripts as RefGene, GenePred or GenePredExt rows.

    Example:
        >>> writer = RefGeneWriter(sys.stdout, variant=Variant.GENEPREDEXT)
        >>> writer.write_transcript(transcript)
    """

    def __init__(self, handle: TextIO, variant: Variant = Variant.REFGENE) -> None:
        super().__init__(handle)
        self.variant = variant

    def format_line(self, transcript: Transcript) -> str:
        columns = format_columns(transcript)
        if self.variant is Variant.GENEPRED:
            columns = columns[1:11]
        elif self.variant is Variant.GENEPREDEXT:
            columns = columns[1:16]
        return "\t".join(columns) + "\n"

    def write_transcript(self, transcript: Transcript) -> None:
        self._handle.write(self.format_line(transcript))
