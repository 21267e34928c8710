"""Canonical transcript model.

The whole engine works on these two value types. Readers produce them via
:class:`txconvert.core.builder.TranscriptBuilder`, writers only read them.

Coordinates are 0-based, half-open. Exons are stored in ascending genomic
order regardless of strand; the strand decides traversal direction for
exon numbering, frames and sequence assembly.

Example:
    >>> from txconvert.core.builder import TranscriptBuilder
    >>> builder = TranscriptBuilder("NM_1", chromosome="chr1", strand="+")
    >>> builder.add_exon(100, 200)
    >>> builder.set_cds(120, 180)
    >>> tx = builder.finalize()
    >>> tx.cds_length
    60
"""

from __future__ import annotations

from enum import Enum

import attrs

from txconvert.utils.intervals import Interval, clip

# =============================================================================
# Enums
# =============================================================================


class Strand(Enum):
    """Genomic strand of a transcript."""

    PLUS = "+"
    MINUS = "-"
    UNKNOWN = "."

    @classmethod
    def from_str(cls, value: str) -> Strand:
        """Parse ``+``, ``-`` or ``.``.

        Raises:
            ValueError: If the value is not a valid strand.
        """
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"invalid strand {value!r}") from None

    def __str__(self) -> str:
        return self.value


class CdsStat(Enum):
    """Completeness of a CDS boundary, as used by RefGene/GenePredExt."""

    NONE = "none"
    UNKNOWN = "unk"
    INCOMPLETE = "incmpl"
    COMPLETE = "cmpl"

    @classmethod
    def from_str(cls, value: str) -> CdsStat:
        """Parse a completeness flag, accepting common spellings.

        Raises:
            ValueError: If the value is not a known flag.
        """
        normalized = _CDS_STAT_ALIASES.get(value.strip().lower())
        if normalized is None:
            raise ValueError(f"invalid cds stat {value!r}")
        return normalized

    def __str__(self) -> str:
        return self.value


_CDS_STAT_ALIASES = {
    "none": CdsStat.NONE,
    "unk": CdsStat.UNKNOWN,
    "unknown": CdsStat.UNKNOWN,
    "incmpl": CdsStat.INCOMPLETE,
    "incompl": CdsStat.INCOMPLETE,
    "incomplete": CdsStat.INCOMPLETE,
    "cmpl": CdsStat.COMPLETE,
    "compl": CdsStat.COMPLETE,
    "complete": CdsStat.COMPLETE,
}


# =============================================================================
# Data Models
# =============================================================================


@attrs.define(slots=True, frozen=True)
class Exon:
    """A single exon of a finalized transcript.

    Attributes:
        start: Start position (0-based, inclusive).
        end: End position (0-based, exclusive).
        exon_number: 1-based position in 5' to 3' order.
        frame: GTF phase (0, 1 or 2) of the first coding base, or None
            if the exon has no coding bases.
    """

    start: int
    end: int
    exon_number: int
    frame: int | None = None

    @property
    def length(self) -> int:
        """Exon length in nucleotides."""
        return self.end - self.start

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)


@attrs.define(slots=True, frozen=True)
class Transcript:
    """A finalized, immutable transcript.

    Attributes:
        transcript_id: Transcript identifier (RefGene ``name``).
        gene_symbol: Gene symbol (RefGene ``name2``, GTF ``gene_id``).
        chromosome: Chromosome name, kept verbatim.
        strand: Transcript strand.
        exons: Exons sorted by ascending genomic start.
        cds_start: Genomic start of the CDS (0-based) or None if non-coding.
        cds_end: Genomic end of the CDS (exclusive) or None if non-coding.
        cds_start_stat: Completeness of the left (lower coordinate) CDS end.
        cds_end_stat: Completeness of the right (higher coordinate) CDS end.
        score: Optional score carried over from the input.
    """

    transcript_id: str
    gene_symbol: str
    chromosome: str
    strand: Strand
    exons: tuple[Exon, ...] = attrs.field(converter=tuple)
    cds_start: int | None = None
    cds_end: int | None = None
    cds_start_stat: CdsStat = CdsStat.UNKNOWN
    cds_end_stat: CdsStat = CdsStat.UNKNOWN
    score: float | None = None

    # -------------------------------------------------------------------------
    # Location
    # -------------------------------------------------------------------------

    @property
    def tx_start(self) -> int:
        """Genomic start of the first exon."""
        return self.exons[0].start

    @property
    def tx_end(self) -> int:
        """Genomic end of the last exon."""
        return self.exons[-1].end

    @property
    def exon_count(self) -> int:
        return len(self.exons)

    @property
    def is_reverse(self) -> bool:
        return self.strand is Strand.MINUS

    def exons_in_transcript_order(self) -> list[Exon]:
        """Exons ordered 5' to 3'."""
        if self.is_reverse:
            return list(reversed(self.exons))
        return list(self.exons)

    @property
    def exon_length(self) -> int:
        """Total exonic (spliced) length."""
        return sum(exon.length for exon in self.exons)

    # -------------------------------------------------------------------------
    # Coding Region
    # -------------------------------------------------------------------------

    @property
    def is_coding(self) -> bool:
        return self.cds_start is not None and self.cds_end is not None

    def exon_cds(self, exon: Exon) -> Interval | None:
        """Return the coding part of an exon, or None if it is untranslated."""
        if not self.is_coding:
            return None
        return clip(exon.interval, self.cds_start, self.cds_end)

    def coding_intervals(self) -> list[Interval]:
        """Coding segments of all exons in genomic order."""
        segments = []
        for exon in self.exons:
            segment = self.exon_cds(exon)
            if segment is not None:
                segments.append(segment)
        return segments

    @property
    def coding_exons(self) -> list[Exon]:
        """Exons with at least one coding base, in genomic order."""
        return [exon for exon in self.exons if self.exon_cds(exon) is not None]

    @property
    def cds_length(self) -> int:
        """Number of coding nucleotides (0 for non-coding transcripts)."""
        return sum(segment.length for segment in self.coding_intervals())

    def utr_intervals(self, exon: Exon) -> tuple[Interval | None, Interval | None]:
        """Untranslated parts of a coding transcript's exon.

        Returns:
            ``(left, right)`` genomic intervals lying before ``cds_start`` and
            after ``cds_end``. Both are None for non-coding transcripts.
        """
        if not self.is_coding:
            return None, None
        left = clip(exon.interval, exon.start, self.cds_start)
        right = clip(exon.interval, self.cds_end, exon.end)
        return left, right

    # -------------------------------------------------------------------------
    # Completeness
    # -------------------------------------------------------------------------

    @property
    def five_prime_stat(self) -> CdsStat:
        """Completeness flag of the CDS end carrying the start codon."""
        return self.cds_end_stat if self.is_reverse else self.cds_start_stat

    @property
    def three_prime_stat(self) -> CdsStat:
        """Completeness flag of the CDS end carrying the stop codon."""
        return self.cds_start_stat if self.is_reverse else self.cds_end_stat

    @property
    def cds_start_complete(self) -> bool:
        """True if the first codon is a validated start codon."""
        return self.five_prime_stat is CdsStat.COMPLETE

    @property
    def cds_end_complete(self) -> bool:
        """True if the last codon is a validated stop codon."""
        return self.three_prime_stat is CdsStat.COMPLETE

    def __str__(self) -> str:
        return (
            f"{self.gene_symbol}:{self.transcript_id} "
            f"{self.chromosome}:{self.tx_start}-{self.tx_end}({self.strand})"
        )
