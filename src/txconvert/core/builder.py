"""Two-phase construction of transcripts.

Readers feed features into a :class:`TranscriptBuilder` in whatever order
they appear in the input. No invariant is enforced while accumulating;
:meth:`TranscriptBuilder.finalize` sorts (and optionally merges) exons,
numbers them 5' to 3', assigns reading frames and validates the result
into an immutable :class:`~txconvert.core.models.Transcript`.

Note:
    With ``merge_exons=True`` overlapping and book-ended exon features (end
    of one equals start of the next) collapse into a single exon. GTF input
    needs this since CDS, UTR and codon records repeat exon coverage, but it
    also joins genuinely distinct exons separated by a zero-length intron.
    Without merging, book-ended exons stay separate and overlaps are errors.
"""

from __future__ import annotations

import logging

from txconvert.core.models import CdsStat, Exon, Strand, Transcript
from txconvert.errors import MalformedTranscript
from txconvert.utils.intervals import Interval, clip, merge_intervals

logger = logging.getLogger(__name__)


class TranscriptBuilder:
    """Accumulate exon and CDS features for a single transcript.

    Attributes:
        transcript_id: Identifier of the transcript being built.
        gene_symbol: Gene symbol, defaults to the transcript id.
        chromosome: Chromosome name.
        strand: Transcript strand.

    Example:
        >>> builder = TranscriptBuilder("tx1", chromosome="chr1", strand="-")
        >>> builder.add_exon(300, 400)
        >>> builder.add_exon(100, 200)
        >>> [e.exon_number for e in builder.finalize().exons]
        [2, 1]
    """

    def __init__(
        self,
        transcript_id: str,
        gene_symbol: str | None = None,
        chromosome: str = "",
        strand: Strand | str = Strand.UNKNOWN,
    ) -> None:
        self.transcript_id = transcript_id
        self.gene_symbol = gene_symbol
        self.chromosome = chromosome
        self.strand = strand if isinstance(strand, Strand) else Strand.from_str(strand)
        self.cds_start_stat = CdsStat.UNKNOWN
        self.cds_end_stat = CdsStat.UNKNOWN
        self.score: float | None = None

        self._exons: list[Interval] = []
        self._cds: Interval | None = None
        self._frames: list[int | None] | None = None
        self._initial_phase = 0

    # -------------------------------------------------------------------------
    # Accumulation
    # -------------------------------------------------------------------------

    def add_exon(self, start: int, end: int) -> None:
        """Add exon coverage ``[start, end)``; may overlap previous exons."""
        self._exons.append(Interval(start, end))

    def set_cds(self, start: int, end: int) -> None:
        """Set the CDS bounds, replacing any previous value."""
        self._cds = Interval(start, end)

    def extend_cds(self, start: int, end: int) -> None:
        """Grow the CDS to cover ``[start, end)`` as well."""
        if self._cds is None:
            self._cds = Interval(start, end)
        else:
            self._cds = Interval(min(self._cds.start, start), max(self._cds.end, end))

    def clear_cds(self) -> None:
        """Mark the transcript as non-coding."""
        self._cds = None

    @property
    def has_cds(self) -> bool:
        return self._cds is not None

    def set_attributes(
        self,
        gene_symbol: str | None = None,
        chromosome: str | None = None,
        strand: Strand | str | None = None,
        cds_start_stat: CdsStat | None = None,
        cds_end_stat: CdsStat | None = None,
        score: float | None = None,
    ) -> None:
        """Update transcript-level attributes. Arguments left as None are kept."""
        if gene_symbol is not None:
            self.gene_symbol = gene_symbol
        if chromosome is not None:
            self.chromosome = chromosome
        if strand is not None:
            self.strand = strand if isinstance(strand, Strand) else Strand.from_str(strand)
        if cds_start_stat is not None:
            self.cds_start_stat = cds_start_stat
        if cds_end_stat is not None:
            self.cds_end_stat = cds_end_stat
        if score is not None:
            self.score = score

    def set_frames(self, frames: list[int | None]) -> None:
        """Use explicit GTF phases, one per exon in the order they were added.

        None marks an exon without coding bases. Frames are only applied to
        coding transcripts; otherwise every exon gets None.
        """
        for frame in frames:
            if frame is not None and frame not in (0, 1, 2):
                raise ValueError(f"invalid frame: {frame}")
        self._frames = list(frames)

    def set_initial_phase(self, phase: int) -> None:
        """Set the phase of the 5'-most coding base; later frames follow from it."""
        if phase not in (0, 1, 2):
            raise ValueError(f"invalid phase: {phase}")
        self._initial_phase = phase

    # -------------------------------------------------------------------------
    # Finalization
    # -------------------------------------------------------------------------

    def finalize(self, merge_exons: bool = False) -> Transcript:
        """Validate the accumulated features and build the transcript.

        Args:
            merge_exons: Collapse overlapping and book-ended exon features.
                When False every added exon is kept and overlaps are errors.

        Returns:
            Immutable transcript with sorted and numbered exons.

        Raises:
            MalformedTranscript: If no exons were added, an exon is empty,
                exons overlap without merging, the explicit frames do not
                match the exons, or the CDS lies outside the exons.
        """
        if not self._exons:
            raise MalformedTranscript("transcript has no exons", self.transcript_id)

        for interval in self._exons:
            if interval.start < 0 or interval.start >= interval.end:
                raise MalformedTranscript(
                    f"invalid exon coordinates {interval.start}-{interval.end}",
                    self.transcript_id,
                )

        if self._frames is not None and len(self._frames) != len(self._exons):
            raise MalformedTranscript(
                f"{len(self._frames)} frames for {len(self._exons)} exons",
                self.transcript_id,
            )

        order = sorted(range(len(self._exons)), key=lambda i: self._exons[i])
        if merge_exons:
            intervals = merge_intervals(self._exons)
            if len(intervals) < len(self._exons):
                if self._frames is not None:
                    raise MalformedTranscript(
                        "explicit frames cannot follow merged exons", self.transcript_id
                    )
                logger.debug(
                    f"{self.transcript_id}: merged {len(self._exons)} exon features "
                    f"into {len(intervals)} exons"
                )
        else:
            intervals = [self._exons[i] for i in order]
            for previous, current in zip(intervals, intervals[1:]):
                if previous.overlaps(current):
                    raise MalformedTranscript(
                        f"exons {previous.start}-{previous.end} and "
                        f"{current.start}-{current.end} overlap",
                        self.transcript_id,
                    )

        cds = self._validated_cds(intervals)
        if cds is None:
            frames: list[int | None] = [None] * len(intervals)
        elif self._frames is not None:
            frames = [self._frames[i] for i in order]
        else:
            frames = _compute_frames(
                intervals, cds, self.strand is Strand.MINUS, self._initial_phase
            )

        n_exons = len(intervals)
        exons = []
        for index, (interval, frame) in enumerate(zip(intervals, frames)):
            number = n_exons - index if self.strand is Strand.MINUS else index + 1
            exons.append(Exon(interval.start, interval.end, number, frame))

        return Transcript(
            transcript_id=self.transcript_id,
            gene_symbol=self.gene_symbol if self.gene_symbol is not None else self.transcript_id,
            chromosome=self.chromosome,
            strand=self.strand,
            exons=exons,
            cds_start=cds.start if cds else None,
            cds_end=cds.end if cds else None,
            cds_start_stat=self.cds_start_stat,
            cds_end_stat=self.cds_end_stat,
            score=self.score,
        )

    def _validated_cds(self, exons: list[Interval]) -> Interval | None:
        """Check the CDS against the exon union. Empty CDS means non-coding."""
        if self._cds is None:
            return None

        cds = self._cds
        if cds.start > cds.end:
            raise MalformedTranscript(
                f"CDS start {cds.start} is after CDS end {cds.end}", self.transcript_id
            )
        if cds.start == cds.end:
            return None

        start_inside = any(exon.start <= cds.start < exon.end for exon in exons)
        end_inside = any(exon.start < cds.end <= exon.end for exon in exons)
        if not (start_inside and end_inside):
            raise MalformedTranscript(
                f"CDS {cds.start}-{cds.end} lies outside the exons", self.transcript_id
            )
        return cds


def _compute_frames(
    exons: list[Interval], cds: Interval | None, reverse: bool, initial_phase: int = 0
) -> list[int | None]:
    """GTF phase per exon, walking coding exons in transcript order.

    ``initial_phase`` is the phase of the 5'-most coding base, nonzero only
    when the CDS starts inside a codon.
    """
    frames: list[int | None] = [None] * len(exons)
    if cds is None:
        return frames

    order = range(len(exons) - 1, -1, -1) if reverse else range(len(exons))
    coding_bases = 0
    for index in order:
        coding = clip(exons[index], cds.start, cds.end)
        if coding is None:
            continue
        frames[index] = (initial_phase - coding_bases) % 3
        coding_bases += coding.length

    return frames
