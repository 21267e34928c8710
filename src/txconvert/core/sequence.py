"""Strand-aware sequence assembly and translation.

Sequences are assembled by fetching every segment from the reference in
genomic order, concatenating them, and reverse-complementing the result
once for minus-strand transcripts.

Example:
    >>> from txconvert.core.genetic_code import GeneticCode
    >>> from txconvert.core.sequence import cds_sequence, translate
    >>> seq = cds_sequence(transcript, genome)
    >>> translation = translate(seq, GeneticCode.standard())
    >>> translation.ends_with_stop
    True
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Protocol

import attrs

from txconvert.core.genetic_code import GeneticCode
from txconvert.core.models import Transcript
from txconvert.utils.intervals import Interval
from txconvert.utils.sequences import iter_codons, reverse_complement

# =============================================================================
# Reference Provider
# =============================================================================


class ReferenceProvider(Protocol):
    """Random-access nucleotide source keyed by chromosome."""

    def sequence(self, chromosome: str, start: int, end: int) -> str:
        """Return bases ``[start, end)``.

        Raises:
            UnknownChromosome: If the chromosome is not available.
            OutOfBounds: If the range exceeds the chromosome.
        """
        ...


class SequenceMode(Enum):
    """Which part of a transcript to extract."""

    TRANSCRIPT = "transcript"
    EXONS = "exons"
    CDS = "cds"


# =============================================================================
# Sequence Assembly
# =============================================================================


def assemble(
    transcript: Transcript,
    segments: Iterable[Interval],
    reference: ReferenceProvider,
) -> str:
    """Concatenate segments in genomic order and apply the strand once."""
    ordered = sorted(segments)
    sequence = "".join(
        reference.sequence(transcript.chromosome, segment.start, segment.end)
        for segment in ordered
    )
    if transcript.is_reverse:
        sequence = reverse_complement(sequence)
    return sequence


def transcript_sequence(
    transcript: Transcript,
    reference: ReferenceProvider,
    mode: SequenceMode | str = SequenceMode.CDS,
) -> str:
    """Extract the sequence of a transcript.

    Args:
        transcript: Transcript to extract.
        reference: Sequence provider.
        mode: ``transcript`` (whole span including introns), ``exons``
            (spliced exons) or ``cds`` (coding sequence only).

    Returns:
        The sequence in 5' to 3' orientation. Empty for ``cds`` on a
        non-coding transcript.
    """
    mode = SequenceMode(mode)
    if mode is SequenceMode.TRANSCRIPT:
        segments = [Interval(transcript.tx_start, transcript.tx_end)]
    elif mode is SequenceMode.EXONS:
        segments = [exon.interval for exon in transcript.exons]
    else:
        segments = transcript.coding_intervals()
    return assemble(transcript, segments, reference)


def cds_sequence(transcript: Transcript, reference: ReferenceProvider) -> str:
    return transcript_sequence(transcript, reference, SequenceMode.CDS)


def exon_sequence(transcript: Transcript, reference: ReferenceProvider) -> str:
    return transcript_sequence(transcript, reference, SequenceMode.EXONS)


# =============================================================================
# Codon Location
# =============================================================================


def _terminal_bases(segments: list[Interval], n: int, from_left: bool) -> list[Interval]:
    """Take ``n`` bases from one end of a list of sorted segments."""
    picked = []
    remaining = n
    ordered = segments if from_left else list(reversed(segments))
    for segment in ordered:
        if remaining <= 0:
            break
        take = min(remaining, segment.length)
        if from_left:
            picked.append(Interval(segment.start, segment.start + take))
        else:
            picked.append(Interval(segment.end - take, segment.end))
        remaining -= take
    return sorted(picked)


def start_codon_intervals(transcript: Transcript) -> list[Interval]:
    """Genomic pieces of the first codon; split codons yield several pieces."""
    return _terminal_bases(
        transcript.coding_intervals(), 3, from_left=not transcript.is_reverse
    )


def stop_codon_intervals(transcript: Transcript) -> list[Interval]:
    """Genomic pieces of the last codon of the CDS."""
    return _terminal_bases(transcript.coding_intervals(), 3, from_left=transcript.is_reverse)


# =============================================================================
# Translation
# =============================================================================


@attrs.define(slots=True, frozen=True)
class Translation:
    """Result of translating a coding sequence.

    Attributes:
        protein: Amino acid sequence, stops rendered as ``*``.
        ends_with_stop: True if the final complete codon is a stop codon.
        trailing_bases: Number of bases dropped from an incomplete last codon.
    """

    protein: str
    ends_with_stop: bool
    trailing_bases: int = 0

    @property
    def has_internal_stop(self) -> bool:
        """True if a stop codon occurs before the final codon."""
        return "*" in self.protein[:-1]


def translate(sequence: str, code: GeneticCode) -> Translation:
    """Translate a coding sequence three bases at a time.

    A trailing partial codon is dropped rather than treated as an error.
    """
    protein = "".join(code.translate_codon(codon) for codon in iter_codons(sequence))
    return Translation(
        protein=protein,
        ends_with_stop=protein.endswith("*"),
        trailing_bases=len(sequence) % 3,
    )
