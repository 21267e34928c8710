"""FASTA handling: reference genome access and sequence output.

This module provides random access to a reference genome stored in FASTA
format, using pyfaidx for indexed lookups, and the writers that emit
transcript sequences as FASTA records.

Features:
    - Random access to sequences by region
    - Coordinate validation against chromosome lengths
    - FASTA output of transcript, exon or CDS sequence
    - One FASTA file per transcript

Example:
    >>> from txconvert.io.fasta import ReferenceGenome, FastaWriter
    >>> genome = ReferenceGenome("genome.fa")
    >>> genome.sequence("chr1", 1000, 1010)
    'ACGTACGTAC'
    >>> with FastaWriter(sys.stdout, genome, mode="exons") as writer:
    ...     writer.write_transcripts(transcripts)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, TextIO

import pyfaidx

from txconvert.config import DEFAULT_LINE_WIDTH
from txconvert.core.models import Transcript
from txconvert.core.sequence import ReferenceProvider, SequenceMode, transcript_sequence
from txconvert.errors import OutOfBounds, UnknownChromosome
from txconvert.io.base import TranscriptWriter
from txconvert.utils.sequences import wrap

logger = logging.getLogger(__name__)


# =============================================================================
# Reference Genome
# =============================================================================


class ReferenceGenome:
    """Indexed FASTA access using pyfaidx.

    Attributes:
        path: Path to the FASTA file.

    Example:
        >>> genome = ReferenceGenome("genome.fa")
        >>> print(f"Chromosomes: {list(genome.chromosome_lengths)[:5]}")
        >>> seq = genome.sequence("chr1", 1000, 2000)
    """

    def __init__(self, fasta_path: Path | str) -> None:
        """Initialize the reference.

        Args:
            fasta_path: Path to FASTA file. Will create .fai index if needed.

        Raises:
            FileNotFoundError: If FASTA file doesn't exist.
        """
        self.path = Path(fasta_path)
        if not self.path.exists():
            raise FileNotFoundError(f"FASTA file not found: {self.path}")

        self._fasta: pyfaidx.Fasta | None = None
        self._lengths: dict[str, int] = {}

        self._open()

    def _open(self) -> None:
        """Open the FASTA file with pyfaidx."""
        # pyfaidx will create index if it doesn't exist
        self._fasta = pyfaidx.Fasta(
            str(self.path),
            sequence_always_upper=False,  # Preserve case for soft-masking
            read_ahead=10000,
            rebuild=False,
        )
        self._lengths = {name: len(self._fasta[name]) for name in self._fasta.keys()}

        logger.info(
            f"Opened reference: {self.path.name}, "
            f"{len(self._lengths)} chromosomes, "
            f"{sum(self._lengths.values()):,} bp total"
        )

    @property
    def chromosome_lengths(self) -> dict[str, int]:
        """Return {chromosome: length} mapping."""
        return self._lengths.copy()

    def __enter__(self) -> ReferenceGenome:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the FASTA file."""
        if self._fasta is not None:
            self._fasta.close()
            self._fasta = None

    def length(self, chromosome: str) -> int:
        """Get the length of a chromosome.

        Raises:
            UnknownChromosome: If the chromosome is not in the FASTA.
        """
        if chromosome not in self._lengths:
            raise UnknownChromosome(chromosome)
        return self._lengths[chromosome]

    def sequence(self, chromosome: str, start: int, end: int) -> str:
        """Get sequence for region (0-based, half-open coordinates).

        Args:
            chromosome: Chromosome name.
            start: Start position (0-based, inclusive).
            end: End position (0-based, exclusive).

        Returns:
            Sequence string on the forward strand.

        Raises:
            UnknownChromosome: If the chromosome is not in the FASTA.
            OutOfBounds: If the region is outside the chromosome.
        """
        if self._fasta is None:
            raise RuntimeError("FASTA file not opened")

        length = self.length(chromosome)
        if start < 0 or end > length or start > end:
            raise OutOfBounds(chromosome, start, end, length)
        if start == end:
            return ""

        return str(self._fasta[chromosome][start:end])

    def validate_region(self, chromosome: str, start: int, end: int) -> bool:
        """Check if a region lies within a known chromosome."""
        length = self._lengths.get(chromosome)
        if length is None:
            return False
        return 0 <= start <= end <= length

    def __contains__(self, chromosome: str) -> bool:
        """Check if chromosome exists in FASTA."""
        return chromosome in self._lengths

    def __len__(self) -> int:
        """Return number of chromosomes."""
        return len(self._lengths)


# =============================================================================
# FASTA Output
# =============================================================================


def fasta_header(transcript: Transcript) -> str:
    return f">{transcript.gene_symbol}:{transcript.transcript_id}"


def format_record(header: str, sequence: str, line_width: int = DEFAULT_LINE_WIDTH) -> str:
    """Format a FASTA record with wrapped sequence lines."""
    lines = [header, *wrap(sequence, line_width)]
    return "\n".join(lines) + "\n"


class FastaWriter(TranscriptWriter):
    """Write the strand-corrected sequence of each transcript.

    Attributes:
        mode: ``transcript``, ``exons`` or ``cds``.
        line_width: Maximum sequence line length.
    """

    def __init__(
        self,
        handle: TextIO | None,
        reference: ReferenceProvider,
        mode: SequenceMode | str = SequenceMode.CDS,
        line_width: int = DEFAULT_LINE_WIDTH,
    ) -> None:
        super().__init__(handle)
        self.reference = reference
        self.mode = SequenceMode(mode)
        self.line_width = line_width

    def format_transcript(self, transcript: Transcript) -> str | None:
        """Format one record; None for ``cds`` mode on non-coding transcripts."""
        if self.mode is SequenceMode.CDS and not transcript.is_coding:
            logger.debug(f"Skipping non-coding transcript {transcript.transcript_id}")
            return None
        sequence = transcript_sequence(transcript, self.reference, self.mode)
        return format_record(fasta_header(transcript), sequence, self.line_width)

    def write_transcript(self, transcript: Transcript) -> None:
        record = self.format_transcript(transcript)
        if record is not None:
            self._handle.write(record)


class FastaSplitWriter(FastaWriter):
    """Write each transcript into its own ``<transcript_id>.fasta`` file.

    Example:
        >>> writer = FastaSplitWriter("sequences/", genome, mode="cds")
        >>> writer.write_transcripts(transcripts)
    """

    def __init__(
        self,
        output_dir: Path | str,
        reference: ReferenceProvider,
        mode: SequenceMode | str = SequenceMode.CDS,
        line_width: int = DEFAULT_LINE_WIDTH,
    ) -> None:
        super().__init__(None, reference, mode, line_width)
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, transcript: Transcript) -> Path:
        return self.output_dir / f"{transcript.transcript_id}.fasta"

    def write_transcript(self, transcript: Transcript) -> None:
        record = self.format_transcript(transcript)
        if record is None:
            return
        with open(self.path_for(transcript), "w") as f:
            f.write(record)
