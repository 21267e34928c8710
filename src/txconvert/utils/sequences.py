"""Sequence manipulation utilities.

This module provides helpers for nucleotide strings:

- Reverse complement (IUPAC aware, case preserving)
- Codon splitting
- FASTA line wrapping

Example:
    >>> from txconvert.utils.sequences import reverse_complement, wrap
    >>> reverse_complement("ATGCATGC")
    'GCATGCAT'
    >>> wrap("ACGT", width=2)
    ['AC', 'GT']
"""

from __future__ import annotations

from typing import Iterator

# =============================================================================
# Constants
# =============================================================================

COMPLEMENT_TABLE = str.maketrans(
    "ACGTacgtNnRYSWKMBDHVryswkmbdhv",
    "TGCAtgcaNnYRSWMKVHDByrswmkvhdb",
)

DEFAULT_LINE_WIDTH = 80


# =============================================================================
# Complement and Reverse Complement
# =============================================================================


def reverse_complement(sequence: str) -> str:
    """Get the reverse complement of a DNA sequence.

    Handles IUPAC ambiguity codes and preserves case.

    Args:
        sequence: DNA sequence string.

    Returns:
        Reverse complement sequence.
    """
    return sequence.translate(COMPLEMENT_TABLE)[::-1]


# =============================================================================
# Codons and Formatting
# =============================================================================


def iter_codons(sequence: str, offset: int = 0) -> Iterator[str]:
    """Yield complete codons of a sequence starting at ``offset``.

    A trailing partial codon is not yielded.
    """
    for i in range(offset, len(sequence) - 2, 3):
        yield sequence[i : i + 3]


def wrap(sequence: str, width: int = DEFAULT_LINE_WIDTH) -> list[str]:
    """Split a sequence into lines of at most ``width`` characters."""
    return [sequence[i : i + width] for i in range(0, len(sequence), width)]
