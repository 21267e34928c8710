"""Core transcript model and algorithms for txconvert.

This module contains the canonical data structures and the
format-independent algorithms operating on them:

- Transcript and exon models
- Two-phase transcript builder
- Genetic codes and translation
- Strand-aware sequence assembly
- Gene-level consensus merging

Example:
    >>> from txconvert.core import TranscriptBuilder
    >>> builder = TranscriptBuilder("NM_1", "GENE1", "chr1", "+")
    >>> builder.add_exon(0, 90)
    >>> builder.finalize().exon_count
    1
"""

from txconvert.core.builder import TranscriptBuilder
from txconvert.core.consensus import ConsensusGene, merge_gene, merge_transcripts
from txconvert.core.genetic_code import GeneticCode, GeneticCodeTable
from txconvert.core.models import CdsStat, Exon, Strand, Transcript
from txconvert.core.sequence import (
    ReferenceProvider,
    SequenceMode,
    Translation,
    cds_sequence,
    exon_sequence,
    transcript_sequence,
    translate,
)

__all__: list[str] = [
    # Models
    "CdsStat",
    "Exon",
    "Strand",
    "Transcript",
    "TranscriptBuilder",
    # Genetic code and sequence
    "GeneticCode",
    "GeneticCodeTable",
    "ReferenceProvider",
    "SequenceMode",
    "Translation",
    "cds_sequence",
    "exon_sequence",
    "transcript_sequence",
    "translate",
    # Consensus
    "ConsensusGene",
    "merge_gene",
    "merge_transcripts",
]
