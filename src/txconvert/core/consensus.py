"""Gene-level consensus of transcript exons.

All transcripts sharing a gene symbol are collapsed into a single
representative exon set: the union of their exon intervals, with
overlapping or touching exons merged. The result does not depend on the
order in which transcripts are added.

Example:
    >>> from txconvert.core.consensus import merge_transcripts
    >>> for gene in merge_transcripts(transcripts):
    ...     print(gene.name, gene.tx_start, gene.tx_end, len(gene.exons))
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Iterable

import attrs

from txconvert.core.models import Strand, Transcript
from txconvert.utils.intervals import Interval, merge_intervals


@attrs.define(slots=True, frozen=True)
class ConsensusGene:
    """Merged exon structure of one gene.

    Attributes:
        name: Gene symbol.
        chromosome: Chromosome name.
        strand: Gene strand.
        exons: Merged exon intervals, sorted by start.
    """

    name: str
    chromosome: str
    strand: Strand
    exons: tuple[Interval, ...] = attrs.field(converter=tuple)

    @property
    def tx_start(self) -> int:
        return self.exons[0].start

    @property
    def tx_end(self) -> int:
        return self.exons[-1].end


def merge_gene(transcripts: Iterable[Transcript]) -> ConsensusGene:
    """Merge the exons of transcripts belonging to one gene.

    Raises:
        ValueError: If no transcripts are given.
    """
    transcripts = list(transcripts)
    if not transcripts:
        raise ValueError("cannot merge an empty set of transcripts")

    first = transcripts[0]
    exons = merge_intervals(exon.interval for tx in transcripts for exon in tx.exons)
    return ConsensusGene(first.gene_symbol, first.chromosome, first.strand, exons)


def merge_transcripts(transcripts: Iterable[Transcript]) -> list[ConsensusGene]:
    """Group transcripts by gene and merge each group.

    Transcripts of the same symbol on different chromosomes or strands are
    kept as separate genes.

    Returns:
        Consensus genes sorted by chromosome, start and name.
    """
    groups: OrderedDict[tuple[str, str, Strand], list[Transcript]] = OrderedDict()
    for tx in transcripts:
        key = (tx.gene_symbol, tx.chromosome, tx.strand)
        groups.setdefault(key, []).append(tx)

    genes = [merge_gene(group) for group in groups.values()]
    genes.sort(key=lambda gene: (gene.chromosome, gene.tx_start, gene.name, gene.strand.value))
    return genes
