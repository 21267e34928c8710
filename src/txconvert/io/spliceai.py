"""SpliceAI annotation output.

SpliceAI expects one row per gene with the union of all exons of the
gene's transcripts::

    #NAME  CHROM  STRAND  TX_START  TX_END  EXON_START  EXON_END

Coordinates are 0-based, exon lists comma terminated. Rows are sorted by
chromosome and genomic start, so the writer buffers all transcripts and
emits on :meth:`SpliceAiWriter.close`.
"""

from __future__ import annotations

import logging
from typing import TextIO

from txconvert.core.consensus import ConsensusGene, merge_transcripts
from txconvert.core.models import Transcript
from txconvert.io.base import TranscriptWriter, join_list

logger = logging.getLogger(__name__)

HEADER = "#NAME\tCHROM\tSTRAND\tTX_START\tTX_END\tEXON_START\tEXON_END\n"


def format_gene(gene: ConsensusGene) -> str:
    columns = [
        gene.name,
        gene.chromosome,
        str(gene.strand),
        str(gene.tx_start),
        str(gene.tx_end),
        join_list(exon.start for exon in gene.exons),
        join_list(exon.end for exon in gene.exons),
    ]
    return "\t".join(columns) + "\n"


class SpliceAiWriter(TranscriptWriter):
    """Collect transcripts and write one consensus row per gene."""

    def __init__(self, handle: TextIO) -> None:
        super().__init__(handle)
        self._transcripts: list[Transcript] = []
        self._written = False

    def write_transcript(self, transcript: Transcript) -> None:
        self._transcripts.append(transcript)

    def close(self) -> None:
        if not self._written:
            genes = merge_transcripts(self._transcripts)
            self._handle.write(HEADER)
            self._handle.writelines(format_gene(gene) for gene in genes)
            logger.info(
                f"Merged {len(self._transcripts)} transcripts into {len(genes)} genes"
            )
            self._written = True
        super().close()
