"""Input/output handlers for txconvert.

This module provides readers and writers for the supported transcript
formats:

- GTF: read and write
- RefGene, GenePred, GenePredExt: read and write
- Binary cache (HDF5): read and write
- BED, FASTA, feature-sequence, SpliceAI, raw: write only

Format selection by name lives in :mod:`txconvert.io.formats`.

Example:
    >>> from txconvert.io import read_gtf, RefGeneWriter
    >>> transcripts = read_gtf("annotation.gtf")
    >>> with RefGeneWriter(sys.stdout) as writer:
    ...     writer.write_transcripts(transcripts)
"""

from txconvert.io.base import TranscriptWriter
from txconvert.io.bed import BedWriter
from txconvert.io.binary import BinaryReader, BinaryWriter, read_binary
from txconvert.io.fasta import FastaSplitWriter, FastaWriter, ReferenceGenome
from txconvert.io.feature_sequence import FeatureSequenceWriter
from txconvert.io.gtf import GtfReader, GtfWriter, read_gtf
from txconvert.io.raw import RawWriter
from txconvert.io.refgene import RefGeneReader, RefGeneWriter, Variant, read_refgene
from txconvert.io.spliceai import SpliceAiWriter

__all__: list[str] = [
    "TranscriptWriter",
    # Readers
    "BinaryReader",
    "GtfReader",
    "RefGeneReader",
    "Variant",
    "read_binary",
    "read_gtf",
    "read_refgene",
    # Writers
    "BedWriter",
    "BinaryWriter",
    "FastaSplitWriter",
    "FastaWriter",
    "FeatureSequenceWriter",
    "GtfWriter",
    "RawWriter",
    "RefGeneWriter",
    "SpliceAiWriter",
    # Reference
    "ReferenceGenome",
]
