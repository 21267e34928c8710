"""txconvert: convert transcript annotations between file formats.

txconvert reads GTF, RefGene, GenePred(Ext) or its own binary cache into
one canonical transcript model and writes it out as GTF, RefGene,
GenePred(Ext), BED, FASTA, feature sequences, SpliceAI annotations, QC
reports or the binary cache.

Example:
    >>> import txconvert
    >>> txconvert.__version__
    '0.1.0'

Modules:
    core: Transcript model, builder, genetic codes, sequence, consensus
    io: Format readers and writers
    qc: Quality control checks, report and filter
    utils: General utilities
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
