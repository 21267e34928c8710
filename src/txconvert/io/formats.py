"""Format registry.

The set of input and output formats is closed: a reader or writer is
picked once per run from its format name, and everything downstream only
sees a stream of :class:`~txconvert.core.models.Transcript` objects.

Example:
    >>> config = ConversionConfig(input_format="refgene", output_format="gtf")
    >>> with open("genes.refGene") as src:
    ...     transcripts = open_reader(config.input_format, src, name="genes.refGene")
    ...     with create_writer(config, sys.stdout) as writer:
    ...         writer.write_transcripts(transcripts)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any, Iterable

from txconvert.config import BED_RGB, ConversionConfig
from txconvert.core.genetic_code import GeneticCodeTable
from txconvert.core.models import Transcript
from txconvert.core.sequence import ReferenceProvider
from txconvert.errors import ConfigError
from txconvert.io.base import TranscriptWriter
from txconvert.io.bed import BedWriter
from txconvert.io.binary import BinaryReader, BinaryWriter
from txconvert.io.fasta import FastaSplitWriter, FastaWriter
from txconvert.io.feature_sequence import FeatureSequenceWriter
from txconvert.io.gtf import GtfReader, GtfWriter
from txconvert.io.raw import RawWriter
from txconvert.io.refgene import RefGeneReader, RefGeneWriter, Variant
from txconvert.io.spliceai import SpliceAiWriter
from txconvert.qc.checks import QCEngine
from txconvert.qc.report import QCReportWriter

logger = logging.getLogger(__name__)

# Formats read or written as bytes rather than text
BINARY_FORMATS = ("bin",)

# Formats whose output target is a directory
DIRECTORY_FORMATS = ("fasta-split",)

_VARIANTS = {
    "refgene": Variant.REFGENE,
    "genepred": Variant.GENEPRED,
    "genepredext": Variant.GENEPREDEXT,
}


class NullWriter(TranscriptWriter):
    """Consume transcripts without writing anything."""

    def __init__(self) -> None:
        super().__init__(None)

    def write_transcript(self, transcript: Transcript) -> None:
        pass


# =============================================================================
# Readers
# =============================================================================


def open_reader(input_format: str, source: Any, name: str = "<input>") -> Iterable[Transcript]:
    """Create the reader for an input format.

    Args:
        input_format: One of ``gtf``, ``refgene``, ``genepred``,
            ``genepredext`` or ``bin``.
        source: Text stream for text formats; path or binary stream for
            ``bin``.
        name: Input name used in log and error messages.

    Returns:
        An iterable of finalized transcripts.

    Raises:
        ConfigError: If the format is unknown.
    """
    if input_format == "gtf":
        return GtfReader(source, name=name)
    if input_format in _VARIANTS:
        return RefGeneReader(source, variant=_VARIANTS[input_format], name=name)
    if input_format == "bin":
        return BinaryReader(source, name=name)
    raise ConfigError(f"unknown input format: {input_format}")


# =============================================================================
# Writers
# =============================================================================


def _require_reference(
    output_format: str, reference: ReferenceProvider | None
) -> ReferenceProvider:
    if reference is None:
        raise ConfigError(f"output format {output_format!r} requires a reference genome")
    return reference


def create_writer(
    config: ConversionConfig,
    output: IO[Any] | Path | str,
    reference: ReferenceProvider | None = None,
    code_table: GeneticCodeTable | None = None,
) -> TranscriptWriter:
    """Create the writer for the configured output format.

    Args:
        config: Conversion settings.
        output: Text stream for text formats, path or binary stream for
            ``bin``, directory for ``fasta-split``.
        reference: Reference genome; required by sequence outputs,
            optional for ``qc``.
        code_table: Genetic codes for ``qc``; built from the config if
            omitted.

    Raises:
        ConfigError: If the format is unknown or a reference is missing.
    """
    output_format = config.output_format
    logger.debug(f"Creating {output_format} writer")

    if output_format == "gtf":
        return GtfWriter(output, source=config.gtf_source)
    if output_format in _VARIANTS:
        return RefGeneWriter(output, variant=_VARIANTS[output_format])
    if output_format == "bed":
        return BedWriter(output, rgb=BED_RGB)
    if output_format == "fasta":
        return FastaWriter(
            output,
            _require_reference(output_format, reference),
            mode=config.fasta_format,
            line_width=config.line_width,
        )
    if output_format == "fasta-split":
        return FastaSplitWriter(
            output,
            _require_reference(output_format, reference),
            mode=config.fasta_format,
            line_width=config.line_width,
        )
    if output_format == "feature-sequence":
        return FeatureSequenceWriter(output, _require_reference(output_format, reference))
    if output_format == "spliceai":
        return SpliceAiWriter(output)
    if output_format == "qc":
        if code_table is None:
            code_table = config.genetic_code_table()
        return QCReportWriter(output, QCEngine(reference, code_table))
    if output_format == "bin":
        return BinaryWriter(output)
    if output_format == "raw":
        return RawWriter(output)
    if output_format == "none":
        return NullWriter()
    raise ConfigError(f"unknown output format: {output_format}")
