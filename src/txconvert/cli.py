"""Command-line interface for txconvert.

This module provides the ``txconvert`` entry point. A single command
reads transcripts in one format, optionally passes them through the QC
gate, and writes them in another format.

Example:
    $ txconvert --help
    $ txconvert -f refgene -t gtf -i genes.refGene -o genes.gtf
    $ txconvert -f gtf -t fasta -r genome.fa --fasta-format exons -i genes.gtf
    $ txconvert -f gtf -t qc -r genome.fa -c chrM:vertebrate_mitochondrial -i genes.gtf
    $ txconvert -f gtf -t bin -i genes.gtf -o genes.h5
"""

from __future__ import annotations

import io
import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Iterable

import click
from rich.console import Console

from txconvert import __version__
from txconvert.config import (
    DEFAULT_FASTA_FORMAT,
    DEFAULT_GTF_SOURCE,
    DEFAULT_INPUT_FORMAT,
    DEFAULT_OUTPUT_FORMAT,
    FASTA_FORMATS,
    INPUT_FORMATS,
    OUTPUT_FORMATS,
    QC_CHECKS,
    ConversionConfig,
)
from txconvert.core.genetic_code import GeneticCodeTable
from txconvert.core.models import Transcript
from txconvert.errors import ConfigError, TxConvertError
from txconvert.io.fasta import ReferenceGenome
from txconvert.io.formats import BINARY_FORMATS, DIRECTORY_FORMATS, create_writer, open_reader
from txconvert.qc import QCEngine, QCFilter
from txconvert.utils.logging import Timer, setup_logging

logger = logging.getLogger("txconvert.cli")

# Messages go to stderr; stdout carries converted records
console = Console(stderr=True)

STDIO = "-"


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="txconvert")
@click.option(
    "-f",
    "--from",
    "input_format",
    type=click.Choice(INPUT_FORMATS),
    default=DEFAULT_INPUT_FORMAT,
    show_default=True,
    help="Input format.",
)
@click.option(
    "-t",
    "--to",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default=DEFAULT_OUTPUT_FORMAT,
    show_default=True,
    help="Output format.",
)
@click.option(
    "-i",
    "--input",
    "input_path",
    type=click.Path(exists=True, dir_okay=False, allow_dash=True),
    default=STDIO,
    show_default=True,
    help="Input file ('-' for stdin).",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(allow_dash=True),
    default=STDIO,
    show_default=True,
    help="Output file ('-' for stdout); a directory for fasta-split.",
)
@click.option(
    "-g",
    "--gtf-source",
    default=DEFAULT_GTF_SOURCE,
    show_default=True,
    help="Source column of GTF output.",
)
@click.option(
    "-r",
    "--reference",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Reference genome FASTA. Required for fasta, fasta-split, "
    "feature-sequence and --qc-check.",
)
@click.option(
    "--fasta-format",
    type=click.Choice(FASTA_FORMATS),
    default=DEFAULT_FASTA_FORMAT,
    show_default=True,
    help="Sequence written by fasta output.",
)
@click.option(
    "-c",
    "--genetic-code",
    "genetic_codes",
    multiple=True,
    help="Genetic code as NAME, 64-character string, or CHROM:CODE. Repeatable.",
)
@click.option(
    "-q",
    "--qc-check",
    "qc_checks",
    type=click.Choice(QC_CHECKS),
    multiple=True,
    help="Drop transcripts failing this QC check (NOK). Repeatable.",
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write a debug log to this file.",
)
def main(
    input_format: str,
    output_format: str,
    input_path: str,
    output_path: str,
    gtf_source: str,
    reference: Path | None,
    fasta_format: str,
    genetic_codes: tuple[str, ...],
    qc_checks: tuple[str, ...],
    verbose: int,
    log_file: Path | None,
) -> None:
    """txconvert: convert transcript annotations between file formats.

    Reads GTF, RefGene, GenePred, GenePredExt or a binary cache and writes
    any supported output format, optionally filtering transcripts by QC
    checks first.
    """
    setup_logging(verbosity=verbose, log_file=log_file)

    try:
        config = ConversionConfig(
            input_format=input_format,
            output_format=output_format,
            gtf_source=gtf_source,
            fasta_format=fasta_format,
            genetic_codes=genetic_codes,
            qc_checks=qc_checks,
            reference=reference,
        )
        config.validate()
        code_table = config.genetic_code_table()

        with Timer("Conversion", logger):
            n = convert(config, input_path, output_path, code_table)
        logger.info(f"Wrote {n} transcripts as {output_format}")

    except (TxConvertError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


# =============================================================================
# Conversion
# =============================================================================


def convert(
    config: ConversionConfig,
    input_path: str,
    output_path: str,
    code_table: GeneticCodeTable,
) -> int:
    """Run one conversion.

    Args:
        config: Validated conversion settings.
        input_path: Input file, or ``-`` for stdin.
        output_path: Output file or directory, or ``-`` for stdout.
        code_table: Genetic codes for QC.

    Returns:
        Number of transcripts passed to the writer.
    """
    with ExitStack() as stack:
        genome = None
        if config.reference is not None:
            genome = stack.enter_context(ReferenceGenome(config.reference))

        transcripts = _open_input(stack, config.input_format, input_path)
        if config.qc_checks:
            gate = QCFilter(QCEngine(genome, code_table), config.qc_checks)
            transcripts = gate.apply(transcripts)

        return _write_output(stack, config, transcripts, output_path, genome, code_table)


def _open_input(stack: ExitStack, input_format: str, input_path: str) -> Iterable[Transcript]:
    name = "<stdin>" if input_path == STDIO else Path(input_path).name

    if input_format in BINARY_FORMATS:
        if input_path == STDIO:
            source = io.BytesIO(click.get_binary_stream("stdin").read())
            return open_reader(input_format, source, name=name)
        return open_reader(input_format, Path(input_path), name=name)

    if input_path == STDIO:
        handle = click.get_text_stream("stdin")
    else:
        handle = stack.enter_context(open(input_path))
    return open_reader(input_format, handle, name=name)


def _write_output(
    stack: ExitStack,
    config: ConversionConfig,
    transcripts: Iterable[Transcript],
    output_path: str,
    genome: ReferenceGenome | None,
    code_table: GeneticCodeTable,
) -> int:
    output_format = config.output_format

    if output_format in DIRECTORY_FORMATS:
        if output_path == STDIO:
            raise ConfigError(f"output format {output_format!r} requires an output directory")
        target = Path(output_path)
    elif output_format in BINARY_FORMATS:
        target = io.BytesIO() if output_path == STDIO else Path(output_path)
    elif output_path == STDIO:
        target = click.get_text_stream("stdout")
    else:
        target = stack.enter_context(open(output_path, "w"))

    with create_writer(config, target, genome, code_table) as writer:
        n = writer.write_transcripts(transcripts)

    if isinstance(target, io.BytesIO):
        stdout = click.get_binary_stream("stdout")
        stdout.write(target.getvalue())
        stdout.flush()
    return n


if __name__ == "__main__":
    main()
