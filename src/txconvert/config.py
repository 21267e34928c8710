"""Configuration management for txconvert.

This module holds the defaults and the validated configuration object for
one conversion run. Configuration comes from:
- Default values
- Command-line arguments

Example:
    >>> from txconvert.config import ConversionConfig
    >>> config = ConversionConfig(input_format="refgene", output_format="gtf")
    >>> config.gtf_source
    'txconvert'
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import attrs

from txconvert.core.genetic_code import GeneticCodeTable
from txconvert.errors import ConfigError

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_INPUT_FORMAT = "gtf"
DEFAULT_OUTPUT_FORMAT = "gtf"
DEFAULT_GTF_SOURCE = "txconvert"
DEFAULT_FASTA_FORMAT = "cds"
DEFAULT_LINE_WIDTH = 80

# BED itemRgb column
BED_RGB = "212,16,48"

INPUT_FORMATS = ("gtf", "refgene", "genepred", "genepredext", "bin")
OUTPUT_FORMATS = (
    "gtf",
    "refgene",
    "genepred",
    "genepredext",
    "bed",
    "fasta",
    "fasta-split",
    "feature-sequence",
    "spliceai",
    "qc",
    "bin",
    "raw",
    "none",
)
FASTA_FORMATS = ("transcript", "exons", "cds")
QC_CHECKS = (
    "exon",
    "cds-length",
    "start",
    "stop",
    "upstream-start",
    "upstream-stop",
    "coordinates",
)

# Output formats that cannot run without a reference genome
REFERENCE_OUTPUT_FORMATS = ("fasta", "fasta-split", "feature-sequence")


# =============================================================================
# Validators
# =============================================================================


def _one_of(choices: tuple[str, ...]) -> Any:
    def validate(instance: Any, attribute: attrs.Attribute, value: str) -> None:
        if value not in choices:
            raise ConfigError(
                f"invalid {attribute.name} {value!r}, expected one of: {', '.join(choices)}"
            )

    return validate


def _all_of(choices: tuple[str, ...]) -> Any:
    def validate(instance: Any, attribute: attrs.Attribute, value: list[str]) -> None:
        unknown = [item for item in value if item not in choices]
        if unknown:
            raise ConfigError(f"invalid {attribute.name}: {', '.join(unknown)}")

    return validate


def _positive(instance: Any, attribute: attrs.Attribute, value: int) -> None:
    if value < 1:
        raise ConfigError(f"{attribute.name} must be positive, got {value}")


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class ConversionConfig:
    """Settings for one conversion run.

    Attributes:
        input_format: Name of the input format.
        output_format: Name of the output format.
        gtf_source: Source column written by the GTF writer.
        fasta_format: Sequence mode of FASTA output (transcript, exons, cds).
        line_width: FASTA line width.
        genetic_codes: ``[CHROM:]CODE`` genetic code specifications.
        qc_checks: QC checks used as a filter before writing.
        reference: Optional reference genome FASTA.
    """

    input_format: str = attrs.field(default=DEFAULT_INPUT_FORMAT, validator=_one_of(INPUT_FORMATS))
    output_format: str = attrs.field(
        default=DEFAULT_OUTPUT_FORMAT, validator=_one_of(OUTPUT_FORMATS)
    )
    gtf_source: str = DEFAULT_GTF_SOURCE
    fasta_format: str = attrs.field(default=DEFAULT_FASTA_FORMAT, validator=_one_of(FASTA_FORMATS))
    line_width: int = attrs.field(default=DEFAULT_LINE_WIDTH, validator=_positive)
    genetic_codes: list[str] = attrs.field(factory=list, converter=list)
    qc_checks: list[str] = attrs.field(factory=list, converter=list, validator=_all_of(QC_CHECKS))
    reference: Path | None = attrs.field(
        default=None, converter=attrs.converters.optional(Path)
    )

    @property
    def requires_reference(self) -> bool:
        """True if the requested output or filter needs a reference genome."""
        return self.output_format in REFERENCE_OUTPUT_FORMATS or bool(self.qc_checks)

    def validate(self) -> None:
        """Check settings that depend on each other.

        Raises:
            ConfigError: If a reference genome is required but missing.
        """
        if self.requires_reference and self.reference is None:
            if self.qc_checks:
                raise ConfigError("QC filtering requires a reference genome")
            raise ConfigError(f"output format {self.output_format!r} requires a reference genome")

    def genetic_code_table(self) -> GeneticCodeTable:
        """Build the genetic code table from the configured specifications.

        Raises:
            ConfigError: If a specification is invalid.
        """
        return GeneticCodeTable.from_specs(self.genetic_codes)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        return attrs.asdict(self)
