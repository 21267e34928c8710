"""Genetic codes and per-chromosome code resolution.

A genetic code is given as the 64-character amino acid string used by
NCBI, with codons enumerated in ``TCAG`` order for the first, second and
third base. Codons translating to ``M`` are start codons, codons
translating to ``*`` are stop codons.

Example:
    >>> from txconvert.core.genetic_code import GeneticCode, GeneticCodeTable
    >>> code = GeneticCode.from_name("vertebrate mitochondrial")
    >>> code.translate_codon("AGA")
    '*'
    >>> table = GeneticCodeTable.from_specs(["chrM:vertebrate mitochondrial"])
    >>> table.for_chromosome("chrM").name
    'vertebrate mitochondrial'
    >>> table.for_chromosome("chr1").name
    'standard'
"""

from __future__ import annotations

import logging
from typing import Iterable

import attrs

from txconvert.errors import ConfigError

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

BASE_ORDER = "TCAG"

CODONS = tuple(a + b + c for a in BASE_ORDER for b in BASE_ORDER for c in BASE_ORDER)

# NCBI translation tables, keyed by lowercase name
NAMED_CODES = {
    "standard": "FFLLSSSSYY**CC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    "vertebrate mitochondrial": "FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIMMTTTTNNKKSS**VVVVAAAADDEEGGGG",
    "yeast mitochondrial": "FFLLSSSSYY**CCWWTTTTPPPPHHQQRRRRIIMMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    "mold mitochondrial": "FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    "invertebrate mitochondrial": "FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIMMTTTTNNKKSSSSVVVVAAAADDEEGGGG",
    "ciliate nuclear": "FFLLSSSSYYQQCC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    "echinoderm mitochondrial": "FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIIMTTTTNNNKSSSSVVVVAAAADDEEGGGG",
    "euplotid nuclear": "FFLLSSSSYY**CCCWLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    "bacterial": "FFLLSSSSYY**CC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    "alternative yeast nuclear": "FFLLSSSSYY**CC*WLLLSPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    "ascidian mitochondrial": "FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIMMTTTTNNKKSSGGVVVVAAAADDEEGGGG",
    "alternative flatworm mitochondrial": "FFLLSSSSYYY*CCWWLLLLPPPPHHQQRRRRIIIMTTTTNNNKSSSSVVVVAAAADDEEGGGG",
    "chlorophycean mitochondrial": "FFLLSSSSYY*LCC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    "trematode mitochondrial": "FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIMMTTTTNNNKSSSSVVVVAAAADDEEGGGG",
    "scenedesmus obliquus mitochondrial": "FFLLSS*SYY*LCC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
    "thraustochytrium mitochondrial": "FF*LSSSSYY**CC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG",
}

DEFAULT_CODE_NAME = "standard"

VALID_AMINO_ACIDS = frozenset("ACDEFGHIKLMNPQRSTVWY*")


def _normalize_name(name: str) -> str:
    return name.strip().lower().replace("_", " ")


# =============================================================================
# Genetic Code
# =============================================================================


@attrs.define(slots=True, frozen=True)
class GeneticCode:
    """A codon to amino acid mapping.

    Attributes:
        name: Table name, or ``"custom"`` for a raw lookup string.
        amino_acids: The 64-character lookup string in ``TCAG`` order.
    """

    name: str
    amino_acids: str
    _table: dict[str, str] = attrs.field(init=False, eq=False, repr=False)

    def __attrs_post_init__(self) -> None:
        if len(self.amino_acids) != 64:
            raise ConfigError(
                f"genetic code must have 64 entries, got {len(self.amino_acids)}"
            )
        invalid = set(self.amino_acids.upper()) - VALID_AMINO_ACIDS
        if invalid:
            raise ConfigError(
                f"genetic code contains invalid amino acids: {''.join(sorted(invalid))}"
            )
        object.__setattr__(self, "_table", dict(zip(CODONS, self.amino_acids.upper())))

    @classmethod
    def from_name(cls, name: str) -> GeneticCode:
        """Look up a named NCBI table.

        Names are case-insensitive; underscores may replace spaces.

        Raises:
            ConfigError: If the name is unknown.
        """
        key = _normalize_name(name)
        if key not in NAMED_CODES:
            raise ConfigError(f"unknown genetic code: {name}")
        return cls(key, NAMED_CODES[key])

    @classmethod
    def from_spec(cls, spec: str) -> GeneticCode:
        """Build a code from either a table name or a raw 64-character string."""
        candidate = spec.strip()
        if _normalize_name(candidate) in NAMED_CODES:
            return cls.from_name(candidate)
        if len(candidate) == 64:
            return cls("custom", candidate)
        raise ConfigError(f"invalid genetic code specification: {spec}")

    @classmethod
    def standard(cls) -> GeneticCode:
        return cls.from_name(DEFAULT_CODE_NAME)

    def translate_codon(self, codon: str) -> str:
        """Translate one codon; returns ``X`` for ambiguous bases."""
        return self._table.get(codon.upper().replace("U", "T"), "X")

    def is_start_codon(self, codon: str) -> bool:
        return self.translate_codon(codon) == "M"

    def is_stop_codon(self, codon: str) -> bool:
        return self.translate_codon(codon) == "*"

    @property
    def start_codons(self) -> frozenset[str]:
        return frozenset(codon for codon, aa in self._table.items() if aa == "M")

    @property
    def stop_codons(self) -> frozenset[str]:
        return frozenset(codon for codon, aa in self._table.items() if aa == "*")


# =============================================================================
# Per-Chromosome Resolution
# =============================================================================


@attrs.define(slots=True)
class GeneticCodeTable:
    """A default genetic code plus per-chromosome overrides.

    Attributes:
        default: Code used for chromosomes without an override.
        overrides: Mapping of chromosome name to genetic code.
    """

    default: GeneticCode = attrs.Factory(GeneticCode.standard)
    overrides: dict[str, GeneticCode] = attrs.Factory(dict)

    def for_chromosome(self, chromosome: str) -> GeneticCode:
        """Resolve the code for a chromosome, falling back to the default."""
        return self.overrides.get(chromosome, self.default)

    def add(self, spec: str) -> None:
        """Register a ``[CHROM:]CODE`` specification.

        ``CODE`` is a table name or a 64-character lookup string. Without a
        chromosome prefix the default code is replaced. The code follows the
        last colon, so chromosome names may themselves contain colons.

        Raises:
            ConfigError: If the code cannot be parsed.
        """
        chromosome, separator, code_spec = spec.rpartition(":")
        if not separator:
            self.default = GeneticCode.from_spec(spec)
            logger.debug(f"Default genetic code set to {self.default.name}")
            return

        if not chromosome.strip() or not code_spec.strip():
            raise ConfigError(f"invalid genetic code specification: {spec}")
        code = GeneticCode.from_spec(code_spec)
        self.overrides[chromosome.strip()] = code
        logger.debug(f"Genetic code for {chromosome.strip()} set to {code.name}")

    @classmethod
    def from_specs(cls, specs: Iterable[str]) -> GeneticCodeTable:
        """Build a table from command line style specifications."""
        table = cls()
        for spec in specs:
            table.add(spec)
        return table
