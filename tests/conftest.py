"""Pytest configuration and shared fixtures for txconvert tests.

This module contains fixtures that are shared across multiple test modules.
Fixtures are organized by category:

- Reference fixtures: A small hand-built genome with known codons, both
  in memory and as a FASTA file
- Annotation fixtures: GTF and RefGene text describing transcripts on
  that genome
- Model fixtures: Finalized transcripts built directly

Layout of the synthetic genome (0-based, half-open):

chr1 (200 bp)
    TXP (GENEP, +): exons 10-30, 50-70; CDS 15-62
        ATG at 15-18, TAA at 59-62
    TXM (GENEM, -): exons 100-120, 140-160; CDS 106-150
        mRNA CDS ATGAAACCCGGGTTTCCCAAATGA
    NCATG (GENENC, +): exon 170-190, non-coding, ATG at 173-176
    NCCLEAN (GENENC2, +): exon 62-70, non-coding, no ATG

chr2 (70 bp)
    TXSTOP (GENES, +): exon/CDS 0-30 with an in-frame TAA at codon 2
    TXALT (GENEA, +): exon/CDS 50-62, ATAAAACCCAGA

chrM (20 bp)
    TXMT (GENEMT, +): exon/CDS 0-12, ATAAAACCCAGA
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from txconvert.core.builder import TranscriptBuilder
from txconvert.core.models import CdsStat, Transcript
from txconvert.errors import OutOfBounds, UnknownChromosome

# =============================================================================
# Reference Fixtures
# =============================================================================


def _place(length: int, segments: dict[int, str]) -> str:
    """Build a sequence of filler C bases with segments at fixed offsets."""
    bases = ["C"] * length
    for offset, segment in segments.items():
        bases[offset : offset + len(segment)] = list(segment)
    return "".join(bases)


ALT_CDS = "ATAAAACCCAGA"

SEQUENCES = {
    "chr1": _place(
        200,
        {
            15: "ATGAAACCCCCCCCC",
            50: "GGGGGGGGGTAA",
            106: "TCATTTGGGAAACC",
            140: "CGGGTTTCAT",
            173: "ATG",
        },
    ),
    "chr2": _place(70, {0: "ATGTAACCCGGGTTTAAACCCGGGCCCTAG", 50: ALT_CDS}),
    "chrM": _place(20, {0: ALT_CDS}),
}


class DictReference:
    """In-memory reference provider."""

    def __init__(self, sequences: dict[str, str]) -> None:
        self.sequences = sequences

    def sequence(self, chromosome: str, start: int, end: int) -> str:
        if chromosome not in self.sequences:
            raise UnknownChromosome(chromosome)
        length = len(self.sequences[chromosome])
        if start < 0 or end > length or start > end:
            raise OutOfBounds(chromosome, start, end, length)
        return self.sequences[chromosome][start:end]


@pytest.fixture
def reference_sequences() -> dict[str, str]:
    """Return the synthetic chromosome sequences."""
    return dict(SEQUENCES)


@pytest.fixture
def dict_reference() -> DictReference:
    """Return an in-memory reference of the synthetic genome."""
    return DictReference(SEQUENCES)


@pytest.fixture
def reference_fasta(tmp_path: Path) -> Path:
    """Write the synthetic genome as a FASTA file with 60 bp lines."""
    fasta_path = tmp_path / "genome.fa"
    with open(fasta_path, "w") as f:
        for name, seq in SEQUENCES.items():
            f.write(f">{name}\n")
            for i in range(0, len(seq), 60):
                f.write(seq[i : i + 60] + "\n")
    return fasta_path


# =============================================================================
# Annotation Fixtures
# =============================================================================


def _gtf(
    chrom: str,
    feature: str,
    start: int,
    end: int,
    strand: str,
    frame: str,
    gene: str,
    tx: str,
    exon: int | None = None,
) -> str:
    """Format one GTF line the way GtfWriter does."""
    attributes = f'gene_id "{gene}"; transcript_id "{tx}";'
    if exon is not None:
        attributes += f' exon_number "{exon}"; exon_id "{tx}.{exon}";'
    attributes += f' gene_name "{gene}";'
    return "\t".join(
        [chrom, "txconvert", feature, str(start), str(end), ".", strand, frame, attributes]
    ) + "\n"


TXP_GTF = "".join(
    [
        _gtf("chr1", "transcript", 11, 70, "+", ".", "GENEP", "TXP"),
        _gtf("chr1", "start_codon", 16, 18, "+", "0", "GENEP", "TXP"),
        _gtf("chr1", "stop_codon", 60, 62, "+", "0", "GENEP", "TXP"),
        _gtf("chr1", "exon", 11, 30, "+", ".", "GENEP", "TXP", 1),
        _gtf("chr1", "CDS", 16, 30, "+", "0", "GENEP", "TXP", 1),
        _gtf("chr1", "5UTR", 11, 15, "+", ".", "GENEP", "TXP", 1),
        _gtf("chr1", "exon", 51, 70, "+", ".", "GENEP", "TXP", 2),
        _gtf("chr1", "CDS", 51, 59, "+", "0", "GENEP", "TXP", 2),
        _gtf("chr1", "3UTR", 63, 70, "+", ".", "GENEP", "TXP", 2),
    ]
)

TXM_GTF = "".join(
    [
        _gtf("chr1", "transcript", 101, 160, "-", ".", "GENEM", "TXM"),
        _gtf("chr1", "start_codon", 148, 150, "-", "0", "GENEM", "TXM"),
        _gtf("chr1", "stop_codon", 107, 109, "-", "0", "GENEM", "TXM"),
        _gtf("chr1", "exon", 141, 160, "-", ".", "GENEM", "TXM", 1),
        _gtf("chr1", "CDS", 141, 150, "-", "0", "GENEM", "TXM", 1),
        _gtf("chr1", "5UTR", 151, 160, "-", ".", "GENEM", "TXM", 1),
        _gtf("chr1", "exon", 101, 120, "-", ".", "GENEM", "TXM", 2),
        _gtf("chr1", "CDS", 110, 120, "-", "2", "GENEM", "TXM", 2),
        _gtf("chr1", "3UTR", 101, 106, "-", ".", "GENEM", "TXM", 2),
    ]
)

NC_GTF = "".join(
    [
        _gtf("chr1", "transcript", 171, 190, "+", ".", "GENENC", "NCATG"),
        _gtf("chr1", "exon", 171, 190, "+", ".", "GENENC", "NCATG", 1),
    ]
)

TXP_REFGENE = (
    "0\tTXP\tchr1\t+\t10\t70\t15\t62\t2\t10,50,\t30,70,\t"
    "0\tGENEP\tcmpl\tcmpl\t0,0,\n"
)
TXM_REFGENE = (
    "0\tTXM\tchr1\t-\t100\t160\t106\t150\t2\t100,140,\t120,160,\t"
    "0\tGENEM\tcmpl\tcmpl\t1,0,\n"
)

# Real refGene rows (hg19)
GNG5_REFGENE = (
    "1233\tNM_005274.2\tchr1\t-\t84964005\t84972262\t84967527\t84971774\t4\t"
    "84964005,84967508,84971693,84972118,\t84964231,84967653,84971984,84972262,\t"
    "0\tGNG5\tcmpl\tcmpl\t-1,0,0,-1,\n"
)
RBM4_REFGENE = (
    "1091\tNM_002896.3\tchr11\t+\t66406087\t66413944\t66407182\t66411603\t4\t"
    "66406087,66407170,66410920,66413497,\t66406223,66407594,66411611,66413944,\t"
    "0\tRBM4\tcmpl\tcmpl\t-1,0,1,-1,\n"
)
ACTB_REFGENE = (
    "0\tNM_001101.5\tchr7\t-\t5566778\t5570232\t5567378\t5569288\t6\t"
    "5566778,5567634,5567911,5568791,5569165,5570154,\t"
    "5567522,5567816,5568350,5569031,5569294,5570232,\t"
    "0\tACTB\tcmpl\tcmpl\t0,1,0,0,0,-1,\n"
)


@pytest.fixture
def sample_gtf_text() -> str:
    """Return GTF text for TXP, TXM and NCATG, as written by GtfWriter."""
    return TXP_GTF + TXM_GTF + NC_GTF


@pytest.fixture
def sample_gtf(tmp_path: Path, sample_gtf_text: str) -> Path:
    """Write the sample GTF to a file."""
    path = tmp_path / "sample.gtf"
    path.write_text(sample_gtf_text)
    return path


@pytest.fixture
def sample_refgene_text() -> str:
    """Return RefGene rows for TXP and TXM."""
    return TXP_REFGENE + TXM_REFGENE


@pytest.fixture
def sample_refgene(tmp_path: Path, sample_refgene_text: str) -> Path:
    """Write the sample RefGene rows to a file."""
    path = tmp_path / "sample.refGene"
    path.write_text(sample_refgene_text)
    return path


@pytest.fixture
def ucsc_refgene_text() -> str:
    """Return real refGene rows (GNG5, RBM4, ACTB)."""
    return GNG5_REFGENE + RBM4_REFGENE + ACTB_REFGENE


# =============================================================================
# Model Fixtures
# =============================================================================


def build_transcript(
    transcript_id: str,
    chromosome: str,
    strand: str,
    exons: list[tuple[int, int]],
    cds: tuple[int, int] | None = None,
    gene_symbol: str | None = None,
    stats: tuple[CdsStat, CdsStat] = (CdsStat.COMPLETE, CdsStat.COMPLETE),
) -> Transcript:
    """Build a finalized transcript from plain coordinates."""
    builder = TranscriptBuilder(transcript_id, gene_symbol, chromosome, strand)
    for start, end in exons:
        builder.add_exon(start, end)
    if cds is not None:
        builder.set_cds(*cds)
        builder.set_attributes(cds_start_stat=stats[0], cds_end_stat=stats[1])
    return builder.finalize()


@pytest.fixture
def plus_transcript() -> Transcript:
    """TXP: coding, plus strand, two exons."""
    return build_transcript("TXP", "chr1", "+", [(10, 30), (50, 70)], (15, 62), "GENEP")


@pytest.fixture
def minus_transcript() -> Transcript:
    """TXM: coding, minus strand, two exons."""
    return build_transcript("TXM", "chr1", "-", [(100, 120), (140, 160)], (106, 150), "GENEM")


@pytest.fixture
def noncoding_transcript() -> Transcript:
    """NCATG: non-coding with an ATG inside its exon."""
    return build_transcript("NCATG", "chr1", "+", [(170, 190)], gene_symbol="GENENC")


@pytest.fixture
def clean_noncoding_transcript() -> Transcript:
    """NCCLEAN: non-coding without any start codon."""
    return build_transcript("NCCLEAN", "chr1", "+", [(62, 70)], gene_symbol="GENENC2")


@pytest.fixture
def make_transcript():
    """Return the transcript factory for tests needing custom layouts."""
    return build_transcript


# =============================================================================
# Logging Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging so later tests see records through caplog."""
    yield
    logger = logging.getLogger("txconvert")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
