"""Unit tests for the remaining writers and the format registry.

Tests cover:
- BED12 rows
- Per-feature sequence table
- SpliceAI gene annotation
- Raw debug dump
- HDF5 binary cache
- Reader and writer selection by format name
"""

import io
from pathlib import Path

import attrs
import h5py
import pytest

from txconvert.config import ConversionConfig
from txconvert.core.models import CdsStat
from txconvert.errors import ConfigError, DeserializationError
from txconvert.io.base import join_list, split_list
from txconvert.io.bed import BedWriter, format_line
from txconvert.io.binary import BinaryReader, BinaryWriter, read_binary
from txconvert.io.feature_sequence import FeatureSequenceWriter, iter_features
from txconvert.io.fasta import FastaWriter
from txconvert.io.formats import NullWriter, create_writer, open_reader
from txconvert.io.gtf import GtfReader, GtfWriter
from txconvert.io.raw import RawWriter, format_transcript
from txconvert.io.refgene import RefGeneReader, RefGeneWriter, Variant
from txconvert.io.spliceai import HEADER, SpliceAiWriter
from txconvert.qc.report import QCReportWriter

# =============================================================================
# Column Helper Tests
# =============================================================================


class TestListColumns:
    """Tests for comma separated list columns."""

    def test_split(self) -> None:
        """Test splitting with and without a trailing comma."""
        assert split_list("1,2,3,") == ["1", "2", "3"]
        assert split_list("1,2") == ["1", "2"]
        assert split_list("") == []

    def test_join(self) -> None:
        """Test UCSC style comma terminated output."""
        assert join_list([10, 50]) == "10,50,"
        assert join_list([]) == ""


# =============================================================================
# BED Tests
# =============================================================================


class TestBedWriter:
    """Tests for BED12 output."""

    def test_coding(self, plus_transcript) -> None:
        """Test a coding transcript row."""
        assert format_line(plus_transcript) == (
            "chr1\t10\t70\tGENEP:TXP\t0\t+\t15\t62\t212,16,48\t2\t20,20\t0,40\n"
        )

    def test_noncoding(self, noncoding_transcript) -> None:
        """Test that non-coding rows have an empty thick region at txEnd."""
        cols = format_line(noncoding_transcript).split("\t")
        assert cols[6:8] == ["190", "190"]

    def test_writer(self, plus_transcript, minus_transcript) -> None:
        """Test writing several rows."""
        out = io.StringIO()
        with BedWriter(out) as writer:
            writer.write_transcripts([plus_transcript, minus_transcript])
        rows = out.getvalue().splitlines()
        assert len(rows) == 2
        assert rows[1].split("\t")[3] == "GENEM:TXM"
        assert writer.count == 2


# =============================================================================
# Feature Sequence Tests
# =============================================================================


class TestFeatureSequenceWriter:
    """Tests for the per-feature sequence table."""

    def test_features_plus(self, plus_transcript) -> None:
        """Test segment order on the plus strand."""
        features = [(feature, tuple(iv)) for feature, iv in iter_features(plus_transcript)]
        assert features == [
            ("5UTR", (10, 15)),
            ("CDS", (15, 30)),
            ("CDS", (50, 62)),
            ("3UTR", (62, 70)),
        ]

    def test_features_minus(self, minus_transcript) -> None:
        """Test that minus-strand segments follow the transcript 5' to 3'."""
        features = [(feature, tuple(iv)) for feature, iv in iter_features(minus_transcript)]
        assert features == [
            ("5UTR", (150, 160)),
            ("CDS", (140, 150)),
            ("CDS", (106, 120)),
            ("3UTR", (100, 106)),
        ]

    def test_features_noncoding(self, noncoding_transcript) -> None:
        """Test that non-coding transcripts are split into plain exons."""
        assert [f for f, _ in iter_features(noncoding_transcript)] == ["non-coding"]

    def test_rows(self, plus_transcript, minus_transcript, dict_reference) -> None:
        """Test row columns and strand-corrected sequences."""
        out = io.StringIO()
        with FeatureSequenceWriter(out, dict_reference) as writer:
            writer.write_transcripts([plus_transcript, minus_transcript])
        rows = [row.split("\t") for row in out.getvalue().splitlines()]
        assert rows[1] == ["GENEP", "TXP", "chr1", "16", "30", "+", "CDS", "ATGAAACCCCCCCCC"]
        assert rows[5][3:] == ["141", "150", "-", "CDS", "ATGAAACCCG"]
        assert len(rows) == 8


# =============================================================================
# SpliceAI Tests
# =============================================================================


class TestSpliceAiWriter:
    """Tests for SpliceAI annotation output."""

    def test_rows(self, plus_transcript, minus_transcript) -> None:
        """Test one row per gene sorted by start."""
        out = io.StringIO()
        with SpliceAiWriter(out) as writer:
            writer.write_transcripts([minus_transcript, plus_transcript])
        lines = out.getvalue().splitlines(keepends=True)
        assert lines[0] == HEADER
        assert lines[1] == "GENEP\tchr1\t+\t10\t70\t10,50,\t30,70,\n"
        assert lines[2] == "GENEM\tchr1\t-\t100\t160\t100,140,\t120,160,\n"

    def test_isoforms_merged(self, make_transcript) -> None:
        """Test that isoforms of one gene share a row."""
        out = io.StringIO()
        with SpliceAiWriter(out) as writer:
            writer.write_transcript(make_transcript("a", "chr1", "+", [(0, 10)], gene_symbol="G"))
            writer.write_transcript(make_transcript("b", "chr1", "+", [(5, 20)], gene_symbol="G"))
        assert out.getvalue().splitlines()[1:] == ["G\tchr1\t+\t0\t20\t0,\t20,"]

    def test_empty(self) -> None:
        """Test that an empty input still gets a header."""
        out = io.StringIO()
        with SpliceAiWriter(out):
            pass
        assert out.getvalue() == HEADER

    def test_nothing_on_error(self, plus_transcript) -> None:
        """Test that buffered rows are dropped when the conversion fails."""
        out = io.StringIO()
        with pytest.raises(RuntimeError):
            with SpliceAiWriter(out) as writer:
                writer.write_transcript(plus_transcript)
                raise RuntimeError("input failed")
        assert out.getvalue() == ""


# =============================================================================
# Raw Tests
# =============================================================================


class TestRawWriter:
    """Tests for the raw debug dump."""

    def test_coding(self, minus_transcript) -> None:
        """Test header and exon lines."""
        lines = format_transcript(minus_transcript).splitlines()
        assert lines[0] == (
            "Transcript TXM gene=GENEM chr1:100-160 strand=- cds=106-150 "
            "stat=cmpl/cmpl exons=2"
        )
        assert lines[1] == "  exon 2: 100-120 cds=106-120 frame=2"
        assert lines[2] == "  exon 1: 140-160 cds=140-150 frame=0"

    def test_noncoding(self, noncoding_transcript) -> None:
        """Test a non-coding transcript."""
        out = io.StringIO()
        RawWriter(out).write_transcript(noncoding_transcript)
        assert "cds=none" in out.getvalue()
        assert out.getvalue().endswith("  exon 1: 170-190 cds=- frame=.\n")


# =============================================================================
# Binary Cache Tests
# =============================================================================


@pytest.fixture
def cached_transcripts(plus_transcript, minus_transcript, noncoding_transcript):
    """Transcripts covering scores, both strands and non-coding exons."""
    return [
        attrs.evolve(plus_transcript, score=12.5),
        minus_transcript,
        attrs.evolve(noncoding_transcript, cds_start_stat=CdsStat.NONE),
    ]


class TestBinaryCache:
    """Tests for the HDF5 binary cache."""

    def test_round_trip_file(self, tmp_path: Path, cached_transcripts) -> None:
        """Test writing and reading a cache file."""
        path = tmp_path / "cache.h5"
        with BinaryWriter(path) as writer:
            writer.write_transcripts(cached_transcripts)
        assert read_binary(path) == cached_transcripts

    def test_round_trip_stream(self, cached_transcripts) -> None:
        """Test writing and reading an in-memory stream."""
        buffer = io.BytesIO()
        with BinaryWriter(buffer) as writer:
            writer.write_transcripts(cached_transcripts)
        buffer.seek(0)
        assert list(BinaryReader(buffer)) == cached_transcripts

    def test_refgene_through_cache(
        self, tmp_path: Path, ucsc_refgene_text: str
    ) -> None:
        """Test that RefGene rows survive the cache unchanged."""
        path = tmp_path / "cache.h5"
        with BinaryWriter(path) as writer:
            writer.write_transcripts(RefGeneReader(io.StringIO(ucsc_refgene_text)))
        out = io.StringIO()
        RefGeneWriter(out).write_transcripts(read_binary(path))
        expected = io.StringIO()
        RefGeneWriter(expected).write_transcripts(RefGeneReader(io.StringIO(ucsc_refgene_text)))
        assert out.getvalue() == expected.getvalue()

    def test_not_hdf5(self, tmp_path: Path) -> None:
        """Test that a text file is rejected."""
        path = tmp_path / "cache.h5"
        path.write_text("chr1\tsrc\texon\n")
        with pytest.raises(DeserializationError):
            read_binary(path)

    def test_foreign_hdf5(self, tmp_path: Path) -> None:
        """Test that an HDF5 file without the transcript group is rejected."""
        path = tmp_path / "other.h5"
        with h5py.File(path, "w") as f:
            f.create_dataset("values", data=[1, 2, 3])
        with pytest.raises(DeserializationError, match="missing"):
            read_binary(path)

    def test_schema_version(self, tmp_path: Path, cached_transcripts) -> None:
        """Test that a cache of another schema version is rejected."""
        path = tmp_path / "cache.h5"
        with BinaryWriter(path) as writer:
            writer.write_transcripts(cached_transcripts)
        with h5py.File(path, "a") as f:
            f["transcripts"].attrs["schema_version"] = 99
        with pytest.raises(DeserializationError, match="unsupported schema"):
            read_binary(path)


# =============================================================================
# Registry Tests
# =============================================================================


class TestFormatRegistry:
    """Tests for open_reader and create_writer."""

    def test_open_reader(self, sample_refgene_text: str) -> None:
        """Test reader selection."""
        assert isinstance(open_reader("gtf", io.StringIO("")), GtfReader)
        reader = open_reader("genepredext", io.StringIO(""))
        assert isinstance(reader, RefGeneReader)
        assert reader.variant is Variant.GENEPREDEXT
        assert len(list(open_reader("refgene", io.StringIO(sample_refgene_text)))) == 2

    def test_unknown_input(self) -> None:
        """Test an unknown input format."""
        with pytest.raises(ConfigError):
            open_reader("gff3", io.StringIO(""))

    @pytest.mark.parametrize(
        "output_format,writer_type",
        [
            ("gtf", GtfWriter),
            ("genepred", RefGeneWriter),
            ("bed", BedWriter),
            ("spliceai", SpliceAiWriter),
            ("qc", QCReportWriter),
            ("raw", RawWriter),
            ("none", NullWriter),
        ],
    )
    def test_create_writer(self, output_format: str, writer_type: type) -> None:
        """Test writer selection for formats without a reference."""
        config = ConversionConfig(output_format=output_format)
        assert isinstance(create_writer(config, io.StringIO()), writer_type)

    def test_gtf_source(self, plus_transcript) -> None:
        """Test that the configured source reaches the GTF writer."""
        out = io.StringIO()
        config = ConversionConfig(output_format="gtf", gtf_source="refGene")
        with create_writer(config, out) as writer:
            writer.write_transcript(plus_transcript)
        assert out.getvalue().split("\t")[1] == "refGene"

    def test_fasta_writer(self, dict_reference) -> None:
        """Test that sequence writers receive the reference and mode."""
        config = ConversionConfig(output_format="fasta", fasta_format="exons")
        writer = create_writer(config, io.StringIO(), reference=dict_reference)
        assert isinstance(writer, FastaWriter)
        assert writer.mode.value == "exons"

    @pytest.mark.parametrize("output_format", ["fasta", "fasta-split", "feature-sequence"])
    def test_reference_required(self, output_format: str) -> None:
        """Test that sequence outputs refuse to run without a reference."""
        config = ConversionConfig(output_format=output_format)
        with pytest.raises(ConfigError, match="reference genome"):
            create_writer(config, io.StringIO())

    def test_null_writer(self, plus_transcript) -> None:
        """Test that the null writer only counts."""
        with NullWriter() as writer:
            assert writer.write_transcripts([plus_transcript]) == 1
