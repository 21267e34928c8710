"""Tests for the QC module.

Tests cover:
- QCStatus and QCResult helpers
- Each check of the QC checklist
- Per-chromosome genetic codes
- QC report output
- QC filtering
"""

import io
import logging

import pytest

from txconvert.core.genetic_code import GeneticCodeTable
from txconvert.qc import (
    QCCheck,
    QCEngine,
    QCFilter,
    QCReportWriter,
    QCResult,
    QCStatus,
    format_result,
)
from txconvert.qc.report import HEADER

OK, NOK, NA = QCStatus.OK, QCStatus.NOK, QCStatus.NA


@pytest.fixture
def engine(dict_reference) -> QCEngine:
    """Engine on the synthetic genome with the standard code."""
    return QCEngine(dict_reference)


@pytest.fixture
def internal_stop_transcript(make_transcript):
    """TXSTOP: coding transcript with an in-frame TAA at codon 2."""
    return make_transcript("TXSTOP", "chr2", "+", [(0, 30)], (0, 30), "GENES")


def _statuses(result: QCResult) -> list[QCStatus]:
    return [result[check] for check in QCCheck]


# =============================================================================
# Helper Tests
# =============================================================================


class TestQCStatus:
    """Tests for QCStatus and QCResult."""

    def test_from_bool(self) -> None:
        """Test conversion from a boolean outcome."""
        assert QCStatus.from_bool(True) is OK
        assert QCStatus.from_bool(False) is NOK
        assert str(NA) == "N/A"

    def test_result_lookup(self, engine, plus_transcript) -> None:
        """Test lookup by check or by check name."""
        result = engine.check(plus_transcript)
        assert result["start"] is result[QCCheck.START]

    def test_passes(self, engine, internal_stop_transcript) -> None:
        """Test that only NOK fails a gate."""
        result = engine.check(internal_stop_transcript)
        assert result.failed() == [QCCheck.UPSTREAM_STOP]
        assert not result.passes([QCCheck.UPSTREAM_STOP])
        assert result.passes([QCCheck.START, QCCheck.UPSTREAM_START])


# =============================================================================
# Check Tests
# =============================================================================


class TestQCEngine:
    """Tests for the individual checks."""

    def test_plus_all_ok(self, engine, plus_transcript) -> None:
        """Test a clean plus-strand transcript."""
        assert _statuses(engine.check(plus_transcript)) == [OK, OK, OK, OK, NA, OK, OK]

    def test_minus_all_ok(self, engine, minus_transcript) -> None:
        """Test a clean minus-strand transcript."""
        assert _statuses(engine.check(minus_transcript)) == [OK, OK, OK, OK, NA, OK, OK]

    def test_internal_stop(self, engine, internal_stop_transcript) -> None:
        """Test an in-frame stop codon before the last codon."""
        result = engine.check(internal_stop_transcript)
        assert result[QCCheck.UPSTREAM_STOP] is NOK
        assert result[QCCheck.START] is OK
        assert result[QCCheck.STOP] is OK

    def test_cds_length(self, engine, make_transcript) -> None:
        """Test a CDS length that is not a multiple of three."""
        tx = make_transcript("T", "chr1", "+", [(10, 30), (50, 70)], (15, 61))
        assert engine.check(tx)[QCCheck.CDS_LENGTH] is NOK

    def test_missing_start_and_stop(self, engine, make_transcript) -> None:
        """Test a CDS framed on filler sequence."""
        tx = make_transcript("T", "chr1", "+", [(0, 12)], (0, 12))
        result = engine.check(tx)
        assert result[QCCheck.START] is NOK
        assert result[QCCheck.STOP] is NOK
        assert result[QCCheck.UPSTREAM_STOP] is OK

    def test_noncoding_with_start(self, engine, noncoding_transcript) -> None:
        """Test a non-coding transcript containing an ATG."""
        result = engine.check(noncoding_transcript)
        assert _statuses(result) == [OK, NA, NA, NA, NOK, NA, OK]

    def test_noncoding_clean(self, engine, clean_noncoding_transcript) -> None:
        """Test a non-coding transcript without a start codon."""
        assert engine.check(clean_noncoding_transcript)[QCCheck.UPSTREAM_START] is OK

    def test_start_codon_across_intron(self, engine, make_transcript) -> None:
        """Test that the upstream start scan runs on the spliced sequence."""
        # first exon ends in "AT", second starts with "G"
        tx = make_transcript("T", "chr1", "+", [(10, 17), (50, 55)])
        assert engine.check(tx)[QCCheck.UPSTREAM_START] is NOK
        no_junction_atg = make_transcript("T", "chr1", "+", [(10, 17), (62, 70)])
        assert engine.check(no_junction_atg)[QCCheck.UPSTREAM_START] is OK

    def test_no_reference(self, plus_transcript) -> None:
        """Test that sequence checks are N/A without a reference."""
        result = QCEngine().check(plus_transcript)
        assert _statuses(result) == [OK, OK, NA, NA, NA, NA, NA]

    def test_unknown_chromosome(self, engine, make_transcript) -> None:
        """Test that a lookup failure is reported, not raised."""
        tx = make_transcript("T", "chrX", "+", [(0, 12)], (0, 12))
        result = engine.check(tx)
        assert result[QCCheck.COORDINATES] is NOK
        assert result[QCCheck.START] is NA
        assert result[QCCheck.CDS_LENGTH] is OK

    def test_out_of_bounds(self, engine, make_transcript) -> None:
        """Test exons past the chromosome end."""
        tx = make_transcript("T", "chrM", "+", [(0, 30)])
        result = engine.check(tx)
        assert result[QCCheck.COORDINATES] is NOK
        assert result[QCCheck.UPSTREAM_START] is NA


class TestGeneticCodes:
    """Tests for per-chromosome genetic codes in QC."""

    def test_standard_code(self, engine, make_transcript) -> None:
        """Test ATA...AGA under the standard code."""
        tx = make_transcript("TXALT", "chr2", "+", [(50, 62)], (50, 62), "GENEA")
        result = engine.check(tx)
        assert result[QCCheck.START] is NOK
        assert result[QCCheck.STOP] is NOK

    def test_mitochondrial_override(self, dict_reference, make_transcript) -> None:
        """Test that the override only applies to its chromosome."""
        table = GeneticCodeTable.from_specs(["chrM:vertebrate_mitochondrial"])
        engine = QCEngine(dict_reference, table)
        mito = make_transcript("TXMT", "chrM", "+", [(0, 12)], (0, 12), "GENEMT")
        nuclear = make_transcript("TXALT", "chr2", "+", [(50, 62)], (50, 62), "GENEA")

        mito_result = engine.check(mito)
        assert mito_result[QCCheck.START] is OK
        assert mito_result[QCCheck.STOP] is OK
        assert engine.check(nuclear)[QCCheck.STOP] is NOK


# =============================================================================
# Report Tests
# =============================================================================


class TestQCReportWriter:
    """Tests for the QC report."""

    def test_header(self) -> None:
        """Test the header columns."""
        assert HEADER == (
            "Gene\ttranscript\texon\tcds-length\tstart\tstop\t"
            "upstream-start\tupstream-stop\tcoordinates\n"
        )

    def test_format_result(self, engine, plus_transcript) -> None:
        """Test one report row."""
        row = format_result(engine.check(plus_transcript))
        assert row == "GENEP\tTXP\tOK\tOK\tOK\tOK\tN/A\tOK\tOK\n"

    def test_report(self, engine, plus_transcript, noncoding_transcript) -> None:
        """Test a full report."""
        out = io.StringIO()
        with QCReportWriter(out, engine) as writer:
            writer.write_transcripts([plus_transcript, noncoding_transcript])
        lines = out.getvalue().splitlines(keepends=True)
        assert lines[0] == HEADER
        assert lines[2] == "GENENC\tNCATG\tOK\tN/A\tN/A\tN/A\tNOK\tN/A\tOK\n"

    def test_empty_report(self, engine) -> None:
        """Test that an empty input still gets a header."""
        out = io.StringIO()
        with QCReportWriter(out, engine):
            pass
        assert out.getvalue() == HEADER

    def test_failure_summary(self, engine, noncoding_transcript, caplog) -> None:
        """Test the per-check failure count logged on close."""
        with caplog.at_level(logging.INFO, logger="txconvert"):
            with QCReportWriter(io.StringIO(), engine) as writer:
                writer.write_transcript(noncoding_transcript)
        assert "QC check upstream-start: 1 transcripts NOK" in caplog.text


# =============================================================================
# Filter Tests
# =============================================================================


class TestQCFilter:
    """Tests for QCFilter."""

    def test_drop_on_nok(
        self, engine, plus_transcript, internal_stop_transcript, noncoding_transcript
    ) -> None:
        """Test that NOK drops while OK and N/A pass."""
        gate = QCFilter(engine, ["upstream-stop"])
        kept = list(gate.apply([plus_transcript, internal_stop_transcript, noncoding_transcript]))
        assert [tx.transcript_id for tx in kept] == ["TXP", "NCATG"]
        assert (gate.passed, gate.dropped) == (2, 1)

    def test_several_checks(self, engine, plus_transcript, noncoding_transcript) -> None:
        """Test that any failing check drops the transcript."""
        gate = QCFilter(engine, [QCCheck.START, QCCheck.UPSTREAM_START])
        assert gate.passes(plus_transcript)
        assert not gate.passes(noncoding_transcript)

    def test_no_checks(self, engine, internal_stop_transcript) -> None:
        """Test that an empty gate passes everything."""
        gate = QCFilter(engine, [])
        assert list(gate.apply([internal_stop_transcript])) == [internal_stop_transcript]

    def test_invalid_check(self, engine) -> None:
        """Test that unknown check names are rejected."""
        with pytest.raises(ValueError):
            QCFilter(engine, ["frameshift"])
