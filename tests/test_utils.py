"""Unit tests for txconvert.utils (intervals and sequences)."""

from txconvert.utils.intervals import Interval, clip, merge_intervals
from txconvert.utils.sequences import iter_codons, reverse_complement, wrap

# =============================================================================
# Interval Tests
# =============================================================================


class TestInterval:
    """Tests for the Interval type."""

    def test_length(self) -> None:
        """Test half-open length."""
        assert Interval(10, 20).length == 10

    def test_overlaps(self) -> None:
        """Test overlap detection; book-ended intervals do not overlap."""
        assert Interval(10, 20).overlaps(Interval(15, 25))
        assert not Interval(10, 20).overlaps(Interval(20, 30))


class TestClip:
    """Tests for clip function."""

    def test_inside(self) -> None:
        """Test clipping to a window."""
        assert clip(Interval(10, 30), 15, 20) == Interval(15, 20)

    def test_outside(self) -> None:
        """Test that nothing remains outside the window."""
        assert clip(Interval(10, 30), 30, 40) is None


class TestMergeIntervals:
    """Tests for merge_intervals function."""

    def test_overlapping(self) -> None:
        """Test merging of overlapping intervals in any order."""
        merged = merge_intervals([(40, 50), (10, 25), (20, 30)])
        assert merged == [Interval(10, 30), Interval(40, 50)]

    def test_book_ended(self) -> None:
        """Test that touching intervals are merged."""
        assert merge_intervals([(10, 20), (20, 30)]) == [Interval(10, 30)]

    def test_idempotent(self) -> None:
        """Test that merging merged intervals is a no-op."""
        merged = merge_intervals([(10, 20), (15, 30), (50, 60)])
        assert merge_intervals(merged) == merged

    def test_empty(self) -> None:
        """Test empty input."""
        assert merge_intervals([]) == []


# =============================================================================
# Sequence Tests
# =============================================================================


class TestReverseComplement:
    """Tests for reverse_complement function."""

    def test_simple_sequence(self) -> None:
        """Test reverse complement of a simple sequence."""
        assert reverse_complement("ATGC") == "GCAT"
        assert reverse_complement("AAAA") == "TTTT"

    def test_case_preservation(self) -> None:
        """Test that soft-masked bases stay lowercase."""
        assert reverse_complement("AcGt") == "aCgT"

    def test_iupac_ambiguity(self) -> None:
        """Test IUPAC ambiguity codes."""
        assert reverse_complement("R") == "Y"
        assert reverse_complement("N") == "N"


class TestCodonsAndWrap:
    """Tests for iter_codons and wrap."""

    def test_partial_codon_dropped(self) -> None:
        """Test that a trailing partial codon is not yielded."""
        assert list(iter_codons("ATGAAAC")) == ["ATG", "AAA"]

    def test_offset(self) -> None:
        """Test codons starting at an offset."""
        assert list(iter_codons("CATGAAA", offset=1)) == ["ATG", "AAA"]

    def test_wrap(self) -> None:
        """Test line wrapping."""
        assert wrap("A" * 10, 4) == ["AAAA", "AAAA", "AA"]
        assert wrap("", 4) == []
