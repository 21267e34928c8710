"""GTF file handling.

This module provides a reader and a writer for GTF (GFF2-derived) files.
The reader groups records by ``transcript_id`` and feeds them into
:class:`~txconvert.core.builder.TranscriptBuilder`; the writer composes the
full record set (transcript, codons, exons, CDS and UTRs) of each
transcript.

GTF coordinates are 1-based and inclusive. They are converted to 0-based,
half-open on input and back on output.

Example:
    >>> from txconvert.io.gtf import GtfReader, GtfWriter
    >>> with open("annotation.gtf") as handle:
    ...     transcripts = list(GtfReader(handle))
    >>> with open("out.gtf", "w") as out, GtfWriter(out, source="ncbiRefSeq") as writer:
    ...     writer.write_transcripts(transcripts)
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterable, Iterator, TextIO

import attrs

from txconvert.config import DEFAULT_GTF_SOURCE
from txconvert.core.builder import TranscriptBuilder
from txconvert.core.models import CdsStat, Exon, Strand, Transcript
from txconvert.core.sequence import start_codon_intervals, stop_codon_intervals
from txconvert.errors import ParseError
from txconvert.io.base import TranscriptWriter
from txconvert.utils.intervals import Interval

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# GTF column indices
COL_SEQNAME = 0
COL_SOURCE = 1
COL_FEATURE = 2
COL_START = 3
COL_END = 4
COL_SCORE = 5
COL_STRAND = 6
COL_FRAME = 7
COL_ATTRIBUTES = 8

N_COLUMNS = 9

# Feature types (compared lowercase)
FEATURE_GENE = "gene"
FEATURE_TRANSCRIPT = "transcript"
FEATURE_EXON = "exon"
FEATURE_CDS = "cds"
FEATURE_START_CODON = "start_codon"
FEATURE_STOP_CODON = "stop_codon"
FEATURE_TYPES_UTR = {
    "utr",
    "5utr",
    "3utr",
    "five_prime_utr",
    "three_prime_utr",
}
FEATURE_TYPES_STRUCTURE = (
    {FEATURE_EXON, FEATURE_CDS, FEATURE_START_CODON, FEATURE_STOP_CODON} | FEATURE_TYPES_UTR
)

_ATTRIBUTE_RE = re.compile(r'\s*([^\s";]+)\s+(?:"([^"]*)"|([^\s";]+))\s*(?:;|$)\s*')


# =============================================================================
# Attribute Parsing
# =============================================================================


def parse_attributes(attr_string: str) -> dict[str, str]:
    """Parse a GTF attribute block into a dictionary.

    Values may be quoted (``gene_id "ABC";``) or bare. When a key occurs
    more than once, the first value is kept.

    Args:
        attr_string: Attribute column of a GTF line.

    Returns:
        Dictionary of attribute key-value pairs.

    Raises:
        ValueError: If the block cannot be parsed.
    """
    text = attr_string.strip()
    attributes: dict[str, str] = {}
    if not text or text == ".":
        return attributes

    pos = 0
    while pos < len(text):
        match = _ATTRIBUTE_RE.match(text, pos)
        if match is None or match.end() == pos:
            raise ValueError(f"unparseable attribute block near {text[pos:pos + 30]!r}")
        value = match.group(2) if match.group(2) is not None else match.group(3)
        attributes.setdefault(match.group(1), value)
        pos = match.end()

    return attributes


def format_attributes(attributes: dict[str, Any]) -> str:
    """Format attributes as ``key "value";`` pairs separated by spaces."""
    return " ".join(f'{key} "{value}";' for key, value in attributes.items())


# =============================================================================
# Records
# =============================================================================


@attrs.define(slots=True)
class GtfRecord:
    """One parsed GTF line (0-based, half-open coordinates).

    Attributes:
        seqname: Chromosome name.
        source: Source column.
        feature: Feature type as written in the file.
        start: Start position (0-based, inclusive).
        end: End position (0-based, exclusive).
        score: Score or None.
        strand: Strand.
        frame: Frame column or None.
        attributes: Parsed attribute block.
    """

    seqname: str
    source: str
    feature: str
    start: int
    end: int
    score: float | None
    strand: Strand
    frame: int | None
    attributes: dict[str, str] = attrs.Factory(dict)

    @property
    def feature_type(self) -> str:
        """Lowercase feature type used for dispatch."""
        return self.feature.lower()


def parse_line(line: str, location: str | int = "") -> GtfRecord | None:
    """Parse a single GTF line.

    Args:
        line: Raw GTF line.
        location: Location used in error messages.

    Returns:
        Parsed record, or None for comments and blank lines.

    Raises:
        ParseError: If a column is malformed.
    """
    line = line.rstrip("\r\n")
    if not line.strip() or line.startswith("#"):
        return None

    parts = line.split("\t")
    if len(parts) < N_COLUMNS:
        raise ParseError(location, f"expected {N_COLUMNS} columns, found {len(parts)}")

    try:
        start = int(parts[COL_START])
        end = int(parts[COL_END])
    except ValueError:
        raise ParseError(
            location, f"non-numeric coordinates {parts[COL_START]!r}-{parts[COL_END]!r}"
        ) from None
    if start < 1 or end < start:
        raise ParseError(location, f"invalid coordinates {start}-{end}")

    try:
        score = None if parts[COL_SCORE] == "." else float(parts[COL_SCORE])
    except ValueError:
        raise ParseError(location, f"invalid score {parts[COL_SCORE]!r}") from None

    try:
        strand = Strand.from_str(parts[COL_STRAND])
    except ValueError as e:
        raise ParseError(location, str(e)) from None

    frame_str = parts[COL_FRAME]
    if frame_str == ".":
        frame = None
    elif frame_str in ("0", "1", "2"):
        frame = int(frame_str)
    else:
        raise ParseError(location, f"invalid frame {frame_str!r}")

    try:
        attributes = parse_attributes(parts[COL_ATTRIBUTES])
    except ValueError as e:
        raise ParseError(location, str(e)) from None

    return GtfRecord(
        seqname=parts[COL_SEQNAME],
        source=parts[COL_SOURCE],
        feature=parts[COL_FEATURE],
        start=start - 1,
        end=end,
        score=score,
        strand=strand,
        frame=frame,
        attributes=attributes,
    )


# =============================================================================
# GTF Reader
# =============================================================================


@attrs.define(slots=True)
class _TranscriptRecords:
    """Features collected for one transcript id."""

    builder: TranscriptBuilder
    gene_id: str
    gene_name: str | None = None
    has_cds: bool = False
    has_start_codon: bool = False
    has_stop_codon: bool = False
    cds_parts: list[Interval] = attrs.Factory(list)
    cds_frames: list[int | None] = attrs.Factory(list)
    codon_parts: list[Interval] = attrs.Factory(list)


class GtfReader:
    """Parse GTF records into transcripts.

    Records may appear in any order; they are grouped by ``transcript_id``
    and each transcript is finalized once the stream is exhausted.
    Transcripts are yielded in order of first appearance.

    Attributes:
        name: Name of the input used in error messages.

    Example:
        >>> with open("annotation.gtf") as handle:
        ...     for transcript in GtfReader(handle, name="annotation.gtf"):
        ...         print(transcript.transcript_id, transcript.exon_count)
    """

    def __init__(self, handle: Iterable[str], name: str = "<input>") -> None:
        self._handle = handle
        self.name = name

    def __iter__(self) -> Iterator[Transcript]:
        records: dict[str, _TranscriptRecords] = {}
        gene_names: dict[str, str] = {}
        n_lines = 0
        skipped: dict[str, int] = {}

        for lineno, line in enumerate(self._handle, start=1):
            location = f"{self.name}:{lineno}"
            record = parse_line(line, location)
            if record is None:
                continue
            n_lines += 1

            feature_type = record.feature_type
            if feature_type == FEATURE_GENE:
                gene_id = record.attributes.get("gene_id")
                if gene_id is None:
                    raise ParseError(location, "gene record without gene_id")
                if "gene_name" in record.attributes:
                    gene_names[gene_id] = record.attributes["gene_name"]
                continue

            if feature_type != FEATURE_TRANSCRIPT and feature_type not in FEATURE_TYPES_STRUCTURE:
                skipped[record.feature] = skipped.get(record.feature, 0) + 1
                continue

            self._add_record(records, record, location)

        for feature, count in skipped.items():
            logger.debug(f"Ignored {count} '{feature}' records in {self.name}")
        logger.info(f"Read {n_lines} GTF records, {len(records)} transcripts from {self.name}")

        for transcript_id, group in records.items():
            yield self._finalize(group, gene_names)

    @staticmethod
    def _add_record(
        records: dict[str, _TranscriptRecords], record: GtfRecord, location: str
    ) -> None:
        transcript_id = record.attributes.get("transcript_id")
        gene_id = record.attributes.get("gene_id")
        if transcript_id is None:
            raise ParseError(location, f"{record.feature} record without transcript_id")
        if gene_id is None:
            raise ParseError(location, f"{record.feature} record without gene_id")

        group = records.get(transcript_id)
        if group is None:
            builder = TranscriptBuilder(
                transcript_id,
                gene_symbol=gene_id,
                chromosome=record.seqname,
                strand=record.strand,
            )
            group = _TranscriptRecords(builder=builder, gene_id=gene_id)
            records[transcript_id] = group

        if "gene_name" in record.attributes:
            group.gene_name = record.attributes["gene_name"]
        if record.score is not None:
            group.builder.set_attributes(score=record.score)

        feature_type = record.feature_type
        if feature_type == FEATURE_TRANSCRIPT:
            return

        interval = Interval(record.start, record.end)
        group.builder.add_exon(record.start, record.end)
        if feature_type == FEATURE_CDS:
            group.has_cds = True
            group.cds_parts.append(interval)
            group.cds_frames.append(record.frame)
        elif feature_type == FEATURE_START_CODON:
            group.has_start_codon = True
            group.codon_parts.append(interval)
        elif feature_type == FEATURE_STOP_CODON:
            group.has_stop_codon = True
            group.codon_parts.append(interval)

    @staticmethod
    def _finalize(group: _TranscriptRecords, gene_names: dict[str, str]) -> Transcript:
        builder = group.builder
        gene_symbol = group.gene_name or gene_names.get(group.gene_id, group.gene_id)
        builder.set_attributes(gene_symbol=gene_symbol)

        if group.has_cds:
            for part in group.cds_parts + group.codon_parts:
                builder.extend_cds(part.start, part.end)
            five_prime = CdsStat.COMPLETE if group.has_start_codon else CdsStat.INCOMPLETE
            three_prime = CdsStat.COMPLETE if group.has_stop_codon else CdsStat.INCOMPLETE
            if not group.has_start_codon:
                # a truncated 5' end keeps the phase of its first CDS record
                phase = _five_prime_frame(group, builder.strand is Strand.MINUS)
                if phase is not None:
                    builder.set_initial_phase(phase)
        else:
            five_prime = three_prime = CdsStat.UNKNOWN

        if builder.strand is Strand.MINUS:
            builder.set_attributes(cds_start_stat=three_prime, cds_end_stat=five_prime)
        else:
            builder.set_attributes(cds_start_stat=five_prime, cds_end_stat=three_prime)

        return builder.finalize(merge_exons=True)


def _five_prime_frame(group: _TranscriptRecords, reverse: bool) -> int | None:
    """Frame column of the CDS record closest to the 5' end."""
    parts = list(zip(group.cds_parts, group.cds_frames))
    if reverse:
        _, frame = max(parts, key=lambda part: part[0].end)
    else:
        _, frame = min(parts, key=lambda part: part[0].start)
    return frame


def read_gtf(path: Path | str) -> list[Transcript]:
    """Read all transcripts from a GTF file.

    Args:
        path: Path to GTF file.

    Returns:
        List of transcripts in order of first appearance.
    """
    path = Path(path)
    with open(path) as handle:
        return list(GtfReader(handle, name=path.name))


# =============================================================================
# GTF Writer
# =============================================================================


def _subtract_terminal(segment: Interval, pieces: list[Interval]) -> Interval | None:
    """Remove pieces touching either end of a segment."""
    start, end = segment
    for piece in pieces:
        if not segment.overlaps(piece):
            continue
        if piece.start <= start:
            start = max(start, piece.end)
        if piece.end >= end:
            end = min(end, piece.start)
    if start >= end:
        return None
    return Interval(start, end)


class GtfWriter(TranscriptWriter):
    """Write transcripts as GTF records.

    For every transcript the writer emits one ``transcript`` line, the
    ``start_codon``/``stop_codon`` lines of complete coding ends, and then
    per exon (5' to 3') the ``exon`` line followed by its ``CDS`` and UTR
    lines. CDS lines exclude a complete stop codon.

    Example:
        >>> writer = GtfWriter(sys.stdout, source="refGene")
        >>> writer.write_transcript(transcript)
    """

    def __init__(self, handle: TextIO, source: str = DEFAULT_GTF_SOURCE) -> None:
        """Initialize the writer.

        Args:
            handle: Writable text stream.
            source: Value of the source column.
        """
        super().__init__(handle)
        self.source = source

    def _format_line(
        self,
        transcript: Transcript,
        feature: str,
        start: int,
        end: int,
        frame: int | None = None,
        exon: Exon | None = None,
    ) -> str:
        """Format one GTF line from 0-based, half-open coordinates."""
        attributes: dict[str, Any] = {
            "gene_id": transcript.gene_symbol,
            "transcript_id": transcript.transcript_id,
        }
        if exon is not None:
            attributes["exon_number"] = exon.exon_number
            attributes["exon_id"] = f"{transcript.transcript_id}.{exon.exon_number}"
        attributes["gene_name"] = transcript.gene_symbol

        score_str = "." if transcript.score is None else f"{transcript.score:g}"
        frame_str = "." if frame is None else str(frame)
        columns = [
            transcript.chromosome,
            self.source,
            feature,
            str(start + 1),
            str(end),
            score_str,
            str(transcript.strand),
            frame_str,
            format_attributes(attributes),
        ]
        return "\t".join(columns) + "\n"

    def compose(self, transcript: Transcript) -> list[str]:
        """Build all GTF lines of a transcript."""
        lines = [
            self._format_line(
                transcript, "transcript", transcript.tx_start, transcript.tx_end
            )
        ]

        stop_pieces: list[Interval] = []
        if transcript.is_coding:
            if transcript.cds_start_complete:
                start_pieces = start_codon_intervals(transcript)
                lines.extend(self._codon_lines(transcript, "start_codon", start_pieces))
            if transcript.cds_end_complete:
                stop_pieces = stop_codon_intervals(transcript)
                lines.extend(self._codon_lines(transcript, "stop_codon", stop_pieces))

        for exon in transcript.exons_in_transcript_order():
            lines.append(self._format_line(transcript, "exon", exon.start, exon.end, exon=exon))
            if not transcript.is_coding:
                continue

            coding = transcript.exon_cds(exon)
            if coding is not None:
                cds = _subtract_terminal(coding, stop_pieces)
                if cds is not None:
                    lines.append(
                        self._format_line(
                            transcript, "CDS", cds.start, cds.end, frame=exon.frame, exon=exon
                        )
                    )

            left, right = transcript.utr_intervals(exon)
            left_type, right_type = ("3UTR", "5UTR") if transcript.is_reverse else ("5UTR", "3UTR")
            if left is not None:
                lines.append(
                    self._format_line(transcript, left_type, left.start, left.end, exon=exon)
                )
            if right is not None:
                lines.append(
                    self._format_line(transcript, right_type, right.start, right.end, exon=exon)
                )

        return lines

    def _codon_lines(
        self, transcript: Transcript, feature: str, pieces: list[Interval]
    ) -> list[str]:
        """Codon lines in 5' to 3' order, with the frame of each piece."""
        ordered = list(reversed(pieces)) if transcript.is_reverse else pieces
        lines = []
        consumed = 0
        for piece in ordered:
            frame = (3 - consumed % 3) % 3
            lines.append(
                self._format_line(transcript, feature, piece.start, piece.end, frame=frame)
            )
            consumed += piece.length
        return lines

    def write_transcript(self, transcript: Transcript) -> None:
        self._handle.writelines(self.compose(transcript))
