"""Per-transcript quality control checks.

Every transcript is evaluated against a fixed checklist. Each check
yields OK, NOK or N/A; N/A is used when a check does not apply to the
transcript (e.g. ``start`` on a non-coding transcript) or when its input
is missing (no reference genome, or coordinates outside the reference).

Checks:
    exon: The transcript has at least one exon.
    cds-length: The CDS length is a multiple of three.
    start: The first codon is a start codon of the active genetic code.
    stop: The last codon is a stop codon of the active genetic code.
    upstream-start: No start codon in any frame of a non-coding transcript.
    upstream-stop: No in-frame stop codon before the last codon.
    coordinates: All exons lie within the reference chromosome.

A failing check is data, never an error: sequence lookup failures are
reported as NOK ``coordinates`` and turn the sequence checks into N/A.

Example:
    >>> from txconvert.qc import QCEngine, QCCheck
    >>> engine = QCEngine(genome)
    >>> result = engine.check(transcript)
    >>> result[QCCheck.START]
    <QCStatus.OK: 'OK'>
"""

from __future__ import annotations

import logging
from enum import Enum

import attrs

from txconvert.core.genetic_code import GeneticCode, GeneticCodeTable
from txconvert.core.models import Transcript
from txconvert.core.sequence import ReferenceProvider, cds_sequence, exon_sequence, translate
from txconvert.errors import SequenceError

logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================


class QCCheck(Enum):
    """Named QC checks, in report column order."""

    EXON = "exon"
    CDS_LENGTH = "cds-length"
    START = "start"
    STOP = "stop"
    UPSTREAM_START = "upstream-start"
    UPSTREAM_STOP = "upstream-stop"
    COORDINATES = "coordinates"

    def __str__(self) -> str:
        return self.value


class QCStatus(Enum):
    """Outcome of a single check."""

    OK = "OK"
    NOK = "NOK"
    NA = "N/A"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_bool(cls, passed: bool) -> QCStatus:
        return cls.OK if passed else cls.NOK


# =============================================================================
# Result
# =============================================================================


@attrs.define(slots=True, frozen=True)
class QCResult:
    """QC outcome of one transcript.

    Attributes:
        transcript: The evaluated transcript.
        statuses: Status of every check in :class:`QCCheck`.
    """

    transcript: Transcript
    statuses: dict[QCCheck, QCStatus]

    def __getitem__(self, check: QCCheck | str) -> QCStatus:
        return self.statuses[QCCheck(check)]

    def failed(self) -> list[QCCheck]:
        """Checks with status NOK."""
        return [check for check, status in self.statuses.items() if status is QCStatus.NOK]

    def passes(self, checks: list[QCCheck]) -> bool:
        """True unless one of the given checks is NOK."""
        return all(self.statuses[check] is not QCStatus.NOK for check in checks)


# =============================================================================
# Engine
# =============================================================================


class QCEngine:
    """Evaluate the QC checklist against a reference genome.

    Attributes:
        reference: Sequence provider, or None to skip sequence checks.
        code_table: Genetic codes resolved per chromosome.
    """

    def __init__(
        self,
        reference: ReferenceProvider | None = None,
        code_table: GeneticCodeTable | None = None,
    ) -> None:
        self.reference = reference
        self.code_table = code_table or GeneticCodeTable()

    def check(self, transcript: Transcript) -> QCResult:
        """Run all checks on a transcript."""
        na = QCStatus.NA
        statuses = {
            QCCheck.EXON: QCStatus.from_bool(transcript.exon_count > 0),
            QCCheck.CDS_LENGTH: na,
            QCCheck.START: na,
            QCCheck.STOP: na,
            QCCheck.UPSTREAM_START: na,
            QCCheck.UPSTREAM_STOP: na,
            QCCheck.COORDINATES: na,
        }
        if transcript.is_coding:
            statuses[QCCheck.CDS_LENGTH] = QCStatus.from_bool(transcript.cds_length % 3 == 0)

        if self.reference is None or transcript.exon_count == 0:
            return QCResult(transcript, statuses)

        try:
            exons = exon_sequence(transcript, self.reference)
        except SequenceError as e:
            logger.debug(f"{transcript.transcript_id}: {e}")
            statuses[QCCheck.COORDINATES] = QCStatus.NOK
            return QCResult(transcript, statuses)
        statuses[QCCheck.COORDINATES] = QCStatus.OK

        code = self.code_table.for_chromosome(transcript.chromosome)
        if transcript.is_coding:
            statuses.update(self._coding_checks(transcript, code))
        else:
            statuses[QCCheck.UPSTREAM_START] = QCStatus.from_bool(
                not _contains_start_codon(exons, code)
            )

        return QCResult(transcript, statuses)

    def _coding_checks(
        self, transcript: Transcript, code: GeneticCode
    ) -> dict[QCCheck, QCStatus]:
        sequence = cds_sequence(transcript, self.reference)
        translation = translate(sequence, code)
        return {
            QCCheck.START: QCStatus.from_bool(
                len(sequence) >= 3 and code.is_start_codon(sequence[:3])
            ),
            QCCheck.STOP: QCStatus.from_bool(translation.ends_with_stop),
            QCCheck.UPSTREAM_STOP: QCStatus.from_bool(not translation.has_internal_stop),
        }


def _contains_start_codon(sequence: str, code: GeneticCode) -> bool:
    """Search all three frames of a sequence for a start codon."""
    return any(code.is_start_codon(sequence[i : i + 3]) for i in range(len(sequence) - 2))
