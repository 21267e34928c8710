"""QC report output.

One tab separated row per transcript with the status of every check::

    Gene  transcript  exon  cds-length  start  stop  upstream-start  upstream-stop  coordinates

Cells are ``OK``, ``NOK`` or ``N/A``.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TextIO

from txconvert.core.models import Transcript
from txconvert.io.base import TranscriptWriter
from txconvert.qc.checks import QCCheck, QCEngine, QCResult, QCStatus

logger = logging.getLogger(__name__)

COLUMNS = ["Gene", "transcript", *(check.value for check in QCCheck)]
HEADER = "\t".join(COLUMNS) + "\n"


def format_result(result: QCResult) -> str:
    columns = [
        result.transcript.gene_symbol,
        result.transcript.transcript_id,
        *(str(result[check]) for check in QCCheck),
    ]
    return "\t".join(columns) + "\n"


class QCReportWriter(TranscriptWriter):
    """Write the QC report, header first.

    Example:
        >>> engine = QCEngine(genome, code_table)
        >>> with QCReportWriter(sys.stdout, engine) as writer:
        ...     writer.write_transcripts(transcripts)
    """

    def __init__(self, handle: TextIO, engine: QCEngine) -> None:
        super().__init__(handle)
        self.engine = engine
        self._failures: Counter[QCCheck] = Counter()
        self._header_written = False

    def write_header(self) -> None:
        if not self._header_written:
            self._handle.write(HEADER)
            self._header_written = True

    def write_transcript(self, transcript: Transcript) -> None:
        self.write_header()
        result = self.engine.check(transcript)
        self._failures.update(result.failed())
        self._handle.write(format_result(result))

    def close(self) -> None:
        self.write_header()
        for check, n in self._failures.items():
            logger.info(f"QC check {check}: {n} transcripts {QCStatus.NOK}")
        super().close()
