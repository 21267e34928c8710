"""QC gate applied ahead of any writer.

A transcript is dropped when any of the selected checks is NOK; OK and
N/A pass.

Example:
    >>> gate = QCFilter(QCEngine(genome), ["start", "stop"])
    >>> with GtfWriter(sys.stdout) as writer:
    ...     writer.write_transcripts(gate.apply(transcripts))
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from txconvert.core.models import Transcript
from txconvert.qc.checks import QCCheck, QCEngine

logger = logging.getLogger(__name__)


class QCFilter:
    """Filter transcripts on a set of QC checks.

    Attributes:
        engine: Engine evaluating the checks.
        checks: Checks acting as gates.
        passed: Number of transcripts let through so far.
        dropped: Number of transcripts removed so far.
    """

    def __init__(self, engine: QCEngine, checks: Iterable[QCCheck | str]) -> None:
        self.engine = engine
        self.checks = [QCCheck(check) for check in checks]
        self.passed = 0
        self.dropped = 0

    def passes(self, transcript: Transcript) -> bool:
        """Check one transcript against the selected checks."""
        if not self.checks:
            return True
        result = self.engine.check(transcript)
        if result.passes(self.checks):
            return True
        failed = ", ".join(str(check) for check in result.failed() if check in self.checks)
        logger.debug(f"Dropping {transcript.transcript_id}: {failed}")
        return False

    def apply(self, transcripts: Iterable[Transcript]) -> Iterator[Transcript]:
        """Yield the transcripts that pass, preserving order."""
        for transcript in transcripts:
            if self.passes(transcript):
                self.passed += 1
                yield transcript
            else:
                self.dropped += 1
        if self.checks:
            checks = ", ".join(str(check) for check in self.checks)
            logger.info(
                f"QC filter ({checks}): {self.passed} passed, {self.dropped} dropped"
            )
