"""Quality control for txconvert.

This module provides the per-transcript QC checklist, the QC report
writer and the QC gate used to filter transcripts before any writer.

Example:
    >>> from txconvert.qc import QCEngine, QCFilter
    >>> engine = QCEngine(genome)
    >>> kept = list(QCFilter(engine, ["start", "stop"]).apply(transcripts))
"""

from txconvert.qc.checks import QCCheck, QCEngine, QCResult, QCStatus
from txconvert.qc.filters import QCFilter
from txconvert.qc.report import QCReportWriter, format_result

__all__ = [
    "QCCheck",
    "QCEngine",
    "QCFilter",
    "QCReportWriter",
    "QCResult",
    "QCStatus",
    "format_result",
]
