"""Binary transcript cache.

Transcripts are stored column-wise in an HDF5 file so that a parsed
annotation can be reloaded without re-parsing the text format. The file
is a private cache, not an interchange format: any mismatch with the
current schema is rejected with :class:`~txconvert.errors.DeserializationError`.

Layout (group ``/transcripts``)::

    attrs: schema_version, format
    transcript_id, gene_symbol, chromosome, strand,
    cds_start_stat, cds_end_stat               (n,)   utf-8 strings
    cds_start, cds_end                         (n,)   int64, -1 = non-coding
    score                                      (n,)   float64, NaN = missing
    exon_offsets                               (n+1,) int64
    exon_start, exon_end, exon_number          (m,)   int64
    exon_frame                                 (m,)   int8, -1 = none

Example:
    >>> from txconvert.io.binary import BinaryWriter, read_binary
    >>> with BinaryWriter("cache.h5") as writer:
    ...     writer.write_transcripts(transcripts)
    >>> read_binary("cache.h5") == transcripts
    True
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Iterator

import h5py
import numpy as np

from txconvert.core.models import CdsStat, Exon, Strand, Transcript
from txconvert.errors import DeserializationError, SerializationError
from txconvert.io.base import TranscriptWriter

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

SCHEMA_VERSION = 1
FORMAT_NAME = "txconvert-transcripts"
GROUP = "transcripts"

STRING_FIELDS = (
    "transcript_id",
    "gene_symbol",
    "chromosome",
    "strand",
    "cds_start_stat",
    "cds_end_stat",
)
NUMERIC_FIELDS = ("cds_start", "cds_end", "score", "exon_offsets")
EXON_FIELDS = ("exon_start", "exon_end", "exon_number", "exon_frame")

MISSING = -1

BinaryTarget = Path | str | BinaryIO


# =============================================================================
# Writer
# =============================================================================


class BinaryWriter(TranscriptWriter):
    """Buffer transcripts and store them as an HDF5 cache on close.

    Args:
        target: Output path or a seekable binary file object.
    """

    def __init__(self, target: BinaryTarget) -> None:
        super().__init__(None)
        self.target = target
        self._transcripts: list[Transcript] = []
        self._written = False

    def write_transcript(self, transcript: Transcript) -> None:
        self._transcripts.append(transcript)

    def close(self) -> None:
        if self._written:
            return
        target = str(self.target) if isinstance(self.target, Path) else self.target
        try:
            with h5py.File(target, "w") as f:
                _store(f, self._transcripts)
        except (OSError, ValueError, TypeError) as e:
            raise SerializationError(f"Unable to write binary cache: {e}") from e
        self._written = True
        logger.info(f"Wrote {len(self._transcripts)} transcripts to binary cache")


def _store(f: h5py.File, transcripts: list[Transcript]) -> None:
    group = f.create_group(GROUP)
    group.attrs["schema_version"] = SCHEMA_VERSION
    group.attrs["format"] = FORMAT_NAME

    string_dtype = h5py.string_dtype(encoding="utf-8")
    columns = {
        "transcript_id": [tx.transcript_id for tx in transcripts],
        "gene_symbol": [tx.gene_symbol for tx in transcripts],
        "chromosome": [tx.chromosome for tx in transcripts],
        "strand": [tx.strand.value for tx in transcripts],
        "cds_start_stat": [tx.cds_start_stat.value for tx in transcripts],
        "cds_end_stat": [tx.cds_end_stat.value for tx in transcripts],
    }
    for name, values in columns.items():
        group.create_dataset(name, data=np.array(values, dtype=object), dtype=string_dtype)

    group.create_dataset("cds_start", data=_optional_ints(tx.cds_start for tx in transcripts))
    group.create_dataset("cds_end", data=_optional_ints(tx.cds_end for tx in transcripts))
    scores = [np.nan if tx.score is None else tx.score for tx in transcripts]
    group.create_dataset("score", data=np.array(scores, dtype=np.float64))

    counts = [tx.exon_count for tx in transcripts]
    offsets = np.zeros(len(transcripts) + 1, dtype=np.int64)
    offsets[1:] = np.cumsum(counts, dtype=np.int64)
    group.create_dataset("exon_offsets", data=offsets)

    exons = [exon for tx in transcripts for exon in tx.exons]
    group.create_dataset("exon_start", data=np.array([e.start for e in exons], dtype=np.int64))
    group.create_dataset("exon_end", data=np.array([e.end for e in exons], dtype=np.int64))
    group.create_dataset(
        "exon_number", data=np.array([e.exon_number for e in exons], dtype=np.int64)
    )
    group.create_dataset(
        "exon_frame", data=_optional_ints((e.frame for e in exons), dtype=np.int8)
    )


def _optional_ints(values: Iterable[int | None], dtype: Any = np.int64) -> np.ndarray:
    """Encode optional integers with MISSING for None."""
    return np.array([MISSING if v is None else v for v in values], dtype=dtype)


# =============================================================================
# Reader
# =============================================================================


class BinaryReader:
    """Load transcripts from an HDF5 cache written by :class:`BinaryWriter`.

    Raises:
        DeserializationError: On iteration, if the file is not a cache of the
            current schema.
    """

    def __init__(self, source: BinaryTarget, name: str = "<input>") -> None:
        self.source = source
        self.name = name

    def __iter__(self) -> Iterator[Transcript]:
        source = str(self.source) if isinstance(self.source, Path) else self.source
        try:
            f = h5py.File(source, "r")
        except OSError as e:
            raise DeserializationError(f"{self.name} is not a binary cache: {e}") from e

        with f:
            transcripts = _load(f, self.name)

        logger.info(f"Read {len(transcripts)} transcripts from binary cache {self.name}")
        yield from transcripts


def _load(f: h5py.File, name: str) -> list[Transcript]:
    if GROUP not in f:
        raise DeserializationError(f"{name}: missing '{GROUP}' group")
    group = f[GROUP]

    version = group.attrs.get("schema_version")
    if group.attrs.get("format") != FORMAT_NAME or version != SCHEMA_VERSION:
        raise DeserializationError(
            f"{name}: unsupported schema {group.attrs.get('format')!r} version {version!r}"
        )

    missing = [
        field
        for field in STRING_FIELDS + NUMERIC_FIELDS + EXON_FIELDS
        if field not in group
    ]
    if missing:
        raise DeserializationError(f"{name}: missing datasets {', '.join(missing)}")

    strings = {field: group[field].asstr()[:] for field in STRING_FIELDS}
    cds_start = group["cds_start"][:]
    cds_end = group["cds_end"][:]
    score = group["score"][:]
    offsets = group["exon_offsets"][:]
    exon_start = group["exon_start"][:]
    exon_end = group["exon_end"][:]
    exon_number = group["exon_number"][:]
    exon_frame = group["exon_frame"][:]

    n = len(strings["transcript_id"])
    lengths = {len(values) for values in strings.values()} | {
        len(cds_start),
        len(cds_end),
        len(score),
    }
    n_exons = {len(exon_start), len(exon_end), len(exon_number), len(exon_frame)}
    if lengths != {n} or len(offsets) != n + 1 or len(n_exons) != 1:
        raise DeserializationError(f"{name}: inconsistent dataset lengths")
    if n and (offsets[0] != 0 or offsets[-1] != n_exons.pop() or np.any(np.diff(offsets) < 1)):
        raise DeserializationError(f"{name}: invalid exon offsets")

    transcripts = []
    for i in range(n):
        exons = [
            Exon(
                int(exon_start[j]),
                int(exon_end[j]),
                int(exon_number[j]),
                None if exon_frame[j] == MISSING else int(exon_frame[j]),
            )
            for j in range(int(offsets[i]), int(offsets[i + 1]))
        ]
        try:
            transcripts.append(
                Transcript(
                    transcript_id=str(strings["transcript_id"][i]),
                    gene_symbol=str(strings["gene_symbol"][i]),
                    chromosome=str(strings["chromosome"][i]),
                    strand=Strand.from_str(str(strings["strand"][i])),
                    exons=exons,
                    cds_start=None if cds_start[i] == MISSING else int(cds_start[i]),
                    cds_end=None if cds_end[i] == MISSING else int(cds_end[i]),
                    cds_start_stat=CdsStat.from_str(str(strings["cds_start_stat"][i])),
                    cds_end_stat=CdsStat.from_str(str(strings["cds_end_stat"][i])),
                    score=None if math.isnan(score[i]) else float(score[i]),
                )
            )
        except ValueError as e:
            raise DeserializationError(f"{name}: record {i}: {e}") from e

    return transcripts


def read_binary(source: BinaryTarget) -> list[Transcript]:
    """Read all transcripts from a binary cache."""
    return list(BinaryReader(source, name=str(source)))
