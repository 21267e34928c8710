"""Utility functions for txconvert.

This module provides common utilities used across txconvert:

- Interval operations (overlap, clip, merge)
- Sequence manipulation (reverse complement, codons, line wrapping)
- Logging configuration

Example:
    >>> from txconvert.utils import merge_intervals, reverse_complement
    >>> reverse_complement("ATGC")
    'GCAT'
"""

from txconvert.utils.intervals import Interval, clip, merge_intervals
from txconvert.utils.sequences import reverse_complement, wrap

__all__ = [
    "Interval",
    "clip",
    "merge_intervals",
    "reverse_complement",
    "wrap",
]
