"""
Extension counting for lsext
Turns a stream of file paths into a frequency table and the sorted report rows
"""

import os
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

NO_EXTENSION = "<no extension>"
AGGREGATED = "<aggregated>"
DEFAULT_AGGREGATE = 10


@dataclass(frozen=True)
class ReportRow:
    """One line of the final table"""
    count: int
    label: str


def extension_key(filename: str) -> str:
    """Return the extension of a file name without its dot, or NO_EXTENSION.

    A leading dot marks a hidden file, not an extension, so ``.gitignore``
    has none while ``.config.yml`` has ``yml``.
    """
    name = os.path.basename(filename)
    stem, dot, extension = name.rpartition(".")
    if not dot or not stem or not extension:
        return NO_EXTENSION
    return extension


def count_extensions(paths: Iterable[str]) -> Dict[str, int]:
    """Count files per extension key"""
    frequencies = defaultdict(int)
    for path in paths:
        frequencies[extension_key(path)] += 1
    return dict(frequencies)


def sort_frequencies(frequencies: Dict[str, int]) -> List[Tuple[str, int]]:
    """Sort by count descending, then by extension ascending"""
    return sorted(frequencies.items(), key=lambda item: (-item[1], item[0]))


def build_report(frequencies: Dict[str, int], threshold: int = 0) -> List[ReportRow]:
    """Build the report rows, folding extensions seen fewer than ``threshold`` times.

    Args:
        frequencies: Extension key to file count
        threshold: Minimum count for an extension to get its own row (0 disables)

    Returns:
        Rows in display order, with a trailing AGGREGATED row if anything was folded
    """
    if threshold < 0:
        raise ValueError(f"Aggregation threshold must be >= 0, got {threshold}")

    rows = []
    aggregated = 0
    for extension, count in sort_frequencies(frequencies):
        if threshold == 0 or count >= threshold:
            rows.append(ReportRow(count, extension))
        else:
            aggregated += count

    if aggregated > 0:
        rows.append(ReportRow(aggregated, AGGREGATED))

    return rows
