"""Tab-delimited table output."""

import csv
from pathlib import Path
from typing import Iterable, Sequence, Union

import numpy as np

from ..core.constants import TABLE_DELIMITER, TABLE_FORMAT


def format_value(x: float) -> str:
    """Fixed-width number format used by every table, e.g. 000000440.0000."""
    return TABLE_FORMAT % x


def write_delimited(
    path: Union[str, Path],
    headers: Sequence[str],
    rows: Iterable[Sequence[str]],
    delimiter: str = TABLE_DELIMITER,
) -> None:
    """
    Write a header row followed by data rows.

    Creates the file (and parent directories) or overwrites an existing one.

    Args:
        path: Output file path
        headers: Column headers
        rows: Rows of already formatted cells
        delimiter: Column delimiter
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", newline="") as f:
        writer = csv.writer(f, delimiter=delimiter, lineterminator="\n")
        writer.writerow(headers)
        writer.writerows(rows)


def write_spectrum(
    path: Union[str, Path],
    frequency: np.ndarray,
    power: np.ndarray,
) -> None:
    """Dump a single spectrum frame as two columns, Frequency and Power."""
    if len(frequency) != len(power):
        raise ValueError(
            f"Frequency and power lengths differ: {len(frequency)} != {len(power)}"
        )
    rows = ([format_value(f), format_value(p)] for f, p in zip(frequency, power))
    write_delimited(path, ["Frequency", "Power"], rows)
