"""Recognized bank-statement CSV layouts and format detection.

Two layouts are supported:

- ``FORMAT_3``: header on the first line
  ``Status, Date, Description, Debit, Credit``
- ``FORMAT_4``: a six-line title block, then the header
  ``Date, Description, Amount, Running Bal.``

Detection checks header containment (every required header is present in the
candidate line, order-independent, case-sensitive). ``FORMAT_4`` is tried
first because its header sits at a fixed offset.
"""

from __future__ import annotations

import csv
from collections.abc import Sequence
from dataclasses import dataclass

from .errors import FormatError


@dataclass(frozen=True, slots=True)
class LayoutSpec:
    """A known CSV layout.

    ``skip_rows`` is the number of lines preceding the header; data rows start
    on the line after the header.
    """

    name: str
    headers: tuple[str, ...]
    skip_rows: int = 0
    date_format: str = "MM/DD/YYYY"

    @property
    def header_index(self) -> int:
        return self.skip_rows

    def matches(self, fields: Sequence[str]) -> bool:
        present = set(fields)
        return all(h in present for h in self.headers)


FORMAT_3 = LayoutSpec(
    name="FORMAT_3",
    headers=("Status", "Date", "Description", "Debit", "Credit"),
)
FORMAT_4 = LayoutSpec(
    name="FORMAT_4",
    headers=("Date", "Description", "Amount", "Running Bal."),
    skip_rows=6,
)

# Detection priority; first match wins.
LAYOUTS: tuple[LayoutSpec, ...] = (FORMAT_4, FORMAT_3)


def split_fields(line: str) -> list[str]:
    """Split one CSV line on commas and trim every field.

    Quoted fields are honored, so ``"ACME, INC"`` stays a single field. A line
    without quotes splits exactly like ``line.split(",")``.
    """

    row = next(csv.reader([line], skipinitialspace=True), [])
    return [f.strip() for f in row]


def _unrecognized_message() -> str:
    shapes = " or ".join(", ".join(layout.headers) for layout in (FORMAT_3, FORMAT_4))
    return f"Unrecognized CSV format. Supported formats are: {shapes}"


def detect_format(lines: Sequence[str]) -> LayoutSpec:
    """Classify a file (non-blank, trimmed lines) into a known layout.

    Raises
    ------
    FormatError
        When no layout's header set is contained in the expected header line.
    """

    for layout in LAYOUTS:
        idx = layout.header_index
        if idx >= len(lines):
            continue
        if layout.matches(split_fields(lines[idx])):
            return layout
    raise FormatError(_unrecognized_message())


__all__ = [
    "LayoutSpec",
    "FORMAT_3",
    "FORMAT_4",
    "LAYOUTS",
    "split_fields",
    "detect_format",
]
