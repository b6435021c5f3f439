"""Statement file reading and per-layout row parsing.

Converts the data rows of a detected layout into
:class:`~spend_tracker.models.TransactionCandidate` records. Rows that cannot
be parsed (too few fields, bad date, non-numeric amount) are dropped without
raising; the batch continues.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from os import PathLike
from pathlib import Path

from .formats import FORMAT_3, FORMAT_4, LayoutSpec, detect_format, split_fields
from .logging_setup import get_logger
from .models import TransactionCandidate

logger = get_logger("spend_tracker.parsing")

_CENTS = Decimal("0.01")
_ZERO = Decimal("0.00")


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def parse_date(raw: str | None) -> str | None:
    """Convert ``M/D/YYYY`` (zero padding optional) to ``YYYY-MM-DD``.

    Returns ``None`` when a component is missing or non-numeric, or when the
    components do not form a real calendar date.
    """

    if raw is None:
        return None
    parts = raw.strip().split("/")
    if len(parts) != 3 or not all(p.strip().isdecimal() for p in parts):
        return None
    try:
        month, day, year = (int(p) for p in parts)
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_amount(raw: str) -> Decimal | None:
    """Strip ``$`` and ``,`` then convert to a two-decimal ``Decimal``."""

    s = raw.replace("$", "").replace(",", "").strip()
    try:
        d = Decimal(s)
        if not d.is_finite():
            return None
        # Values too large for cents at context precision are rejected
        return d.quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


def _format3_amount(debit: str, credit: str) -> Decimal | None:
    # Debit wins when both columns are filled; credit is negated.
    if debit:
        return parse_amount(debit)
    if credit:
        amt = parse_amount(credit)
        return -amt if amt is not None else None
    return _ZERO


def _format4_amount(amount: str) -> Decimal | None:
    return parse_amount(amount) if amount else _ZERO


# ---------------------------------------------------------------------------
# Row parsers
# ---------------------------------------------------------------------------


def _format3_row(values: Sequence[str]) -> tuple[str, str, Decimal | None]:
    return values[1], values[2], _format3_amount(values[3], values[4])


def _format4_row(values: Sequence[str]) -> tuple[str, str, Decimal | None]:
    return values[0], values[1], _format4_amount(values[2])


_ROW_PARSERS: dict[str, Callable[[Sequence[str]], tuple[str, str, Decimal | None]]] = {
    FORMAT_3.name: _format3_row,
    FORMAT_4.name: _format4_row,
}


def parse_row(layout: LayoutSpec, values: Sequence[str]) -> TransactionCandidate | None:
    """Parse one row's trimmed fields; ``None`` means the row is dropped."""

    if len(values) < len(layout.headers):
        return None
    date_raw, text, amount = _ROW_PARSERS[layout.name](values)
    iso = parse_date(date_raw)
    if iso is None or amount is None:
        return None
    return TransactionCandidate(date=iso, vendor_raw=text, description=text, amount=amount)


def parse_rows(layout: LayoutSpec, lines: Sequence[str]) -> Iterator[TransactionCandidate]:
    """Yield candidates for every data line after the layout's header."""

    for lineno in range(layout.header_index + 1, len(lines)):
        candidate = parse_row(layout, split_fields(lines[lineno]))
        if candidate is None:
            logger.debug("dropping unparseable row %d: %r", lineno, lines[lineno])
            continue
        yield candidate


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParsedStatement:
    file_name: str
    layout: LayoutSpec
    candidates: tuple[TransactionCandidate, ...]


def read_statement_lines(path: str | PathLike[str]) -> list[str]:
    """Read a statement and return its non-blank, trimmed lines.

    ``FileNotFoundError``/``PermissionError`` propagate unchanged. A UTF-8 BOM
    is tolerated.
    """

    text = Path(path).read_text(encoding="utf-8-sig")
    return [s for s in (line.strip() for line in text.splitlines()) if s]


def parse_file(path: str | PathLike[str]) -> ParsedStatement:
    """Read, detect and parse a statement without touching the store.

    Raises :class:`~spend_tracker.errors.FormatError` before any row is
    parsed when the layout is not recognized.
    """

    p = Path(path)
    lines = read_statement_lines(p)
    layout = detect_format(lines)
    candidates = tuple(parse_rows(layout, lines))
    logger.debug(
        "parsed %s as %s: %d candidate(s) from %d line(s)",
        p.name,
        layout.name,
        len(candidates),
        len(lines),
    )
    return ParsedStatement(file_name=p.name, layout=layout, candidates=candidates)


__all__ = [
    "parse_date",
    "parse_amount",
    "parse_row",
    "parse_rows",
    "ParsedStatement",
    "read_statement_lines",
    "parse_file",
]
