"""Exception types raised across the ingestion pipeline.

Row-level validation problems are not represented here: invalid rows are
dropped silently by the parser. Duplicates are counted, not raised.
"""

from __future__ import annotations


class FormatError(ValueError):
    """No recognized CSV layout matches the file; nothing was imported."""


class NotFoundError(LookupError):
    """An operation addressed a row by id that does not exist."""

    def __init__(self, kind: str, ident: object) -> None:
        super().__init__(f"{kind} not found: {ident}")
        self.kind = kind
        self.ident = ident


__all__ = ["FormatError", "NotFoundError"]
