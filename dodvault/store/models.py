"""Data models for the store module."""

from dataclasses import dataclass, field
from typing import Any, Optional

__all__ = ["PutResult", "DocRow", "AllDocsResult"]


@dataclass(frozen=True)
class PutResult:
    """Outcome of a successful put: the document id and its new revision."""
    id:  str
    rev: str


@dataclass
class DocRow:
    """
    One row of an all_docs() listing.

    Fields
    ──────
    id   — document identifier (``_id``)
    rev  — current revision (``_rev``)
    doc  — full document incl. ``_id``/``_rev``; None unless include_docs=True
    """
    id:  str
    rev: str
    doc: Optional[dict[str, Any]] = None

    def __str__(self) -> str:
        return f"DocRow(id={self.id!r}, rev={self.rev!r})"


@dataclass
class AllDocsResult:
    """Result of all_docs(): total document count plus the ordered rows."""
    total_rows: int
    rows:       list[DocRow] = field(default_factory=list)
