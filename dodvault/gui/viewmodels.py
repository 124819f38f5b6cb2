"""
GUI ViewModels — pure-Python state containers.

No Qt imports here; every class is testable without a display.
Qt pages observe these objects and redraw themselves from them.

Public API
──────────
CharacterListViewModel   — (id, summary) rows from the store + selection
CharacterEditorViewModel — JSON text of the character being edited
"""

import json
import logging
from typing import Any, Optional

__all__ = ["CharacterListViewModel", "CharacterEditorViewModel"]

logger = logging.getLogger(__name__)

# Starting point for the "New" button
NEW_CHARACTER_TEMPLATE = {"Class": "", "Name": ""}


# ── CharacterListViewModel ─────────────────────────────────────────────────────

class CharacterListViewModel:
    """
    Holds the listing received from the character index port.

    Each row keeps the record id next to its display line, so the id is
    never parsed back out of "<id> - <Class>" text.

    Attributes
    ──────────
    entries     — (id, summary) pairs, store order
    selected_id — id of the highlighted row, or None
    """

    def __init__(self) -> None:
        self.entries:     list[tuple[str, str]] = []
        self.selected_id: Optional[str]         = None

    def load(self, entries) -> None:
        """Replace the rows; keeps the selection only if its id is still present."""
        self.entries = [(str(doc_id), str(summary)) for doc_id, summary in entries]
        if self.selected_id not in {doc_id for doc_id, _ in self.entries}:
            self.selected_id = None

    @property
    def summaries(self) -> list[str]:
        return [summary for _, summary in self.entries]

    def select_row(self, row: int) -> None:
        """Select by row index; an out-of-range row clears the selection."""
        if 0 <= row < len(self.entries):
            self.selected_id = self.entries[row][0]
        else:
            self.selected_id = None


# ── CharacterEditorViewModel ───────────────────────────────────────────────────

class CharacterEditorViewModel:
    """
    Holds the JSON text of the character shown in the editor.

    The text is kept verbatim while the user types; ``record`` parses it on
    demand and is None whenever the text is not a JSON object.
    """

    def __init__(self) -> None:
        self.text: str = ""

    def load(self, serialized: str) -> None:
        """Load a stored record, pretty-printed for editing."""
        try:
            self.text = json.dumps(json.loads(serialized), indent=2, ensure_ascii=False)
        except ValueError:
            logger.warning("Received malformed character payload")
            self.text = serialized

    def new(self) -> None:
        self.text = json.dumps(NEW_CHARACTER_TEMPLATE, indent=2)

    @property
    def record(self) -> Optional[dict[str, Any]]:
        try:
            value = json.loads(self.text)
        except ValueError:
            return None
        return value if isinstance(value, dict) else None

    @property
    def is_valid(self) -> bool:
        return self.record is not None

    @property
    def class_name(self) -> str:
        rec = self.record
        return str(rec.get("Class", "")) if rec else ""
