"""
CharacterListPage — page 1 of the vault GUI.

Shows the "<id> - <Class>" summary lines received on the character index
port and lets the user open one of them or start a new character.

Layout
──────
  ┌─────────────────────────────────────────┐
  │ Characters                              │
  │ ┌─────────────────────────────────────┐ │
  │ │ 4F1C…E2 - Wizard                    │ │
  │ │ r1 - Rogue                          │ │
  │ └─────────────────────────────────────┘ │
  │            [Refresh] [Open] [New]       │
  └─────────────────────────────────────────┘
"""

import logging

from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from dodvault.gui.viewmodels import CharacterListViewModel

__all__ = ["CharacterListPage"]

logger = logging.getLogger(__name__)


class CharacterListPage(QWidget):
    """First page: browse stored characters."""

    def __init__(self, parent: QWidget = None) -> None:
        super().__init__(parent)
        self._vm = CharacterListViewModel()
        self._build_ui()

    # ── UI construction ────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)

        layout.addWidget(QLabel("<b>Characters</b>"))

        self._list = QListWidget()
        self._list.currentRowChanged.connect(self._on_selection_changed)
        layout.addWidget(self._list)

        btn_row = QHBoxLayout()
        btn_row.addStretch()
        self._refresh_btn = QPushButton("Refresh")
        self._open_btn    = QPushButton("Open")
        self._new_btn     = QPushButton("New")
        self._open_btn.setEnabled(False)
        btn_row.addWidget(self._refresh_btn)
        btn_row.addWidget(self._open_btn)
        btn_row.addWidget(self._new_btn)
        layout.addLayout(btn_row)

    # ── Slots ──────────────────────────────────────────────────────────────

    def _on_selection_changed(self, row: int) -> None:
        self._vm.select_row(row)
        self._open_btn.setEnabled(self._vm.selected_id is not None)

    # ── Public API ─────────────────────────────────────────────────────────

    def load_entries(self, entries: list) -> None:
        """Populate the list from a character_index_receiver payload of [id, summary] rows."""
        self._vm.load(entries)
        keep = self._vm.selected_id
        self._list.clear()
        self._list.addItems(self._vm.summaries)
        ids = [doc_id for doc_id, _ in self._vm.entries]
        if keep in ids:
            self._list.setCurrentRow(ids.index(keep))
        logger.debug("Character list shows %d entries", len(self._vm.summaries))

    @property
    def selected_id(self):
        return self._vm.selected_id
