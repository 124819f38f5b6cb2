"""
CharacterEditorPage — page 2 of the vault GUI.

A plain JSON editor for one character sheet. "Save" is only enabled while
the text parses as a JSON object; saving is fire-and-forget.
"""

import logging

from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from dodvault.gui.viewmodels import CharacterEditorViewModel

__all__ = ["CharacterEditorPage"]

logger = logging.getLogger(__name__)


class CharacterEditorPage(QWidget):
    """Second page: edit the JSON of one character."""

    def __init__(self, parent: QWidget = None) -> None:
        super().__init__(parent)
        self._vm = CharacterEditorViewModel()
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)

        self._title = QLabel("<b>Character</b>")
        layout.addWidget(self._title)

        self._editor = QPlainTextEdit()
        self._editor.setPlaceholderText('{"Class": "Wizard"}')
        self._editor.textChanged.connect(self._on_text_changed)
        layout.addWidget(self._editor)

        btn_row = QHBoxLayout()
        self._back_btn = QPushButton("← Back")
        self._save_btn = QPushButton("Save")
        btn_row.addWidget(self._back_btn)
        btn_row.addStretch()
        btn_row.addWidget(self._save_btn)
        layout.addLayout(btn_row)

    def _on_text_changed(self) -> None:
        self._vm.text = self._editor.toPlainText()
        self._save_btn.setEnabled(self._vm.is_valid)
        class_name = self._vm.class_name
        self._title.setText(f"<b>Character</b> {class_name}" if class_name else "<b>Character</b>")

    # ── Public API ─────────────────────────────────────────────────────────

    def load(self, serialized: str) -> None:
        """Show a record received on the character_receiver port."""
        self._vm.load(serialized)
        self._editor.setPlainText(self._vm.text)

    def new(self) -> None:
        self._vm.new()
        self._editor.setPlainText(self._vm.text)

    def text(self) -> str:
        return self._vm.text
