"""
MainWindow — top-level application window for the dodvault GUI.

Uses a QStackedWidget to host two pages:
  0  CharacterListPage    — stored characters as "<id> - <Class>"
  1  CharacterEditorPage  — JSON editor for one character

All persistence goes through the ports: the window never calls the store
directly. The PersistenceBridge runs on an asyncio loop in EventLoopThread.
"""

import logging

from PyQt6.QtWidgets import (
    QMainWindow,
    QStackedWidget,
    QWidget,
)

from dodvault.bridge.bridge import PersistenceBridge
from dodvault.bridge.ports import BridgePorts
from dodvault.gui.pages.character_editor import CharacterEditorPage
from dodvault.gui.pages.character_list import CharacterListPage
from dodvault.gui.worker import EventLoopThread, QtPortAdapter
from dodvault.store.db import DEFAULT_DB_DIR, DEFAULT_DB_NAME, DocumentStore

__all__ = ["MainWindow"]

logger = logging.getLogger(__name__)

# Page indices — keep in sync with the order they are added to the stack
PAGE_CHARACTER_LIST   = 0
PAGE_CHARACTER_EDITOR = 1


class MainWindow(QMainWindow):
    """Root window: owns the bridge, its loop thread and the two pages."""

    def __init__(self, store: DocumentStore = None, parent: QWidget = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Character Vault")
        self.resize(640, 480)

        if store is None:
            store = DocumentStore(DEFAULT_DB_NAME, base_dir=DEFAULT_DB_DIR)

        self._ports = BridgePorts()
        self._bridge = PersistenceBridge(store)
        self._bridge.attach(self._ports)

        self._loop_thread = EventLoopThread()
        self._adapter = QtPortAdapter(self._ports, self._loop_thread.loop)
        self._loop_thread.start()

        self._build_ui()
        self._connect_signals()
        self._adapter.retrieve_character_list()

    # ── UI construction ────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        self._stack = QStackedWidget()
        self.setCentralWidget(self._stack)

        self._page_list   = CharacterListPage()
        self._page_editor = CharacterEditorPage()

        self._stack.addWidget(self._page_list)    # 0
        self._stack.addWidget(self._page_editor)  # 1

        self._stack.setCurrentIndex(PAGE_CHARACTER_LIST)

    # ── Signal wiring ──────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._adapter.character_index_received.connect(self._page_list.load_entries)
        self._adapter.character_received.connect(self._on_character_received)

        self._page_list._refresh_btn.clicked.connect(self._adapter.retrieve_character_list)
        self._page_list._open_btn.clicked.connect(self._on_open_clicked)
        self._page_list._new_btn.clicked.connect(self._on_new_clicked)

        self._page_editor._save_btn.clicked.connect(self._on_save_clicked)
        self._page_editor._back_btn.clicked.connect(
            lambda: self.go_to(PAGE_CHARACTER_LIST)
        )

    # ── Slots ──────────────────────────────────────────────────────────────

    def _on_open_clicked(self) -> None:
        identifier = self._page_list.selected_id
        if identifier:
            self._adapter.retrieve_character(identifier)

    def _on_new_clicked(self) -> None:
        self._page_editor.new()
        self.go_to(PAGE_CHARACTER_EDITOR)

    def _on_character_received(self, serialized: str) -> None:
        self._page_editor.load(serialized)
        self.go_to(PAGE_CHARACTER_EDITOR)

    def _on_save_clicked(self) -> None:
        self._adapter.save_character(self._page_editor.text())
        # Save has no reply; list order is whatever the store enumerates
        self._adapter.retrieve_character_list()
        self.go_to(PAGE_CHARACTER_LIST)

    # ── Public API ─────────────────────────────────────────────────────────

    def go_to(self, page_index: int) -> None:
        """Switch the visible page to *page_index*."""
        self._stack.setCurrentIndex(page_index)

    def shutdown(self) -> None:
        """Stop the bridge loop thread; safe to call more than once."""
        self._loop_thread.stop()

    def closeEvent(self, event) -> None:  # noqa: N802
        self.shutdown()
        super().closeEvent(event)
