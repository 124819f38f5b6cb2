"""
Qt ↔ asyncio plumbing for the GUI.

EventLoopThread — hosts the asyncio event loop the bridge runs on
QtPortAdapter   — widget-facing QObject: methods post requests onto the
                  inbound ports, signals carry outbound port messages

Usage (MainWindow)::

    self._loop_thread = EventLoopThread()
    self._loop_thread.start()
    self._adapter = QtPortAdapter(ports, self._loop_thread.loop)
    self._adapter.character_index_received.connect(self._page_list.load_entries)
    self._adapter.retrieve_character_list()

Signals
───────
character_list_received(list) — summary lines from character_list_receiver
character_received(str)       — JSON text from character_receiver
character_index_received(list)— [id, summary] rows from character_index_receiver
request_failed(str)           — only fires if the bridge surfaces errors
"""

import asyncio
import logging

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from dodvault.bridge.ports import BridgePorts

__all__ = ["EventLoopThread", "QtPortAdapter"]

logger = logging.getLogger(__name__)


class EventLoopThread(QThread):
    """
    Runs one asyncio event loop for the lifetime of the window.

    The loop object exists from construction so callers can schedule work
    before the thread has actually started.
    """

    def __init__(self, parent: QObject = None) -> None:
        super().__init__(parent)
        self._loop = asyncio.new_event_loop()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def run(self) -> None:
        """Entry point — QThread.start() calls this in the new thread."""
        asyncio.set_event_loop(self._loop)
        logger.debug("asyncio loop thread started")
        self._loop.run_forever()
        logger.debug("asyncio loop thread stopped")

    def stop(self, timeout_ms: int = 3000) -> None:
        """Stop the loop and wait for the thread to exit."""
        if self.isRunning():
            self._loop.call_soon_threadsafe(self._loop.stop)
            self.wait(timeout_ms)
        if not self._loop.is_running() and not self._loop.is_closed():
            self._loop.close()


class QtPortAdapter(QObject):
    """
    Bridges widget code (GUI thread) and the ports (loop thread).

    Inbound sends are marshalled onto the loop with call_soon_threadsafe;
    outbound payloads arrive on the loop thread and are re-emitted as Qt
    signals, which Qt queues back onto the GUI thread.
    """

    character_list_received = pyqtSignal(list)
    character_received      = pyqtSignal(str)
    character_index_received = pyqtSignal(list)
    request_failed          = pyqtSignal(str)

    def __init__(
        self,
        ports: BridgePorts,
        loop: asyncio.AbstractEventLoop,
        parent: QObject = None,
    ) -> None:
        super().__init__(parent)
        self._ports = ports
        self._loop = loop
        ports.character_list_receiver.subscribe(self.character_list_received.emit)
        ports.character_receiver.subscribe(self.character_received.emit)
        ports.character_index_receiver.subscribe(self.character_index_received.emit)
        ports.request_failed.subscribe(lambda failure: self.request_failed.emit(str(failure)))

    # ── Inbound requests ───────────────────────────────────────────────────

    def save_character(self, serialized: str) -> None:
        self._loop.call_soon_threadsafe(self._ports.save_character.send, serialized)

    def retrieve_character_list(self) -> None:
        self._loop.call_soon_threadsafe(self._ports.retrieve_character_list.send, None)

    def retrieve_character(self, identifier: str) -> None:
        self._loop.call_soon_threadsafe(self._ports.retrieve_character.send, identifier)
