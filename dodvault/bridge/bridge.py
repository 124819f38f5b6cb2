"""
PersistenceBridge — turns UI port messages into document-store operations.

Usage::

    store  = DocumentStore("doddb")
    ports  = BridgePorts()
    bridge = PersistenceBridge(store)
    bridge.attach(ports)            # must be called with a running event loop

    ports.save_character.send('{"_id": "r1", "Class": "Rogue"}')
    ports.retrieve_character.send("r1")
    await bridge.drain()

Flow per message
────────────────
inbound port → one asyncio task → one store call → outbound port
(on failure: logged on this module's logger, nothing is sent unless the
bridge was built with surface_errors=True)
"""

import asyncio
import json
import logging
from typing import Any, Callable, Optional

from dodvault.bridge.messages import (
    GetRecord,
    ListRecords,
    RecordListing,
    RecordPayload,
    Request,
    RequestFailed,
    Response,
    SaveRecord,
)
from dodvault.bridge.ports import BridgePorts
from dodvault.exceptions import DeserializationError
from dodvault.store.db import DocumentStore
from dodvault.store.models import DocRow

__all__ = ["PersistenceBridge", "parse_record", "summarize", "MISSING_CLASS"]

logger = logging.getLogger(__name__)

# Shown in a listing summary when a document has no "Class" field
MISSING_CLASS = "(no class)"
CLASS_FIELD = "Class"


def parse_record(serialized_record: str) -> dict[str, Any]:
    """Parse JSON text into a record; anything but a JSON object is rejected."""
    try:
        record = json.loads(serialized_record)
    except (TypeError, ValueError) as exc:
        raise DeserializationError(f"Malformed record: {exc}") from exc
    if not isinstance(record, dict):
        raise DeserializationError(
            f"Record must be a JSON object, got {type(record).__name__}"
        )
    return record


def summarize(row: DocRow) -> str:
    """Build the ``"<id> - <Class>"`` listing line for *row*."""
    class_name = (row.doc or {}).get(CLASS_FIELD)
    if class_name is None:
        class_name = MISSING_CLASS
    elif not isinstance(class_name, str):
        class_name = json.dumps(class_name, ensure_ascii=False)
    return f"{row.id} - {class_name}"


class PersistenceBridge:
    """
    Owns the injected DocumentStore and serves the three UI requests.

    Handlers are independent coroutines: several may be in flight at once
    and no locking is layered over the store. Each handler returns the
    response it sent (None when it sent nothing) so callers awaiting a
    handler directly can inspect the outcome.
    """

    def __init__(
        self,
        store: DocumentStore,
        sink: Optional[Callable[[Response], None]] = None,
        surface_errors: bool = False,
    ) -> None:
        self._store = store
        self._sink = sink
        self._surface_errors = surface_errors
        self._pending: set[asyncio.Task] = set()

    @property
    def store(self) -> DocumentStore:
        return self._store

    @property
    def pending(self) -> int:
        """Number of handler tasks that have not finished yet."""
        return len(self._pending)

    # ── Outbound ───────────────────────────────────────────────────────────

    def _send(self, response: Response) -> Response:
        if self._sink is not None:
            self._sink(response)
        else:
            logger.debug("No sink attached, dropping %s", type(response).__name__)
        return response

    def _report(self, request: str, exc: Exception) -> Optional[Response]:
        """Log a failed request; send RequestFailed only if surfacing is on."""
        logger.error("%s failed: %s", request, exc)
        logger.debug("%s traceback", request, exc_info=exc)
        if self._surface_errors:
            return self._send(RequestFailed(request=request, reason=str(exc)))
        return None

    # ── Handlers ───────────────────────────────────────────────────────────

    async def handle_save(self, serialized_record: str) -> Optional[Response]:
        """Deserialize and upsert one record. Sends nothing on success."""
        try:
            record = parse_record(serialized_record)
            result = await self._store.put(record)
        except Exception as exc:  # noqa: BLE001
            return self._report("SaveRecord", exc)
        logger.info("Saved record %s (rev %s)", result.id, result.rev)
        return None

    async def handle_list_all(self) -> Optional[Response]:
        """Send a RecordListing with one summary line per stored document."""
        try:
            listing = await self._store.all_docs(include_docs=True)
        except Exception as exc:  # noqa: BLE001
            return self._report("ListRecords", exc)
        summaries = tuple(summarize(row) for row in listing.rows)
        logger.debug("Listing %d record(s)", len(summaries))
        return self._send(RecordListing(
            summaries=summaries,
            identifiers=tuple(row.id for row in listing.rows),
        ))

    async def handle_get(self, identifier: str) -> Optional[Response]:
        """Send the stored document for *identifier* as a RecordPayload."""
        logger.debug("Retrieving record %s", identifier)
        try:
            doc = await self._store.get(identifier)
        except Exception as exc:  # noqa: BLE001
            return self._report("GetRecord", exc)
        return self._send(RecordPayload(serialized=json.dumps(doc, ensure_ascii=False)))

    async def dispatch(self, request: Request) -> Optional[Response]:
        """Route a request message to its handler."""
        if isinstance(request, SaveRecord):
            return await self.handle_save(request.serialized)
        if isinstance(request, ListRecords):
            return await self.handle_list_all()
        if isinstance(request, GetRecord):
            return await self.handle_get(request.identifier)
        raise TypeError(f"Unknown request type: {type(request).__name__}")

    # ── Port wiring ────────────────────────────────────────────────────────

    def spawn(self, request: Request) -> asyncio.Task:
        """
        Schedule *request* as a task on the running loop and return the task.

        Must be called from the event loop thread.
        """
        task = asyncio.get_running_loop().create_task(
            self.dispatch(request), name=type(request).__name__
        )
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._report(task.get_name(), exc)

    def attach(self, ports: BridgePorts) -> None:
        """Subscribe the handlers to the inbound ports and reply on *ports*."""
        self._sink = ports.deliver
        ports.save_character.subscribe(self._on_save_character)
        ports.retrieve_character_list.subscribe(self._on_retrieve_character_list)
        ports.retrieve_character.subscribe(self._on_retrieve_character)

    def detach(self, ports: BridgePorts) -> None:
        """Undo attach(); pending tasks still run to completion."""
        ports.save_character.unsubscribe(self._on_save_character)
        ports.retrieve_character_list.unsubscribe(self._on_retrieve_character_list)
        ports.retrieve_character.unsubscribe(self._on_retrieve_character)
        self._sink = None

    def _on_save_character(self, message: str) -> None:
        self.spawn(SaveRecord(serialized=message))

    def _on_retrieve_character_list(self, _message: Any = None) -> None:
        self.spawn(ListRecords())

    def _on_retrieve_character(self, identifier: str) -> None:
        self.spawn(GetRecord(identifier=identifier))

    async def drain(self) -> None:
        """Wait until every spawned task (including ones spawned meanwhile) is done."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
