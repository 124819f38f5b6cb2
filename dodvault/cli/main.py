"""
CLI entry point for dodvault.

Usage
─────
  # Open the character sheet GUI (default when no subcommand is given)
  python -m dodvault gui

  # List stored characters as "<id> - <Class>"
  python -m dodvault list

  # Print one character as JSON
  python -m dodvault show --id abc123

  # Save a character from a JSON file (or "-" for stdin)
  python -m dodvault save --file ./wizard.json

Configuration
─────────────
  --db-dir / DODVAULT_DB_DIR    directory holding the store file (~/.dodvault)
  --name   / DODVAULT_DB_NAME   store name (doddb)

Every command goes through the same ports and PersistenceBridge the GUI
uses; the CLI enables error surfacing so failures reach the terminal.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Optional, TextIO

from dodvault.bridge.bridge import PersistenceBridge
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
from dodvault.exceptions import VaultBaseError
from dodvault.store.db import DEFAULT_DB_DIR, DEFAULT_DB_NAME, DocumentStore

__all__ = ["build_parser", "cmd_list", "cmd_show", "cmd_save", "cmd_gui", "main"]

logger = logging.getLogger(__name__)

NO_RESPONSE = "Error: the store sent no response"


# ── Argument parser ────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argument parser.

    Subcommands: gui | list | show | save
    """
    parser = argparse.ArgumentParser(
        prog="dodvault",
        description="Local character sheet vault",
    )
    parser.add_argument(
        "--db-dir",
        default=os.environ.get("DODVAULT_DB_DIR", DEFAULT_DB_DIR),
        metavar="DIR",
        help="Directory holding the document store (default: ~/.dodvault)",
    )
    parser.add_argument(
        "--name",
        default=os.environ.get("DODVAULT_DB_NAME", DEFAULT_DB_NAME),
        metavar="NAME",
        help="Document store name (default: doddb)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable verbose debug logging",
    )

    sub = parser.add_subparsers(dest="subcommand")

    sub.add_parser("gui", help="Open the character sheet window")
    sub.add_parser("list", help="List stored characters")

    # ── show ──────────────────────────────────────────────────────────────
    show = sub.add_parser("show", help="Print one character as JSON")
    show.add_argument(
        "--id",
        required=True,
        metavar="ID",
        help="Character identifier",
    )

    # ── save ──────────────────────────────────────────────────────────────
    save = sub.add_parser("save", help="Save a character from a JSON document")
    save.add_argument(
        "--file",
        default="-",
        metavar="PATH",
        help="JSON file to read, or - for stdin (default: -)",
    )

    return parser


# ── Helpers ───────────────────────────────────────────────────────────────────


async def _exchange(store: DocumentStore, request: Request) -> list[Response]:
    """Send *request* through a fresh set of ports; return every response."""
    ports = BridgePorts()
    responses: list[Response] = []
    ports.character_list_receiver.subscribe(
        lambda summaries: responses.append(RecordListing(tuple(summaries)))
    )
    ports.character_receiver.subscribe(
        lambda text: responses.append(RecordPayload(text))
    )
    ports.request_failed.subscribe(responses.append)

    bridge = PersistenceBridge(store, surface_errors=True)
    bridge.attach(ports)

    if isinstance(request, SaveRecord):
        ports.save_character.send(request.serialized)
    elif isinstance(request, ListRecords):
        ports.retrieve_character_list.send(None)
    else:
        ports.retrieve_character.send(request.identifier)

    await bridge.drain()
    bridge.detach(ports)
    return responses


def _report_failures(responses: list[Response]) -> bool:
    """Print any RequestFailed responses to stderr; True if there were some."""
    failures = [r for r in responses if isinstance(r, RequestFailed)]
    for failure in failures:
        print(f"Error: {failure.reason}", file=sys.stderr)
    return bool(failures)


# ── Command implementations ───────────────────────────────────────────────────


def cmd_list(store: DocumentStore) -> int:
    """Print one "<id> - <Class>" line per stored character."""
    responses = asyncio.run(_exchange(store, ListRecords()))
    if _report_failures(responses):
        return 1
    listing = next((r for r in responses if isinstance(r, RecordListing)), None)
    if listing is None:
        print(NO_RESPONSE, file=sys.stderr)
        return 1
    if not listing.summaries:
        print("0 characters found.")
        return 0
    for line in listing.summaries:
        print(line)
    return 0


def cmd_show(store: DocumentStore, identifier: str) -> int:
    """Pretty-print the character stored under *identifier*."""
    responses = asyncio.run(_exchange(store, GetRecord(identifier)))
    if _report_failures(responses):
        return 1
    payload = next((r for r in responses if isinstance(r, RecordPayload)), None)
    if payload is None:
        print(NO_RESPONSE, file=sys.stderr)
        return 1
    print(json.dumps(json.loads(payload.serialized), indent=2, ensure_ascii=False))
    return 0


def cmd_save(store: DocumentStore, source: str, stdin: Optional[TextIO] = None) -> int:
    """Save the JSON document read from *source* ("-" reads stdin)."""
    if source == "-":
        text = (stdin or sys.stdin).read()
    else:
        try:
            with open(source, encoding="utf-8") as fh:
                text = fh.read()
        except OSError as exc:
            print(f"Error: cannot read {source}: {exc}", file=sys.stderr)
            return 1

    responses = asyncio.run(_exchange(store, SaveRecord(text)))
    if _report_failures(responses):
        return 1
    print("Saved.")
    return 0


def cmd_gui(store: DocumentStore) -> int:
    """Open the PyQt6 window; returns the Qt event loop exit code."""
    from PyQt6.QtWidgets import QApplication
    from dodvault.gui.main_window import MainWindow

    app = QApplication.instance() or QApplication(sys.argv)
    window = MainWindow(store=store)
    window.show()
    return app.exec()


# ── Entry point ───────────────────────────────────────────────────────────────


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point. Returns exit code."""
    parser = build_parser()
    ns = parser.parse_args(argv)

    level = logging.DEBUG if ns.debug else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")

    try:
        store = DocumentStore(ns.name, base_dir=ns.db_dir)
    except (VaultBaseError, OSError) as exc:
        logger.debug("opening store failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if ns.subcommand == "list":
        return cmd_list(store=store)

    if ns.subcommand == "show":
        return cmd_show(store=store, identifier=ns.id)

    if ns.subcommand == "save":
        return cmd_save(store=store, source=ns.file)

    return cmd_gui(store=store)


if __name__ == "__main__":
    raise SystemExit(main())
