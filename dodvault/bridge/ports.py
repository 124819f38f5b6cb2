"""
Ports — named one-directional message channels between the UI and the bridge.

A Port fans every payload sent on it out to its subscribers, in
subscription order. Inbound ports carry UI requests to the bridge; outbound
ports carry bridge responses back to the UI.

Usage::

    ports = BridgePorts()
    ports.character_list_receiver.subscribe(view.show_summaries)
    bridge.attach(ports)

    ports.retrieve_character_list.send(None)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from dodvault.bridge.messages import (
    RecordListing,
    RecordPayload,
    RequestFailed,
    Response,
)

__all__ = ["Port", "BridgePorts"]

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any], None]


class Port:
    """A named channel with any number of subscribers."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscribers: list[Subscriber] = []

    def __repr__(self) -> str:
        return f"Port({self.name!r}, subscribers={len(self._subscribers)})"

    @property
    def subscribers(self) -> list[Subscriber]:
        return list(self._subscribers)

    def subscribe(self, callback: Subscriber) -> None:
        """Register *callback*; subscribing the same callback twice is a no-op."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        """Remove *callback* if registered."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def send(self, payload: Any) -> None:
        """
        Deliver *payload* to every subscriber.

        A subscriber that raises is logged and skipped; the remaining
        subscribers still receive the payload.
        """
        if not self._subscribers:
            logger.debug("Port %s: no subscribers, payload dropped", self.name)
            return
        for callback in list(self._subscribers):
            try:
                callback(payload)
            except Exception:  # noqa: BLE001
                logger.exception("Port %s: subscriber %r failed", self.name, callback)


@dataclass
class BridgePorts:
    """
    The full set of ports the application wires between UI and bridge.

    Inbound  — save_character(str), retrieve_character_list(None),
               retrieve_character(str)
    Outbound — character_list_receiver(list[str]), character_receiver(str),
               request_failed(RequestFailed),
               character_index_receiver(list[[id, summary]]) for views that
               must map a summary line back to its record
    """
    save_character:          Port = field(default_factory=lambda: Port("save_character"))
    retrieve_character_list: Port = field(default_factory=lambda: Port("retrieve_character_list"))
    retrieve_character:      Port = field(default_factory=lambda: Port("retrieve_character"))
    character_list_receiver: Port = field(default_factory=lambda: Port("character_list_receiver"))
    character_receiver:      Port = field(default_factory=lambda: Port("character_receiver"))
    character_index_receiver: Port = field(default_factory=lambda: Port("character_index_receiver"))
    request_failed:          Port = field(default_factory=lambda: Port("request_failed"))

    def deliver(self, response: Response) -> None:
        """Route a bridge *response* to its outbound port."""
        if isinstance(response, RecordListing):
            self.character_list_receiver.send(list(response.summaries))
            if len(response.identifiers) == len(response.summaries):
                self.character_index_receiver.send([
                    [doc_id, summary]
                    for doc_id, summary in zip(response.identifiers, response.summaries)
                ])
        elif isinstance(response, RecordPayload):
            self.character_receiver.send(response.serialized)
        elif isinstance(response, RequestFailed):
            self.request_failed.send(response)
        else:
            raise TypeError(f"Unknown response type: {type(response).__name__}")
