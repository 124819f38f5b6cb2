"""
Request / response messages exchanged between the UI and the bridge.

Requests (UI → bridge)
──────────────────────
SaveRecord(serialized)   — JSON text of one character record
ListRecords()            — ask for the summary listing
GetRecord(identifier)    — ask for one record by _id

Responses (bridge → UI)
───────────────────────
RecordListing(summaries, identifiers) — "<id> - <Class>" strings in store order
RecordPayload(serialized)— JSON text of one stored record
RequestFailed(request, reason) — only sent when error surfacing is enabled

SaveRecord has no success response.
"""

from dataclasses import dataclass
from typing import Union

__all__ = [
    "SaveRecord",
    "ListRecords",
    "GetRecord",
    "Request",
    "RecordListing",
    "RecordPayload",
    "RequestFailed",
    "Response",
]


@dataclass(frozen=True)
class SaveRecord:
    serialized: str


@dataclass(frozen=True)
class ListRecords:
    pass


@dataclass(frozen=True)
class GetRecord:
    identifier: str


Request = Union[SaveRecord, ListRecords, GetRecord]


@dataclass(frozen=True)
class RecordListing:
    """Summary lines plus the matching ids, row for row."""
    summaries:   tuple[str, ...]
    identifiers: tuple[str, ...] = ()


@dataclass(frozen=True)
class RecordPayload:
    serialized: str


@dataclass(frozen=True)
class RequestFailed:
    """Error report for a request; *request* is the request type name."""
    request: str
    reason:  str

    def __str__(self) -> str:
        return f"{self.request} failed: {self.reason}"


Response = Union[RecordListing, RecordPayload, RequestFailed]
