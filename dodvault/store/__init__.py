"""
store — SQLite-backed embedded document store.

Public API
──────────
DocumentStore  — async put / get / all_docs interface
PutResult      — id + revision returned by put()
DocRow         — one row of an all_docs() listing
AllDocsResult  — all_docs() result container
"""

from dodvault.store.models import AllDocsResult, DocRow, PutResult
from dodvault.store.db import DocumentStore

__all__ = ["AllDocsResult", "DocRow", "DocumentStore", "PutResult"]
