"""
Project-wide custom exception hierarchy.
All modules raise subclasses of VaultBaseError — never bare Exception.
"""

__all__ = [
    "VaultBaseError",
    "DeserializationError",
    "StoreError",
    "NotFoundError",
    "ConflictError",
]


class VaultBaseError(Exception):
    """Root exception for all dodvault errors."""


# ── Bridge ────────────────────────────────────────────────────────────────────

class DeserializationError(VaultBaseError):
    """Raised when an inbound record string is not a JSON object."""


# ── Store ─────────────────────────────────────────────────────────────────────

class StoreError(VaultBaseError):
    """
    Raised when the document store rejects or fails an operation.

    ``reason`` is a short machine-friendly tag ("not_found", "conflict",
    "bad_request", …) carried alongside the human-readable message.
    """

    reason = "store_error"

    def __init__(self, message: str, reason: str = "") -> None:
        super().__init__(message)
        if reason:
            self.reason = reason


class NotFoundError(StoreError):
    """Raised when no document matches the requested identifier."""

    reason = "not_found"


class ConflictError(StoreError):
    """Raised when a put carries a stale ``_rev`` for an existing document."""

    reason = "conflict"
