"""Exception hierarchy raised by the page-composition engine."""

from __future__ import annotations


class PageError(RuntimeError):
    """Base class for failures surfaced by the composition engine."""


class NotFoundError(PageError):
    """Raised when no page exists for the requested identifier."""

    def __init__(self, page_id: str) -> None:
        """Record the missing ``page_id`` alongside a readable message."""
        self.page_id = page_id
        super().__init__(f"Page '{page_id}' not found.")


class TransportError(PageError):
    """Raised when the storage collaborator is unreachable or returns bad data.

    Callers may retry the operation; the engine never retries on its own.
    """


class ValidationError(PageError, ValueError):
    """Raised when an edit would break key uniqueness or index bounds.

    The edit is rejected before any in-memory state changes.
    """


class SessionStateError(PageError):
    """Raised when an editing operation is invalid in the session's state."""


__all__ = [
    "NotFoundError",
    "PageError",
    "SessionStateError",
    "TransportError",
    "ValidationError",
]
