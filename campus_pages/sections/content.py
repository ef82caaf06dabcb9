"""Read-only content collaborator for sections that list CMS records."""

from __future__ import annotations

import collections.abc as cabc
import copy
import typing as typ

ContentRecord = cabc.Mapping[str, typ.Any]


class ContentSource(typ.Protocol):
    """Source of already-shaped CMS records (courses, faculty, testimonials)."""

    def records(self, kind: str) -> list[ContentRecord]:
        """Return the records of ``kind`` in display order."""
        ...


class StaticContentSource:
    """Serve content records held in memory, typically loaded from config."""

    def __init__(
        self, collections: cabc.Mapping[str, cabc.Sequence[ContentRecord]] | None = None
    ) -> None:
        self._collections: dict[str, list[ContentRecord]] = {
            kind: [dict(item) for item in items if isinstance(item, cabc.Mapping)]
            for kind, items in (collections or {}).items()
            if isinstance(items, list | tuple)
        }

    def records(self, kind: str) -> list[ContentRecord]:
        return copy.deepcopy(self._collections.get(kind, []))

    def kinds(self) -> list[str]:
        return sorted(self._collections)


__all__ = ["ContentRecord", "ContentSource", "StaticContentSource"]
