"""Typed dataclasses describing pages, sections, and rendered output."""

from __future__ import annotations

import copy
import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata
import enum
import typing as typ

from markupsafe import Markup


class PageStatus(enum.StrEnum):
    """Publication state recorded alongside a page."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


@dc.dataclass(slots=True)
class Section:
    """A typed, independently configurable unit of page content.

    Attributes
    ----------
    key : str
        Stable identity, unique within its page and independent of position.
    type : str
        Open-ended type tag used to look up a renderer.
    props : dict[str, Any]
        Untyped configuration bag whose shape depends on ``type``.
    """

    key: str
    type: str
    props: dict[str, typ.Any] = dc.field(default_factory=dict)

    def clone(self, *, key: str | None = None) -> Section:
        """Return a deep copy, optionally under a different key."""
        return Section(
            key=self.key if key is None else key,
            type=self.type,
            props=copy.deepcopy(self.props),
        )


@dc.dataclass(slots=True)
class Page:
    """A persisted document composed of ordered sections.

    Attributes
    ----------
    id : str
        Stable, unique page identifier.
    title : str
        Human readable title.
    sections : list[Section]
        Ordered sections; list order is render order.
    slug : str | None
        Optional URL slug used for output filenames.
    status : PageStatus
        Publication state.
    revision : int
        Revision marker maintained by the store.
    created_at : datetime | None
        Creation timestamp reported by the store.
    updated_at : datetime | None
        Last write timestamp reported by the store.
    """

    id: str
    title: str
    sections: list[Section] = dc.field(default_factory=list)
    slug: str | None = None
    status: PageStatus = PageStatus.DRAFT
    revision: int = 0
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    def keys(self) -> list[str]:
        """Return section keys in order."""
        return [section.key for section in self.sections]

    def index_of(self, key: str) -> int | None:
        """Return the position of the section keyed ``key`` or None."""
        for idx, section in enumerate(self.sections):
            if section.key == key:
                return idx
        return None

    def copy(self) -> Page:
        """Return a deep copy that shares no mutable state with this page."""
        return copy.deepcopy(self)


@dc.dataclass(frozen=True, slots=True)
class RenderedNode:
    """One rendered fragment produced for one input section.

    Attributes
    ----------
    identity : str
        Stable output identity derived from the section key, or positional
        when the section has none.
    type : str
        Section type the node was produced for.
    html : Markup
        Rendered HTML fragment.
    placeholder : bool
        True when the type had no registered renderer.
    """

    identity: str
    type: str
    html: Markup
    placeholder: bool = False


__all__ = ["Page", "PageStatus", "RenderedNode", "Section"]
