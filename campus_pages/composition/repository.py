"""Load and persist pages against an abstract storage collaborator.

Stored page records are loosely typed: field names differ between the
content back ends the site has used (``content_data`` rows with
``component_type``/``settings``, Sanity documents with ``_key``/``_type``,
plain ``sections`` lists with ``key``/``type``/``props``). This module adapts
any of those shapes into a canonical :class:`~campus_pages.composition.models.Page`
and serializes pages back into one canonical record shape. Adaptation is
all-or-nothing: a record that cannot be fully understood raises
:class:`TransportError` instead of producing a partially populated page.

Example
-------
>>> from campus_pages.composition.stores import InMemoryPageStore
>>> store = InMemoryPageStore(
...     {"home": {"id": "home", "title": "Home", "content_data": [
...         {"component_type": "hero", "settings": {"title": "Welcome"}}]}}
... )
>>> page = PageRepository(store).get_by_id("home")
>>> [(s.key, s.type, s.props) for s in page.sections]
[('section-0', 'hero', {'title': 'Welcome'})]
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import datetime as dt
import logging
import numbers
import typing as typ

from campus_pages._constants import FALLBACK_KEY_TEMPLATE

from .errors import NotFoundError, PageError, TransportError
from .models import Page, PageStatus, Section

logger = logging.getLogger(__name__)

PageRecord = cabc.Mapping[str, typ.Any]

_ID_FIELDS = ("id", "_id")
_SECTIONS_FIELDS = ("sections", "content_data", "components")
_REVISION_FIELDS = ("revision", "version", "_rev")
_CREATED_FIELDS = ("created_at", "_createdAt")
_UPDATED_FIELDS = ("updated_at", "_updatedAt")
_KEY_FIELDS = ("key", "_key", "id")
_TYPE_FIELDS = ("type", "component_type", "_type")
_PROPS_FIELDS = ("props", "settings")
_POSITION_FIELDS = ("position", "order")


class PageStore(typ.Protocol):
    """Storage collaborator exchanging loosely typed page records."""

    def fetch_page_record(self, page_id: str) -> PageRecord | None:
        """Return the stored record for ``page_id`` or None when absent."""
        ...

    def persist_page_record(self, record: PageRecord) -> PageRecord:
        """Persist ``record`` and return the canonical stored form."""
        ...


class PageRepository:
    """Fetch and persist :class:`Page` documents by identifier."""

    def __init__(self, store: PageStore) -> None:
        """Wrap ``store``, the collaborator that owns durable page records."""
        self._store = store

    def get_by_id(self, page_id: str) -> Page:
        """Return the page stored under ``page_id``.

        Raises
        ------
        NotFoundError
            If the store has no page with that identifier.
        TransportError
            If the store is unreachable or the record is malformed.
        """
        logger.debug("fetching page %s", page_id)
        try:
            record = self._store.fetch_page_record(page_id)
        except PageError:
            raise
        except Exception as exc:
            msg = f"Store failed to fetch page '{page_id}': {exc!r}"
            raise TransportError(msg) from exc
        if record is None:
            raise NotFoundError(page_id)
        return adapt_page_record(record, page_id=page_id)

    def save(self, page: Page) -> Page:
        """Persist the full ``page`` and return the canonical stored page.

        The returned page may carry server-assigned values such as a bumped
        revision, timestamps, or keys. Saving identical content twice is
        harmless; each call may still bump the revision.

        Raises
        ------
        TransportError
            If the store cannot persist the page or replies with a malformed
            record. The previously stored document is left unchanged.
        """
        record = page_to_record(page)
        logger.debug("persisting page %s at revision %s", page.id, page.revision)
        try:
            stored = self._store.persist_page_record(record)
        except PageError:
            raise
        except Exception as exc:
            msg = f"Store failed to save page '{page.id}': {exc!r}"
            raise TransportError(msg) from exc
        if stored is None:
            msg = f"Store returned no record after saving page '{page.id}'."
            raise TransportError(msg)
        return adapt_page_record(stored, page_id=page.id)


def adapt_page_record(record: object, *, page_id: str | None = None) -> Page:
    """Normalize a stored page record into a :class:`Page`.

    Parameters
    ----------
    record : object
        Mapping as returned by a :class:`PageStore`.
    page_id : str, optional
        Identifier the record was requested under. Used when the record omits
        its own id; a conflicting id is treated as malformed data.

    Raises
    ------
    TransportError
        If any part of the record cannot be adapted.
    """
    if not isinstance(record, cabc.Mapping):
        msg = f"Page record must be a mapping, got {type(record).__name__}."
        raise TransportError(msg)

    found_id = _first(record, _ID_FIELDS)
    if found_id in (None, ""):
        found_id = page_id
    if not found_id:
        msg = "Page record has no identifier."
        raise TransportError(msg)
    resolved_id = str(found_id)
    if page_id is not None and resolved_id != page_id:
        msg = f"Requested page '{page_id}' but store returned '{resolved_id}'."
        raise TransportError(msg)

    title = record.get("title")
    return Page(
        id=resolved_id,
        title=str(title) if title else resolved_id,
        sections=_adapt_sections(_first(record, _SECTIONS_FIELDS), resolved_id),
        slug=_adapt_slug(record.get("slug")),
        status=_adapt_status(record),
        revision=_adapt_revision(_first(record, _REVISION_FIELDS)),
        created_at=_parse_timestamp(_first(record, _CREATED_FIELDS)),
        updated_at=_parse_timestamp(_first(record, _UPDATED_FIELDS)),
    )


def page_to_record(page: Page) -> dict[str, typ.Any]:
    """Serialize ``page`` into the canonical record shape stores accept."""
    return {
        "id": page.id,
        "title": page.title,
        "slug": page.slug,
        "status": page.status.value,
        "revision": page.revision,
        "created_at": _format_timestamp(page.created_at),
        "updated_at": _format_timestamp(page.updated_at),
        "sections": [
            {
                "key": section.key,
                "type": section.type,
                "props": copy.deepcopy(section.props),
                "position": position,
            }
            for position, section in enumerate(page.sections)
        ],
    }


def _first(record: cabc.Mapping[str, typ.Any], names: tuple[str, ...]) -> typ.Any:
    """Return the value of the first field in ``names`` present in ``record``."""
    for name in names:
        if name in record:
            return record[name]
    return None


def _adapt_sections(raw: object, page_id: str) -> list[Section]:
    """Adapt the raw sections list, assigning keys and default props."""
    match raw:
        case None:
            return []
        case list() | tuple():
            entries = list(raw)
        case _:
            msg = f"Sections of page '{page_id}' must be a list."
            raise TransportError(msg)

    for entry in entries:
        if not isinstance(entry, cabc.Mapping):
            msg = f"Page '{page_id}' contains a section that is not a mapping."
            raise TransportError(msg)
    entries = _order_by_position(entries)

    sections: list[Section] = []
    used: set[str] = set()
    for index, entry in enumerate(entries):
        section_type = _first(entry, _TYPE_FIELDS)
        if not isinstance(section_type, str) or not section_type:
            msg = f"Section {index} of page '{page_id}' has no type."
            raise TransportError(msg)

        props = _first(entry, _PROPS_FIELDS)
        if props is None:
            props = {}
        elif not isinstance(props, cabc.Mapping):
            msg = (
                f"Section {index} of page '{page_id}' has props of type "
                f"{type(props).__name__}; expected a mapping."
            )
            raise TransportError(msg)

        raw_key = _first(entry, _KEY_FIELDS)
        base = str(raw_key) if raw_key not in (None, "") else ""
        if not base:
            base = FALLBACK_KEY_TEMPLATE.format(index=index)
            logger.debug("page %s: assigned key %s to section %d", page_id, base, index)
        key = unique_key(base, used)
        if key != base:
            logger.warning(
                "page %s: duplicate section key %s renamed to %s", page_id, base, key
            )
        sections.append(
            Section(key=key, type=section_type, props=copy.deepcopy(dict(props)))
        )
    return sections


def _order_by_position(
    entries: list[cabc.Mapping[str, typ.Any]],
) -> list[cabc.Mapping[str, typ.Any]]:
    """Sort by explicit position when every entry carries a numeric one."""
    positions = [_first(entry, _POSITION_FIELDS) for entry in entries]
    if not entries or not all(_is_number(value) for value in positions):
        return entries
    ordered = sorted(zip(positions, range(len(entries)), entries, strict=True))
    return [entry for _position, _idx, entry in ordered]


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def unique_key(base: str, used: set[str]) -> str:
    """Return a key not in ``used``, appending numeric suffixes and mutating ``used``."""
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def _adapt_slug(value: object) -> str | None:
    """Return the slug string, unwrapping Sanity ``{"current": ...}`` objects."""
    match value:
        case {"current": current}:
            value = current
        case _:
            pass
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _adapt_status(record: cabc.Mapping[str, typ.Any]) -> PageStatus:
    raw = record.get("status")
    if raw is None:
        return PageStatus.PUBLISHED if record.get("is_published") else PageStatus.DRAFT
    try:
        return PageStatus(str(raw).upper())
    except ValueError as exc:
        msg = f"Unknown page status '{raw}'."
        raise TransportError(msg) from exc


def _adapt_revision(value: object) -> int:
    match value:
        case None:
            return 0
        case bool():
            pass
        case int():
            return value
        case str() if value.strip().isdigit():
            return int(value)
        case _:
            pass
    msg = f"Page revision must be an integer, got {value!r}."
    raise TransportError(msg)


def _parse_timestamp(value: object) -> dt.datetime | None:
    """Return a timezone-aware UTC datetime parsed from ``value``, or None."""
    match value:
        case dt.datetime():
            parsed = value
        case str() as text:
            sanitized = text.strip()
            if not sanitized:
                return None
            if sanitized.endswith("Z"):
                sanitized = sanitized[:-1] + "+00:00"
            try:
                parsed = dt.datetime.fromisoformat(sanitized)
            except ValueError as exc:
                msg = f"Invalid timestamp {text!r} in page record."
                raise TransportError(msg) from exc
        case None:
            return None
        case _:
            msg = f"Invalid timestamp {value!r} in page record."
            raise TransportError(msg)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


def _format_timestamp(value: dt.datetime | None) -> str | None:
    return value.isoformat() if value else None


__all__ = [
    "PageRecord",
    "PageRepository",
    "PageStore",
    "adapt_page_record",
    "page_to_record",
]
