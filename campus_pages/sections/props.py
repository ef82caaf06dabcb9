"""Typed views over the untyped props bags of the built-in section types.

Stored props are loosely typed JSON and drift over time as editors and
renderers evolve. The builders here are deliberately lenient: unknown keys are
ignored, missing optional values fall back to ``None`` or empty lists, and
malformed list entries are skipped. A renderer therefore always receives a
fully populated dataclass.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

ItemFields = dict[str, tuple[str, ...]]

COLLECTION_FIELDS: dict[str, ItemFields] = {
    "courses": {
        "title": ("title", "name"),
        "subtitle": ("code", "level", "duration"),
        "body": ("summary", "description"),
        "href": ("href", "url"),
        "image": ("image", "thumbnail"),
    },
    "faculty": {
        "title": ("name", "title"),
        "subtitle": ("role", "position", "department"),
        "body": ("bio", "specialization"),
        "href": ("href", "url"),
        "image": ("photo", "image"),
    },
    "testimonials": {
        "title": ("author", "name"),
        "subtitle": ("role", "program"),
        "body": ("quote", "content", "text"),
        "href": ("href", "url"),
        "image": ("photo", "image"),
    },
}


@dc.dataclass(slots=True)
class HeroProps:
    """Banner heading, supporting copy, and optional call to action."""

    title: str | None = None
    subtitle: str | None = None
    background_image: str | None = None
    cta_label: str | None = None
    cta_href: str | None = None


@dc.dataclass(slots=True)
class CollectionItem:
    """One card in a course, faculty, or testimonial listing."""

    title: str
    subtitle: str | None = None
    body: str | None = None
    href: str | None = None
    image: str | None = None


@dc.dataclass(slots=True)
class CollectionProps:
    """Listing heading and the cards to show."""

    kind: str
    title: str | None
    items: list[CollectionItem]
    empty_text: str | None = None


@dc.dataclass(slots=True)
class TimelineEvent:
    """A dated milestone on a timeline."""

    label: str
    title: str
    description: str | None = None


@dc.dataclass(slots=True)
class TimelineProps:
    """Heading and ordered milestones for a timeline section."""

    title: str | None
    events: list[TimelineEvent]


@dc.dataclass(slots=True)
class RichTextProps:
    """Optional heading and free-form body content."""

    title: str | None
    content: object


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None or isinstance(value, cabc.Mapping | list):
        return None
    text = str(value).strip()
    return text or None


def _pick(entry: cabc.Mapping[str, typ.Any], names: tuple[str, ...]) -> str | None:
    """Return the first non-empty string among ``names`` in ``entry``."""
    for name in names:
        value = _optional_str(entry.get(name))
        if value:
            return value
    return None


def _limit(value: object) -> int | None:
    match value:
        case bool():
            return None
        case int() if value > 0:
            return value
        case str() if value.strip().isdigit() and int(value) > 0:
            return int(value)
        case _:
            return None


def build_hero_props(props: cabc.Mapping[str, typ.Any]) -> HeroProps:
    """Build hero props, accepting the legacy ``heading``/``cta_text`` names."""
    match props.get("cta"):
        case {"label": label, "href": href}:
            cta_label, cta_href = _optional_str(label), _optional_str(href)
        case _:
            cta_label = _pick(props, ("cta_label", "cta_text"))
            cta_href = _pick(props, ("cta_href", "cta_link"))
    return HeroProps(
        title=_pick(props, ("title", "heading")),
        subtitle=_pick(props, ("subtitle", "subheading")),
        background_image=_pick(props, ("background_image", "backgroundImage")),
        cta_label=cta_label,
        cta_href=cta_href,
    )


def build_collection_props(
    kind: str,
    props: cabc.Mapping[str, typ.Any],
    fallback_items: cabc.Sequence[cabc.Mapping[str, typ.Any]] = (),
) -> CollectionProps:
    """Build listing props for ``kind``.

    Items embedded in ``props["items"]`` take precedence; otherwise
    ``fallback_items`` (records from the read-only content source) are used.
    ``props["limit"]`` truncates the result.
    """
    fields = COLLECTION_FIELDS[kind]
    match props.get("items"):
        case list() as embedded if embedded:
            raw_items: cabc.Sequence[object] = embedded
        case _:
            raw_items = fallback_items
    items: list[CollectionItem] = []
    for entry in raw_items:
        if not isinstance(entry, cabc.Mapping):
            continue
        title = _pick(entry, fields["title"])
        if not title:
            continue
        items.append(
            CollectionItem(
                title=title,
                subtitle=_pick(entry, fields["subtitle"]),
                body=_pick(entry, fields["body"]),
                href=_pick(entry, fields["href"]),
                image=_pick(entry, fields["image"]),
            )
        )
    limit = _limit(props.get("limit"))
    if limit is not None:
        items = items[:limit]
    return CollectionProps(
        kind=kind,
        title=_optional_str(props.get("title")),
        items=items,
        empty_text=_optional_str(props.get("empty_text")),
    )


def build_timeline_props(props: cabc.Mapping[str, typ.Any]) -> TimelineProps:
    """Build timeline props from ``events`` (or legacy ``items``) entries."""
    raw_events = props.get("events", props.get("items"))
    events: list[TimelineEvent] = []
    if isinstance(raw_events, list):
        for entry in raw_events:
            match entry:
                case {"title": title, **rest}:
                    label = _pick(rest, ("label", "date", "year"))
                    text = _optional_str(title)
                    if not (label and text):
                        continue
                    events.append(
                        TimelineEvent(
                            label=label,
                            title=text,
                            description=_pick(rest, ("description", "content")),
                        )
                    )
                case _:
                    continue
    return TimelineProps(title=_optional_str(props.get("title")), events=events)


def build_rich_text_props(props: cabc.Mapping[str, typ.Any]) -> RichTextProps:
    """Build rich text props; ``content`` is kept as stored."""
    content = props.get("content", props.get("body"))
    return RichTextProps(
        title=_pick(props, ("title", "heading")),
        content=content,
    )


__all__ = [
    "COLLECTION_FIELDS",
    "CollectionItem",
    "CollectionProps",
    "HeroProps",
    "RichTextProps",
    "TimelineEvent",
    "TimelineProps",
    "build_collection_props",
    "build_hero_props",
    "build_rich_text_props",
    "build_timeline_props",
]
