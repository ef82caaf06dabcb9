"""Static mapping from section type identifiers to renderer capabilities.

A :class:`SectionRegistry` is assembled once while configuration is loaded and
is read-only afterwards. Lookups are exact, case-sensitive dictionary hits;
an unknown type resolves to ``None`` so callers must handle the "not found"
branch explicitly.

Examples
--------
>>> from markupsafe import Markup
>>> class Echo:
...     def render(self, props):
...         return Markup("<p>{}</p>").format(props.get("text", ""))
>>> registry = SectionRegistry([RegistryEntry("echo", Echo(), {"text": "hi"})])
>>> registry.resolve("echo").capability.render({"text": "yo"})
Markup('<p>yo</p>')
>>> registry.resolve("Echo") is None
True
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import dataclasses as dc
import types
import typing as typ

if typ.TYPE_CHECKING:
    from markupsafe import Markup


class RendererCapability(typ.Protocol):
    """Presentational component able to render one section type."""

    def render(self, props: cabc.Mapping[str, typ.Any]) -> Markup:
        """Return the HTML fragment for ``props``."""
        ...


@dc.dataclass(frozen=True, slots=True)
class RegistryEntry:
    """Pair a section type with its renderer and default props template."""

    type: str
    capability: RendererCapability
    default_props: cabc.Mapping[str, typ.Any] = dc.field(default_factory=dict)

    def props_template(self) -> dict[str, typ.Any]:
        """Return a fresh deep copy of the default props."""
        return copy.deepcopy(dict(self.default_props))


class SectionRegistry:
    """Immutable lookup table of :class:`RegistryEntry` values keyed by type."""

    def __init__(self, entries: cabc.Iterable[RegistryEntry] = ()) -> None:
        """Build the table, rejecting duplicate or empty type identifiers.

        Raises
        ------
        ValueError
            If two entries share a ``type`` or a ``type`` is empty.
        """
        table: dict[str, RegistryEntry] = {}
        for entry in entries:
            if not entry.type:
                msg = "Registry entries require a non-empty type."
                raise ValueError(msg)
            if entry.type in table:
                msg = f"Section type '{entry.type}' is registered more than once."
                raise ValueError(msg)
            table[entry.type] = entry
        self._entries: cabc.Mapping[str, RegistryEntry] = types.MappingProxyType(
            table
        )

    def resolve(self, section_type: str) -> RegistryEntry | None:
        """Return the entry registered for ``section_type`` or None."""
        return self._entries.get(section_type)

    def default_props(self, section_type: str) -> dict[str, typ.Any]:
        """Return a copy of the default props for ``section_type``.

        Unknown types yield an empty mapping.
        """
        entry = self._entries.get(section_type)
        return entry.props_template() if entry else {}

    def types(self) -> list[str]:
        """Return the registered type identifiers in registration order."""
        return list(self._entries)

    def with_entries(self, *entries: RegistryEntry) -> SectionRegistry:
        """Return a new registry extended with ``entries``.

        The receiver is left untouched; duplicates still raise ``ValueError``.
        """
        return SectionRegistry([*self._entries.values(), *entries])

    def __contains__(self, section_type: object) -> bool:
        return section_type in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["RegistryEntry", "RendererCapability", "SectionRegistry"]
