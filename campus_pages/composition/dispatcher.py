"""Render ordered sections into ordered HTML fragments via the registry.

The dispatcher is a pure projection: it reads sections, resolves each type
once through :class:`~.registry.SectionRegistry`, and emits exactly one
:class:`~.models.RenderedNode` per section in input order. Types without a
registered renderer degrade to a labelled placeholder node instead of
aborting the page.

Example
-------
>>> from campus_pages.composition.models import Section
>>> from campus_pages.composition.registry import SectionRegistry
>>> dispatcher = SectionDispatcher(SectionRegistry())
>>> [node.placeholder for node in dispatcher.render([Section("s1", "mystery")])]
[True]
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import logging
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from campus_pages._constants import (
    FALLBACK_KEY_TEMPLATE,
    PLACEHOLDER_LABEL_TEMPLATE,
    PLACEHOLDER_TEMPLATE,
    TEMPLATES_DIR,
)

from .models import RenderedNode, Section
from .repository import unique_key

if typ.TYPE_CHECKING:
    from jinja2 import Template

    from .registry import SectionRegistry

logger = logging.getLogger(__name__)


class SectionDispatcher:
    """Resolve and render sections in order, with a placeholder fallback."""

    def __init__(
        self, registry: SectionRegistry, *, templates_dir: Path | None = None
    ) -> None:
        """Initialize the dispatcher.

        Parameters
        ----------
        registry : SectionRegistry
            Lookup table consulted once per section.
        templates_dir : Path, optional
            Directory holding ``placeholder.jinja``; defaults to the package
            templates.
        """
        self.registry = registry
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._placeholder: Template = self.env.get_template(PLACEHOLDER_TEMPLATE)

    def render(self, sections: cabc.Sequence[Section]) -> list[RenderedNode]:
        """Return one rendered node per section, preserving input order.

        An empty sequence renders to an empty list. Exceptions raised by a
        registered capability propagate to the caller. Identities are unique
        within one render: positional fallbacks never reuse a section key.
        """
        nodes: list[RenderedNode] = []
        used = {section.key for section in sections if section.key}
        seen: set[str] = set()
        for index, section in enumerate(sections):
            if section.key and section.key not in seen:
                identity = section.key
                seen.add(identity)
            else:
                base = section.key or FALLBACK_KEY_TEMPLATE.format(index=index)
                identity = unique_key(base, used | seen)
                seen.add(identity)
            entry = self.registry.resolve(section.type)
            if entry is None:
                logger.warning(
                    "no renderer registered for section %s of type %r",
                    identity,
                    section.type,
                )
                nodes.append(
                    RenderedNode(
                        identity=identity,
                        type=section.type,
                        html=self._render_placeholder(section.type, identity),
                        placeholder=True,
                    )
                )
                continue
            props = _merge_props(entry.default_props, section.props)
            nodes.append(
                RenderedNode(
                    identity=identity,
                    type=section.type,
                    html=entry.capability.render(props),
                )
            )
        return nodes

    def _render_placeholder(self, section_type: str, identity: str) -> Markup:
        html = self._placeholder.render(
            label=PLACEHOLDER_LABEL_TEMPLATE.format(type=section_type),
            section_type=section_type,
            identity=identity,
        )
        return Markup(html)


def _merge_props(
    defaults: cabc.Mapping[str, typ.Any], props: cabc.Mapping[str, typ.Any]
) -> dict[str, typ.Any]:
    """Deep-merge ``props`` over ``defaults`` without mutating either."""
    merged = copy.deepcopy(dict(defaults))
    for key, value in props.items():
        current = merged.get(key)
        if isinstance(current, cabc.Mapping) and isinstance(value, cabc.Mapping):
            merged[key] = _merge_props(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


__all__ = ["SectionDispatcher"]
