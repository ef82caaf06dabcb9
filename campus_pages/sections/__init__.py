"""Built-in section renderers and the default registry that wires them up.

The observed section namespace is ``hero``, ``courses``, ``faculty``,
``testimonials``, ``timeline``, and ``richText``. :func:`default_registry`
pairs each with its capability and default props; ``overrides`` (from
``pages.yaml``) are merged over those defaults per type.

Examples
--------
>>> registry = default_registry()
>>> registry.types()
['hero', 'courses', 'faculty', 'testimonials', 'timeline', 'richText']
>>> registry.default_props("hero")["title"]
'New hero'
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from campus_pages._constants import TEMPLATES_DIR
from campus_pages.composition.registry import RegistryEntry, SectionRegistry
from campus_pages.rich_text import RichTextRenderer

from .capabilities import (
    CollectionSection,
    HeroSection,
    RichTextSection,
    TimelineSection,
)
from .content import ContentSource, StaticContentSource

if typ.TYPE_CHECKING:
    from campus_pages.composition.registry import RendererCapability

BUILTIN_DEFAULTS: dict[str, dict[str, typ.Any]] = {
    "hero": {"title": "New hero", "subtitle": ""},
    "courses": {"title": "Courses", "limit": 6},
    "faculty": {"title": "Faculty", "limit": 8},
    "testimonials": {"title": "Testimonials", "limit": 3},
    "timeline": {"title": "Timeline", "events": []},
    "richText": {"content": ""},
}


def build_environment(templates_dir: Path | None = None) -> Environment:
    """Return the Jinja environment shared by the section templates."""
    return Environment(
        loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml", "jinja"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def default_registry(
    content: ContentSource | None = None,
    *,
    overrides: cabc.Mapping[str, cabc.Mapping[str, typ.Any]] | None = None,
    templates_dir: Path | None = None,
    pygments_style: str = "friendly",
) -> SectionRegistry:
    """Build the registry of built-in section types.

    Parameters
    ----------
    content : ContentSource, optional
        Read-only records consulted by the listing sections when their props
        embed no items.
    overrides : Mapping[str, Mapping], optional
        Extra default props per type, merged over the built-in defaults.
        Overrides for types without a built-in renderer are ignored.
    templates_dir : Path, optional
        Alternate template directory containing ``sections/*.jinja``.
    pygments_style : str, optional
        Pygments style used for code blocks inside rich text.
    """
    env = build_environment(templates_dir)
    capabilities: dict[str, RendererCapability] = {
        "hero": HeroSection(env),
        "courses": CollectionSection(env, "courses", content),
        "faculty": CollectionSection(env, "faculty", content),
        "testimonials": CollectionSection(env, "testimonials", content),
        "timeline": TimelineSection(env),
        "richText": RichTextSection(env, RichTextRenderer(pygments_style)),
    }
    entries: list[RegistryEntry] = []
    for section_type, capability in capabilities.items():
        defaults = copy.deepcopy(BUILTIN_DEFAULTS[section_type])
        defaults.update(copy.deepcopy(dict((overrides or {}).get(section_type) or {})))
        entries.append(RegistryEntry(section_type, capability, defaults))
    return SectionRegistry(entries)


__all__ = [
    "BUILTIN_DEFAULTS",
    "ContentSource",
    "StaticContentSource",
    "build_environment",
    "default_registry",
]
