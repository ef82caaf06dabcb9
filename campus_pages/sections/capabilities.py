"""Renderer capabilities for the built-in section types.

Each capability turns a props bag into an HTML fragment in two steps: parse
the bag into a typed dataclass from :mod:`campus_pages.sections.props`, then
render the matching Jinja template from ``templates/sections``.
"""

from __future__ import annotations

import abc
import collections.abc as cabc
import typing as typ

from markupsafe import Markup

from .props import (
    build_collection_props,
    build_hero_props,
    build_rich_text_props,
    build_timeline_props,
)

if typ.TYPE_CHECKING:
    from jinja2 import Environment

    from campus_pages.rich_text import RichTextRenderer

    from .content import ContentSource
    from .props import RichTextProps


class TemplateSection(abc.ABC):
    """Render typed props through one section template."""

    template_name: typ.ClassVar[str]

    def __init__(self, env: Environment) -> None:
        self.template = env.get_template(f"sections/{self.template_name}")

    def render(self, props: cabc.Mapping[str, typ.Any]) -> Markup:
        html = self.template.render(section=self.parse(props))
        return Markup(html)

    @abc.abstractmethod
    def parse(self, props: cabc.Mapping[str, typ.Any]) -> object:
        """Return the typed props object the template expects."""


class HeroSection(TemplateSection):
    """Full-width banner with heading, subtitle, and optional CTA."""

    template_name = "hero.jinja"

    def parse(self, props: cabc.Mapping[str, typ.Any]) -> object:
        return build_hero_props(props)


class CollectionSection(TemplateSection):
    """Card listing for courses, faculty, or testimonials.

    Cards come from ``props["items"]`` when the editor embedded them, and from
    the read-only content source otherwise.
    """

    template_name = "collection.jinja"

    def __init__(
        self, env: Environment, kind: str, content: ContentSource | None = None
    ) -> None:
        super().__init__(env)
        self.kind = kind
        self.content = content

    def parse(self, props: cabc.Mapping[str, typ.Any]) -> object:
        fallback = self.content.records(self.kind) if self.content else []
        return build_collection_props(self.kind, props, fallback)


class TimelineSection(TemplateSection):
    """Ordered list of dated milestones."""

    template_name = "timeline.jinja"

    def parse(self, props: cabc.Mapping[str, typ.Any]) -> object:
        return build_timeline_props(props)


class RichTextSection(TemplateSection):
    """Free-form Markdown body."""

    template_name = "rich_text.jinja"

    def __init__(self, env: Environment, renderer: RichTextRenderer) -> None:
        super().__init__(env)
        self.renderer = renderer

    def render(self, props: cabc.Mapping[str, typ.Any]) -> Markup:
        parsed = typ.cast("RichTextProps", self.parse(props))
        body = self.renderer.render(parsed.content)
        return Markup(self.template.render(section=parsed, body=body))

    def parse(self, props: cabc.Mapping[str, typ.Any]) -> object:
        return build_rich_text_props(props)


__all__ = [
    "CollectionSection",
    "HeroSection",
    "RichTextSection",
    "TemplateSection",
    "TimelineSection",
]
