"""Render rich-text section bodies (Markdown) into HTML.

Rich-text content is authored in the CMS as Markdown. Editors often indent
fences when pasting snippets into list items, so fence lines are pulled back
to the margin before conversion. Highlighted blocks carry a ``data-language``
attribute so page styles can label them. Content that is not a string (for
example, structured blocks left over from an older editor) is shown as
pretty-printed JSON instead of being dropped.
"""

from __future__ import annotations

import json
import re

from markdown import Markdown
from markupsafe import Markup
from pygments.formatters.html import HtmlFormatter

FENCE_LINE_PATTERN = re.compile(
    r"^(?P<indent>[ ]{0,3})(?P<fence>`{3,}|~{3,})(?P<info>[^\n]*)$", re.MULTILINE
)
_LANGUAGE_PATTERN = re.compile(r"[A-Za-z0-9_+#.-]+")
_HIGHLIGHT_OPEN_TAG = '<div class="codehilite">'


class RichTextRenderer:
    """Render Markdown and structured rich-text payloads with consistent styling."""

    def __init__(self, pygments_style: str = "friendly") -> None:
        """Initialize a renderer using ``pygments_style`` for code blocks."""
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")
        self._md = Markdown(
            extensions=["fenced_code", "codehilite", "tables", "sane_lists"],
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": pygments_style,
                }
            },
        )

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def render(self, content: object) -> Markup:
        """Render ``content`` to HTML.

        Strings are treated as Markdown; ``None`` and blank strings render to
        an empty string; anything else is serialized as indented JSON inside
        ``<pre>``.
        """
        match content:
            case None:
                return Markup("")
            case str() if not content.strip():
                return Markup("")
            case str():
                source, languages = _align_fences(content)
                html = self._md.reset().convert(source)
                return Markup(_label_code_blocks(html, languages))
            case _:
                dumped = json.dumps(content, indent=2, ensure_ascii=False, default=str)
                return Markup('<pre class="rich-text-json">{}</pre>').format(dumped)


def _align_fences(text: str) -> tuple[str, list[str]]:
    """Move fence lines to column zero and list each block's language in order.

    A fence closes only on a bare fence of the same character that is at
    least as long as the opener; fence-like lines inside a block are left
    alone.
    """
    languages: list[str] = []
    opener: str | None = None

    def visit(match: re.Match[str]) -> str:
        nonlocal opener
        fence = match.group("fence")
        info = match.group("info").strip()
        if opener is None:
            opener = fence
            language = _LANGUAGE_PATTERN.match(info)
            languages.append(language.group(0) if language else "text")
        elif fence[0] == opener[0] and len(fence) >= len(opener) and not info:
            opener = None
        else:
            return match.group(0)
        return match.group(0)[len(match.group("indent")) :]

    return FENCE_LINE_PATTERN.sub(visit, text), languages


def _label_code_blocks(html: str, languages: list[str]) -> str:
    """Add ``data-language`` to highlighted blocks, pairing them in order."""
    if not languages:
        return html
    pieces = html.split(_HIGHLIGHT_OPEN_TAG)
    labelled = [pieces[0]]
    for index, piece in enumerate(pieces[1:]):
        language = languages[index] if index < len(languages) else "text"
        tag = Markup('<div class="codehilite" data-language="{}">').format(language)
        labelled.append(f"{tag}{piece}")
    return "".join(labelled)


__all__ = ["FENCE_LINE_PATTERN", "RichTextRenderer"]
