"""Published-page rendering pipeline.

This module turns a stored :class:`~campus_pages.composition.Page` into a
static HTML file. Sections are rendered in order by the
:class:`~campus_pages.composition.SectionDispatcher`, then wrapped in the
``page.jinja`` chrome and written to disk.

Typical usage mirrors the ``pages render`` command:

>>> from pathlib import Path
>>> from campus_pages.composition import PageRepository, SectionDispatcher
>>> from campus_pages.sections import default_registry
>>> page = PageRepository(store).get_by_id("home")  # doctest: +SKIP
>>> builder = PageBuilder(
...     page, SectionDispatcher(default_registry()), output=Path("public/home.html")
... )  # doctest: +SKIP
>>> builder.run()  # doctest: +SKIP
PosixPath('public/home.html')

Rendering performs no network calls; the only side effect of :meth:`run` is
writing the output file.
"""

from __future__ import annotations

import datetime as dt
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ._constants import PAGE_TEMPLATE, TEMPLATES_DIR

if typ.TYPE_CHECKING:
    from .composition import Page, SectionDispatcher


class PageBuilder:
    """Render a composed page from its ordered sections."""

    def __init__(
        self,
        page: Page,
        dispatcher: SectionDispatcher,
        *,
        output: Path,
        templates_dir: Path | None = None,
        site_name: str | None = None,
        stylesheet: str | None = None,
    ) -> None:
        """Initialize the builder and Jinja environment.

        Parameters
        ----------
        page : Page
            Page to render; it is read, never modified.
        dispatcher : SectionDispatcher
            Renders the page's sections in order.
        output : Path
            Destination HTML file.
        templates_dir : Path, optional
            Directory containing ``page.jinja``. Defaults to the package
            templates.
        site_name : str, optional
            Appended to the document title.
        stylesheet : str, optional
            Inline CSS, e.g. the rich-text code highlighting rules.
        """
        self.page = page
        self.dispatcher = dispatcher
        self.output = output
        self.site_name = site_name
        self.stylesheet = stylesheet
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template(PAGE_TEMPLATE)

    def render_html(self) -> str:
        """Return the full HTML document for the page."""
        context = {
            "page": self.page,
            "nodes": self.dispatcher.render(self.page.sections),
            "site_name": self.site_name,
            "stylesheet": self.stylesheet,
            "generated_at": dt.datetime.now(dt.UTC),
        }
        html = self.template.render(**context)
        if not html.endswith("\n"):
            html += "\n"
        return html

    def run(self) -> Path:
        """Render and write the page HTML, returning the output path.

        Parent directories are created as needed; filesystem errors propagate.
        """
        html = self.render_html()
        self.output.parent.mkdir(parents=True, exist_ok=True)
        self.output.write_text(html, encoding="utf-8")
        return self.output


__all__ = ["PageBuilder"]
