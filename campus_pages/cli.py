"""Cyclopts CLI entrypoint for rendering and editing composed campus pages.

The ``pages`` console script defined here renders stored pages to static HTML
and applies single section edits through an editing session, committing each
edit back to the configured page store. Typical usage is ``pages render home``
in CI to publish the homepage, and ``pages add-section home hero --at 0`` while
drafting content.

Examples
--------
Render two pages with the default configuration:

>>> from campus_pages.cli import app
>>> app(["render", "home", "admissions"])  # doctest: +SKIP

Move a section to the top of a page:

>>> app(["move-section", "home", "s3", "0"])  # doctest: +SKIP
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import os
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ._constants import DEFAULT_CONFIG
from .composition import (
    EditingSession,
    PageError,
    SectionDispatcher,
    SessionState,
    ValidationError,
)
from .config import build_registry, build_repository, load_site_config
from .page_builder import PageBuilder
from .rich_text import RichTextRenderer

app = App(name="pages", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _fail(exc: BaseException | None) -> typ.NoReturn:
    """Report ``exc`` on stderr and exit with status 1."""
    print(f"error: {exc}", file=sys.stderr)
    raise SystemExit(1)


@app.command(help="Render stored pages to static HTML files.")
def render(
    *page_ids: str,
    config: ConfigOption = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="INPUT_OUTPUT_DIR"),
    ] = None,
) -> None:
    """Render each page in ``page_ids`` to ``<output_dir>/<slug or id>.html``.

    Parameters
    ----------
    page_ids : str
        Identifiers of the pages to render.
    config : Path, optional
        Path to the ``pages.yaml`` configuration file.
    output_dir : Path or None, optional
        Destination folder; defaults to ``defaults.output_dir`` from config.

    Raises
    ------
    SystemExit
        With status 1 when a page cannot be loaded.
    """
    if not page_ids:
        msg = "At least one page id is required."
        raise ValueError(msg)
    site = load_site_config(config)
    repository = build_repository(site)
    dispatcher = SectionDispatcher(build_registry(site))
    stylesheet = RichTextRenderer(site.pygments_style).stylesheet
    out_dir = output_dir or site.output_dir
    for page_id in page_ids:
        try:
            page = repository.get_by_id(page_id)
        except PageError as exc:
            _fail(exc)
        builder = PageBuilder(
            page,
            dispatcher,
            output=out_dir / f"{page.slug or page.id}.html",
            site_name=site.site_name,
            stylesheet=stylesheet,
        )
        print(f"wrote {_format_path(builder.run())}")


@app.command(help="Print a page's sections in render order.")
def show(page_id: str, *, config: ConfigOption = DEFAULT_CONFIG) -> None:
    """Print the title, revision, and one ``key  type`` line per section."""
    site = load_site_config(config)
    registry = build_registry(site)
    try:
        page = build_repository(site).get_by_id(page_id)
    except PageError as exc:
        _fail(exc)
    print(f"{page.title} [{page.id}] revision {page.revision} ({page.status.value})")
    for index, section in enumerate(page.sections):
        marker = "" if section.type in registry else "  (unsupported)"
        print(f"{index:>3}  {section.key}  {section.type}{marker}")


@app.command(help="Insert a new section built from the type's default props.")
def add_section(
    page_id: str,
    section_type: str,
    *,
    at: typ.Annotated[
        int | None, Parameter(help="Insert position (defaults to the end)")
    ] = None,
    config: ConfigOption = DEFAULT_CONFIG,
) -> None:
    """Add a ``section_type`` section to ``page_id`` and commit."""
    _run_edit(
        config,
        page_id,
        lambda session: f"added {session.add_section(section_type, at)}",
    )


@app.command(help="Remove a section by key.")
def remove_section(
    page_id: str, key: str, *, config: ConfigOption = DEFAULT_CONFIG
) -> None:
    """Remove the section keyed ``key`` from ``page_id`` and commit."""

    def _mutate(session: EditingSession) -> str:
        session.remove_section(key)
        return f"removed {key}"

    _run_edit(config, page_id, _mutate)


@app.command(help="Move a section to a new position (clamped to the page).")
def move_section(
    page_id: str, key: str, to_index: int, *, config: ConfigOption = DEFAULT_CONFIG
) -> None:
    """Move the section keyed ``key`` to ``to_index`` and commit."""
    _run_edit(
        config,
        page_id,
        lambda session: f"moved {key} to {session.move_section(key, to_index)}",
    )


@app.command(help="Replace a section's props with a YAML or JSON mapping.")
def set_props(
    page_id: str, key: str, props: str, *, config: ConfigOption = DEFAULT_CONFIG
) -> None:
    """Replace the props of the section keyed ``key`` and commit.

    ``props`` is a YAML flow mapping such as ``'{title: Welcome}'``; JSON
    objects are accepted too.
    """

    def _mutate(session: EditingSession) -> str:
        session.update_section_props(key, _parse_props(props))
        return f"updated {key}"

    _run_edit(config, page_id, _mutate)


def _parse_props(text: str) -> cabc.Mapping[str, typ.Any]:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        parsed = loader.load(text)
    except YAMLError as exc:
        msg = f"Props are not valid YAML: {exc}"
        raise ValidationError(msg) from exc
    if not isinstance(parsed, dict):
        msg = "Props must be a mapping."
        raise ValidationError(msg)
    return parsed


def _run_edit(
    config: Path, page_id: str, mutate: cabc.Callable[[EditingSession], str]
) -> None:
    """Open ``page_id``, apply ``mutate``, commit, and report the new revision."""
    site = load_site_config(config)
    session = EditingSession(build_repository(site), build_registry(site))
    try:
        if session.open(page_id) is SessionState.LOAD_FAILED:
            _fail(session.error)
        detail = mutate(session)
        saved = session.commit()
    except PageError as exc:
        _fail(exc)
    finally:
        session.discard()
    print(f"{page_id}: {detail} (revision {saved.revision})")


def main() -> None:
    """Configure logging and invoke the Cyclopts application.

    The log level is read from ``PAGES_LOG_LEVEL`` (default ``WARNING``).

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    logging.basicConfig(
        level=os.getenv("PAGES_LOG_LEVEL", "WARNING").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
