"""Compose, render, and edit campus marketing pages from typed sections.

This package exposes the ``pages`` CLI used to render stored pages to static
HTML and to apply section edits; the composition engine itself lives in
:mod:`campus_pages.composition`.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that configures logging and runs the app.

Examples
--------
>>> from campus_pages import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
