"""Common literal values used across campus_pages.

These constants keep labels, key prefixes, and template names centralized so
the engine, templates, and tests can import the same values without drifting.
Intended for internal use within the campus_pages package.

Examples
--------
>>> from campus_pages import _constants
>>> _constants.PLACEHOLDER_LABEL_TEMPLATE.format(type="unknown-widget")
'unsupported section type: unknown-widget'
>>> _constants.FALLBACK_KEY_TEMPLATE.format(index=3)
'section-3'
"""

from pathlib import Path

PLACEHOLDER_LABEL_TEMPLATE = "unsupported section type: {type}"
FALLBACK_KEY_TEMPLATE = "section-{index}"
MINTED_KEY_LENGTH = 12
PAGE_TEMPLATE = "page.jinja"
PLACEHOLDER_TEMPLATE = "placeholder.jinja"
DEFAULT_CONFIG = Path("config/pages.yaml")
TEMPLATES_DIR = Path(__file__).parent / "templates"
