"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .models import STORE_KINDS, SiteConfig, SiteConfigError, StoreConfig


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing storage, sections, and content.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/pages.yaml``).

    Returns
    -------
    SiteConfig
        Parsed configuration with defaults applied.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If the store block is invalid or a section/content block has the
        wrong shape.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from campus_pages.config import load_site_config
    >>> config = load_site_config(Path("config/pages.yaml"))  # doctest: +SKIP
    >>> config.store.kind  # doctest: +SKIP
    'yaml'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):  # pragma: no cover - config error guard
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    defaults = raw.get("defaults", {}) or {}
    if not isinstance(defaults, dict):
        msg = "'defaults' must be a mapping."
        raise SiteConfigError(msg)

    site_name = defaults.get("site_name")
    return SiteConfig(
        store=_build_store_config(raw.get("store")),
        output_dir=Path(defaults.get("output_dir", "public")),
        site_name=str(site_name) if site_name else None,
        pygments_style=str(defaults.get("pygments_style", "friendly")),
        section_defaults=_build_section_defaults(raw.get("sections")),
        content=_build_content(raw.get("content")),
    )


def _build_store_config(payload: object) -> StoreConfig:
    """Build the store configuration, validating kind-specific fields."""
    match payload:
        case None:
            return StoreConfig(path=Path("content/pages"))
        case dict() as data:
            kind = str(data.get("kind", "yaml")).lower()
        case _:
            msg = "'store' must be a mapping."
            raise SiteConfigError(msg)
    if kind not in STORE_KINDS:
        known = ", ".join(STORE_KINDS)
        msg = f"Unknown store kind '{kind}'. Known kinds: {known}"
        raise SiteConfigError(msg)

    timeout = data.get("timeout", 10.0)
    if isinstance(timeout, bool) or not isinstance(timeout, int | float):
        msg = "Store 'timeout' must be a number of seconds."
        raise SiteConfigError(msg)

    store = StoreConfig(
        kind=kind,
        timeout=float(timeout),
        token_env=str(data.get("token_env", "PAGES_API_TOKEN")),
    )
    match kind:
        case "yaml":
            store.path = Path(data.get("path", "content/pages"))
        case "http":
            base_url = data.get("base_url")
            if not base_url:
                msg = "HTTP store configuration requires a 'base_url'."
                raise SiteConfigError(msg)
            store.base_url = str(base_url)
        case "memory":
            pages = data.get("pages", {}) or {}
            if not isinstance(pages, dict):
                msg = "Memory store 'pages' must be a mapping of id to page."
                raise SiteConfigError(msg)
            store.pages = {
                str(key): dict(value)
                for key, value in pages.items()
                if isinstance(value, dict)
            }
    return store


def _build_section_defaults(payload: object) -> dict[str, dict[str, typ.Any]]:
    """Return per-type default props overrides."""
    match payload:
        case None:
            return {}
        case dict() as data:
            pass
        case _:
            msg = "'sections' must map section types to default props."
            raise SiteConfigError(msg)
    result: dict[str, dict[str, typ.Any]] = {}
    for section_type, props in data.items():
        match props:
            case None:
                result[str(section_type)] = {}
            case dict():
                result[str(section_type)] = dict(props)
            case _:
                msg = (
                    f"Default props for section type '{section_type}' "
                    "must be a mapping."
                )
                raise SiteConfigError(msg)
    return result


def _build_content(payload: object) -> dict[str, list[dict[str, typ.Any]]]:
    """Return read-only content collections keyed by kind."""
    match payload:
        case None:
            return {}
        case dict() as data:
            pass
        case _:
            msg = "'content' must map collection names to lists of records."
            raise SiteConfigError(msg)
    result: dict[str, list[dict[str, typ.Any]]] = {}
    for kind, items in data.items():
        if not isinstance(items, list):
            msg = f"Content collection '{kind}' must be a list."
            raise SiteConfigError(msg)
        result[str(kind)] = [dict(item) for item in items if isinstance(item, dict)]
    return result


__all__ = ["load_site_config"]
