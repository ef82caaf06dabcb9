"""Typed dataclasses describing campus_pages site configuration."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

STORE_KINDS = ("yaml", "http", "memory")


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class StoreConfig:
    """Where page documents live and how to reach them."""

    kind: str = "yaml"
    path: Path | None = None
    base_url: str | None = None
    timeout: float = 10.0
    token_env: str = "PAGES_API_TOKEN"
    pages: dict[str, dict[str, typ.Any]] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class SiteConfig:
    """Aggregated settings for rendering and editing pages."""

    store: StoreConfig
    output_dir: Path = Path("public")
    site_name: str | None = None
    pygments_style: str = "friendly"
    section_defaults: dict[str, dict[str, typ.Any]] = dc.field(default_factory=dict)
    content: dict[str, list[dict[str, typ.Any]]] = dc.field(default_factory=dict)


__all__ = ["STORE_KINDS", "SiteConfig", "SiteConfigError", "StoreConfig"]
