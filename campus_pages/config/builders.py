"""Assemble engine collaborators from a loaded :class:`SiteConfig`."""

from __future__ import annotations

import os
import typing as typ

from campus_pages.composition import (
    HttpPageStore,
    InMemoryPageStore,
    PageRepository,
    SectionRegistry,
    YamlPageStore,
)
from campus_pages.sections import StaticContentSource, default_registry

from .models import SiteConfigError

if typ.TYPE_CHECKING:
    from campus_pages.composition import PageStore

    from .models import SiteConfig


def build_store(config: SiteConfig) -> PageStore:
    """Return the storage collaborator described by ``config.store``."""
    store = config.store
    match store.kind:
        case "yaml" if store.path is not None:
            return YamlPageStore(store.path)
        case "http" if store.base_url:
            return HttpPageStore(
                store.base_url,
                token=os.getenv(store.token_env),
                timeout=store.timeout,
            )
        case "memory":
            return InMemoryPageStore(store.pages)
        case _:
            msg = f"Store '{store.kind}' is missing required settings."
            raise SiteConfigError(msg)


def build_repository(config: SiteConfig) -> PageRepository:
    """Return a repository backed by the configured store."""
    return PageRepository(build_store(config))


def build_registry(config: SiteConfig) -> SectionRegistry:
    """Return the built-in registry with configured default props and content."""
    return default_registry(
        StaticContentSource(config.content),
        overrides=config.section_defaults,
        pygments_style=config.pygments_style,
    )


__all__ = ["build_registry", "build_repository", "build_store"]
