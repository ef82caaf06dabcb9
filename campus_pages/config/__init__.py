"""Load and validate site configuration YAML for campus page builds.

This subpackage parses the project's ``pages.yaml`` file into a typed
:class:`SiteConfig` (storage back end, per-type default section props, and
read-only content collections) and assembles the engine collaborators from it.
The primary entry point is :func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from campus_pages.config import build_repository, load_site_config
>>> site = load_site_config(Path("config/pages.yaml"))  # doctest: +SKIP
>>> page = build_repository(site).get_by_id("home")  # doctest: +SKIP
>>> page.title  # doctest: +SKIP
'Home'
"""

from .builders import build_registry, build_repository, build_store
from .loader import load_site_config
from .models import STORE_KINDS, SiteConfig, SiteConfigError, StoreConfig

__all__ = [
    "STORE_KINDS",
    "SiteConfig",
    "SiteConfigError",
    "StoreConfig",
    "build_registry",
    "build_repository",
    "build_store",
    "load_site_config",
]
