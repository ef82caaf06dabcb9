"""Dynamic page-composition engine: registry, repository, dispatcher, session."""

from .dispatcher import SectionDispatcher
from .errors import (
    NotFoundError,
    PageError,
    SessionStateError,
    TransportError,
    ValidationError,
)
from .models import Page, PageStatus, RenderedNode, Section
from .registry import RegistryEntry, RendererCapability, SectionRegistry
from .repository import PageRepository, PageStore, adapt_page_record, page_to_record
from .session import EditingSession, SessionState
from .stores import HttpPageStore, InMemoryPageStore, YamlPageStore

__all__ = [
    "EditingSession",
    "HttpPageStore",
    "InMemoryPageStore",
    "NotFoundError",
    "Page",
    "PageError",
    "PageRepository",
    "PageStatus",
    "PageStore",
    "RegistryEntry",
    "RenderedNode",
    "RendererCapability",
    "Section",
    "SectionDispatcher",
    "SectionRegistry",
    "SessionState",
    "SessionStateError",
    "TransportError",
    "ValidationError",
    "YamlPageStore",
    "adapt_page_record",
    "page_to_record",
]
