"""Shared fixtures for the campus_pages test suite."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

import pytest
from markupsafe import Markup

from campus_pages.composition import (
    InMemoryPageStore,
    PageRepository,
    RegistryEntry,
    SectionDispatcher,
    SectionRegistry,
    TransportError,
)
from campus_pages.sections import StaticContentSource, default_registry

if typ.TYPE_CHECKING:
    from campus_pages.composition.repository import PageRecord


class RecordingCapability:
    """Capability stub that records the props it was asked to render."""

    def __init__(self, label: str) -> None:
        self.label = label
        self.calls: list[dict[str, typ.Any]] = []

    def render(self, props: cabc.Mapping[str, typ.Any]) -> Markup:
        self.calls.append(dict(props))
        return Markup("<div data-stub='{}'>{}</div>").format(
            self.label, props.get("title", "")
        )


class FlakyStore(InMemoryPageStore):
    """In-memory store whose next persist or fetch can be made to fail."""

    def __init__(self, records: cabc.Mapping[str, PageRecord] | None = None) -> None:
        super().__init__(records)
        self.fail_persist = False
        self.fail_fetch = False
        self.persist_calls = 0

    def fetch_page_record(self, page_id: str) -> PageRecord | None:
        if self.fail_fetch:
            msg = "content service unreachable"
            raise TransportError(msg)
        return super().fetch_page_record(page_id)

    def persist_page_record(self, record: PageRecord) -> PageRecord:
        self.persist_calls += 1
        if self.fail_persist:
            msg = "content service unreachable"
            raise TransportError(msg)
        return super().persist_page_record(record)


@pytest.fixture
def home_record() -> dict[str, typ.Any]:
    """Return a stored homepage record with three keyed sections."""
    return {
        "id": "home",
        "title": "Home",
        "slug": "index",
        "status": "PUBLISHED",
        "revision": 4,
        "sections": [
            {"key": "s1", "type": "hero", "props": {"title": "Welcome"}},
            {"key": "s2", "type": "richText", "props": {"content": "Hello *there*"}},
            {"key": "s3", "type": "courses", "props": {"title": "Programmes"}},
        ],
    }


@pytest.fixture
def store(home_record: dict[str, typ.Any]) -> FlakyStore:
    """Return a store seeded with the homepage record."""
    return FlakyStore({"home": home_record})


@pytest.fixture
def repository(store: FlakyStore) -> PageRepository:
    return PageRepository(store)


@pytest.fixture
def content() -> StaticContentSource:
    return StaticContentSource(
        {
            "courses": [
                {"title": "Computer Science", "code": "BSc", "summary": "Systems."},
                {"title": "Nursing", "code": "BSN"},
                {"name": "Law"},
            ],
            "faculty": [{"name": "Dr. Amina Yusuf", "role": "Dean"}],
        }
    )


@pytest.fixture
def registry(content: StaticContentSource) -> SectionRegistry:
    return default_registry(content)


@pytest.fixture
def dispatcher(registry: SectionRegistry) -> SectionDispatcher:
    return SectionDispatcher(registry)


@pytest.fixture
def stub_capability() -> RecordingCapability:
    return RecordingCapability("stub")


@pytest.fixture
def stub_registry(stub_capability: RecordingCapability) -> SectionRegistry:
    """Return a registry with a single ``stub`` type and default props."""
    return SectionRegistry(
        [
            RegistryEntry(
                "stub",
                stub_capability,
                {"title": "Default", "style": {"tone": "light", "width": "wide"}},
            )
        ]
    )
