"""Tests for ``pages.yaml`` loading and collaborator assembly."""

from __future__ import annotations

import typing as typ
from pathlib import Path
from textwrap import dedent

import pytest

from campus_pages.composition import HttpPageStore, InMemoryPageStore, YamlPageStore
from campus_pages.config import (
    SiteConfigError,
    build_registry,
    build_repository,
    build_store,
    load_site_config,
)

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "pages.yaml"
    path.write_text(dedent(text).strip() + "\n", encoding="utf-8")
    return path


def test_defaults_apply_when_blocks_are_missing(tmp_path: Path) -> None:
    site = load_site_config(_write(tmp_path, "defaults: {}"))

    assert site.store.kind == "yaml"
    assert site.store.path == Path("content/pages")
    assert site.output_dir == Path("public")
    assert site.site_name is None
    assert site.section_defaults == {}
    assert site.content == {}
    assert isinstance(build_store(site), YamlPageStore)


def test_full_config_is_parsed(tmp_path: Path) -> None:
    site = load_site_config(
        _write(
            tmp_path,
            """
            defaults:
              output_dir: build/site
              site_name: Riverside University
              pygments_style: monokai
            store:
              kind: HTTP
              base_url: https://cms.example.edu/api
              timeout: 3
              token_env: CMS_TOKEN
            sections:
              hero:
                subtitle: Hello
              timeline:
            content:
              courses:
                - title: Law
                - not-a-record
            """,
        )
    )

    assert site.output_dir == Path("build/site")
    assert site.site_name == "Riverside University"
    assert site.pygments_style == "monokai"
    assert site.store.kind == "http"
    assert site.store.timeout == 3.0
    assert site.store.token_env == "CMS_TOKEN"
    assert site.section_defaults == {"hero": {"subtitle": "Hello"}, "timeline": {}}
    assert site.content == {"courses": [{"title": "Law"}]}


def test_http_store_reads_token_from_environment(
    tmp_path: Path, mocker: MockerFixture
) -> None:
    mocker.patch.dict("os.environ", {"CMS_TOKEN": "abc"})
    site = load_site_config(
        _write(
            tmp_path,
            """
            store:
              kind: http
              base_url: https://cms.example.edu
              token_env: CMS_TOKEN
            """,
        )
    )
    store = build_store(site)

    assert isinstance(store, HttpPageStore)
    assert store._headers["Authorization"] == "Bearer abc"  # noqa: SLF001


def test_memory_store_serves_configured_pages(tmp_path: Path) -> None:
    site = load_site_config(
        _write(
            tmp_path,
            """
            store:
              kind: memory
              pages:
                home:
                  title: Home
                  sections:
                    - {key: s1, type: hero, props: {title: Welcome}}
            """,
        )
    )

    assert isinstance(build_store(site), InMemoryPageStore)
    page = build_repository(site).get_by_id("home")
    assert page.title == "Home"
    assert page.keys() == ["s1"]


def test_registry_uses_section_defaults(tmp_path: Path) -> None:
    site = load_site_config(
        _write(
            tmp_path,
            """
            sections:
              courses:
                limit: 2
            """,
        )
    )
    registry = build_registry(site)

    assert registry.default_props("courses") == {"title": "Courses", "limit": 2}


@pytest.mark.parametrize(
    ("text", "fragment"),
    [
        ("store: [yaml]", "'store' must be a mapping"),
        ("store: {kind: ftp}", "Unknown store kind 'ftp'"),
        ("store: {kind: http}", "requires a 'base_url'"),
        ("store: {kind: http, base_url: x, timeout: soon}", "number of seconds"),
        ("store: {kind: memory, pages: [home]}", "must be a mapping of id"),
        ("sections: [hero]", "'sections' must map"),
        ("sections: {hero: [1]}", "section type 'hero'"),
        ("content: {courses: {title: Law}}", "must be a list"),
        ("defaults: [public]", "'defaults' must be a mapping"),
    ],
)
def test_invalid_config_is_rejected(tmp_path: Path, text: str, fragment: str) -> None:
    with pytest.raises(SiteConfigError, match=fragment):
        load_site_config(_write(tmp_path, text))


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="not found"):
        load_site_config(tmp_path / "absent.yaml")


def test_sample_config_loads() -> None:
    """The example configuration shipped with the project stays valid."""
    root = Path(__file__).resolve().parents[1]
    site = load_site_config(root / "config" / "pages.yaml")

    assert site.store.kind == "yaml"
    assert site.site_name == "Riverside University"
    assert "courses" in site.content
