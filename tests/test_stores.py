"""Tests for the in-memory, YAML, and HTTP page stores."""

from __future__ import annotations

import os
import stat
import typing as typ
from pathlib import Path

import pytest
import requests

from campus_pages.composition import (
    HttpPageStore,
    InMemoryPageStore,
    NotFoundError,
    PageRepository,
    TransportError,
    YamlPageStore,
)

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

HOME_YAML = """\
# Homepage layout, edited by the marketing team.
id: home
title: Home
version: 3
sections:
  - key: hero-main
    type: hero
    props:
      title: Welcome  # shown above the fold
  - type: richText
    props:
      content: Hello
"""


def test_in_memory_store_returns_copies() -> None:
    store = InMemoryPageStore({"p": {"id": "p", "sections": []}})
    fetched = store.fetch_page_record("p")
    assert fetched is not None
    fetched["sections"].append({"type": "hero"})

    again = store.fetch_page_record("p")
    assert again == {"id": "p", "sections": []}, "expected stored records isolated"
    assert store.fetch_page_record("missing") is None


def test_in_memory_store_keeps_created_at_across_writes() -> None:
    store = InMemoryPageStore()
    first = store.persist_page_record({"id": "p", "sections": []})
    second = store.persist_page_record({"id": "p", "sections": []})

    assert (first["revision"], second["revision"]) == (1, 2)
    assert second["created_at"] == first["created_at"]


def test_persisting_without_id_is_rejected() -> None:
    with pytest.raises(TransportError, match="without an 'id'"):
        InMemoryPageStore().persist_page_record({"title": "Orphan"})


@pytest.fixture
def yaml_store(tmp_path: Path) -> YamlPageStore:
    (tmp_path / "home.yaml").write_text(HOME_YAML, encoding="utf-8")
    return YamlPageStore(tmp_path)


def test_yaml_store_reads_legacy_fields(yaml_store: YamlPageStore) -> None:
    page = PageRepository(yaml_store).get_by_id("home")

    assert page.revision == 3
    assert page.keys() == ["hero-main", "section-1"]
    assert page.sections[0].props == {"title": "Welcome"}


def test_yaml_store_write_preserves_comments(yaml_store: YamlPageStore) -> None:
    repository = PageRepository(yaml_store)
    page = repository.get_by_id("home")
    page.title = "Welcome home"

    saved = repository.save(page)
    text = (yaml_store.directory / "home.yaml").read_text(encoding="utf-8")

    assert text.startswith("# Homepage layout"), "expected the header comment kept"
    assert "version:" not in text, "expected legacy revision field replaced"
    assert "revision: 4" in text
    assert saved.title == "Welcome home"
    assert saved.keys() == ["hero-main", "section-1"]
    assert repository.get_by_id("home").title == "Welcome home"
    leftovers = list(yaml_store.directory.glob(".home.*.tmp"))
    assert leftovers == [], f"expected no temporary files, got {leftovers!r}"


@pytest.mark.parametrize("mode", [0o644, 0o640])
def test_yaml_store_write_keeps_file_mode(
    yaml_store: YamlPageStore, mode: int
) -> None:
    """Rewriting a page leaves its permissions as the author set them."""
    path = yaml_store.directory / "home.yaml"
    path.chmod(mode)
    repository = PageRepository(yaml_store)

    repository.save(repository.get_by_id("home"))

    actual = stat.S_IMODE(path.stat().st_mode)
    assert actual == mode, f"expected mode {mode:o}, got {actual:o}"


def test_yaml_store_new_files_respect_umask(tmp_path: Path) -> None:
    previous = os.umask(0o027)
    try:
        YamlPageStore(tmp_path).persist_page_record({"id": "new", "sections": []})
    finally:
        os.umask(previous)

    actual = stat.S_IMODE((tmp_path / "new.yaml").stat().st_mode)
    assert actual == 0o640, f"expected umask-derived mode 640, got {actual:o}"


def test_yaml_store_creates_new_files(tmp_path: Path) -> None:
    store = YamlPageStore(tmp_path / "pages")
    stored = store.persist_page_record({"id": "new", "title": "New", "sections": []})

    assert stored["revision"] == 1
    assert (tmp_path / "pages" / "new.yaml").is_file()


def test_yaml_store_failed_replace_keeps_previous_file(
    yaml_store: YamlPageStore, mocker: MockerFixture
) -> None:
    """A failed write raises and leaves the previous document readable."""
    mocker.patch.object(Path, "replace", side_effect=OSError("disk full"))
    repository = PageRepository(yaml_store)
    page = repository.get_by_id("home")
    page.sections.clear()

    with pytest.raises(TransportError, match="disk full"):
        repository.save(page)

    text = (yaml_store.directory / "home.yaml").read_text(encoding="utf-8")
    assert text == HOME_YAML, "expected the stored document to be untouched"


def test_yaml_store_rejects_unsafe_ids(yaml_store: YamlPageStore) -> None:
    assert yaml_store.fetch_page_record("../etc/passwd") is None
    with pytest.raises(TransportError, match="cannot be mapped"):
        yaml_store.persist_page_record({"id": "../escape"})


@pytest.mark.parametrize(
    ("content", "fragment"),
    [("id: [unclosed\n", "Failed to read"), ("- just\n- a list\n", "mapping")],
)
def test_yaml_store_bad_documents(
    tmp_path: Path, content: str, fragment: str
) -> None:
    (tmp_path / "broken.yaml").write_text(content, encoding="utf-8")
    with pytest.raises(TransportError, match=fragment):
        YamlPageStore(tmp_path).fetch_page_record("broken")


def _response(
    mocker: MockerFixture,
    status: int,
    payload: object = None,
    text: str = "",
) -> typ.Any:
    response = mocker.Mock(spec=requests.Response)
    response.status_code = status
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


def test_http_store_fetches_with_token(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(mocker, 200, {"id": "home", "title": "Home"})
    store = HttpPageStore(
        "https://cms.example.edu/api/", token="s3cret", session=session, timeout=5
    )

    record = store.fetch_page_record("home page")

    assert record == {"id": "home", "title": "Home"}
    url = session.get.call_args.args[0]
    assert url == "https://cms.example.edu/api/pages/home%20page"
    kwargs = session.get.call_args.kwargs
    assert kwargs["headers"]["Authorization"] == "Bearer s3cret"
    assert kwargs["timeout"] == 5


def test_http_store_maps_404_to_missing(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(mocker, 404, text="not found")
    store = HttpPageStore("https://cms.example.edu", session=session)

    with pytest.raises(NotFoundError, match="Page 'home' not found"):
        PageRepository(store).get_by_id("home")


@pytest.mark.parametrize(
    ("response_args", "fragment"),
    [
        ({"status": 500, "text": "upstream exploded"}, "status 500: upstream"),
        (
            {"status": 200, "payload": requests.JSONDecodeError("bad", "doc", 0)},
            "not valid JSON",
        ),
        ({"status": 200, "payload": ["not", "an", "object"]}, "not a JSON object"),
    ],
)
def test_http_store_bad_responses(
    mocker: MockerFixture, response_args: dict[str, typ.Any], fragment: str
) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(mocker, **response_args)
    store = HttpPageStore("https://cms.example.edu", session=session)

    with pytest.raises(TransportError, match=fragment):
        store.fetch_page_record("home")


def test_http_store_network_failure(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.put.side_effect = requests.ConnectionError("refused")
    store = HttpPageStore("https://cms.example.edu", session=session)

    with pytest.raises(TransportError, match="Failed to reach page service"):
        store.persist_page_record({"id": "home"})


def test_http_store_persists_full_record(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.put.return_value = _response(
        mocker, 200, {"id": "home", "title": "Home", "revision": 9}
    )
    store = HttpPageStore("https://cms.example.edu", session=session)
    record = {"id": "home", "title": "Home", "sections": []}

    stored = store.persist_page_record(record)

    assert stored["revision"] == 9
    assert session.put.call_args.kwargs["json"] == record
    assert "Authorization" not in session.put.call_args.kwargs["headers"]
